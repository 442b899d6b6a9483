"""Item bank loading with explicit default resolution.

Raw bank records may omit fields. Each omission is resolved through the
fallback tables below rather than through dataclass defaults, so the loaded
bank never depends on whatever the record author forgot to write.
"""
from __future__ import annotations

import json
import importlib.resources as ir
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from . import config
from .types import CATEGORIES, Item, RequiredSignals, Sensitivity, TriggerCondition

TRAITS = ["openness", "conscientiousness", "extraversion", "agreeableness", "neuroticism"]

ITEM_TIERS = ("free", "core", "comprehensive", "specialized", "quick", "standard", "deep", "screening")

# field -> value used when the record leaves it out
FIELD_DEFAULTS: Dict[str, Any] = {
    "tier": "core",
    "sensitivity": "NONE",
    "active": True,
    "diagnostic_weight": 1.0,
    "discrimination_index": 0.0,
    "instrument": "UNSPECIFIED",
    "is_baseline": False,
    "reverse_scored": False,
}

SEVERITY_LEVELS: Dict[str, int] = {"minimal": 1, "mild": 2, "moderate": 3, "severe": 4, "extreme": 5}


def resolve_field(record: Mapping[str, Any], name: str) -> Any:
    value = record.get(name)
    if value is None:
        return FIELD_DEFAULTS[name]
    return value


def resolve_tier(record: Mapping[str, Any]) -> str:
    tier = str(resolve_field(record, "tier"))
    if tier not in ITEM_TIERS:
        raise ValueError(f"item {record.get('id')!r}: unknown tier {tier!r}")
    return tier


def resolve_sensitivity(record: Mapping[str, Any]) -> Sensitivity:
    label = str(resolve_field(record, "sensitivity")).upper()
    try:
        return Sensitivity[label]
    except KeyError:
        raise ValueError(f"item {record.get('id')!r}: unknown sensitivity {label!r}") from None


def _signals_from_dict(raw: Optional[Mapping[str, Any]]) -> Optional[RequiredSignals]:
    if not raw:
        return None
    conditions = tuple(
        TriggerCondition(
            dimension=str(c.get("dimension", "")),
            min_score=c.get("min_score"),
            max_score=c.get("max_score"),
            min_level=c.get("min_level"),
        )
        for c in raw.get("trigger_conditions") or []
    )
    min_count = raw.get("min_question_count")
    return RequiredSignals(
        min_question_count=int(min_count) if min_count is not None else None,
        required_phase=raw.get("required_phase"),
        trigger_conditions=conditions,
        any_of=bool(raw.get("any_of", False)),
    )


def item_from_dict(record: Mapping[str, Any]) -> Item:
    iid = record.get("id")
    if not iid:
        raise ValueError("item record without id")
    category = record.get("category")
    if category not in CATEGORIES:
        raise ValueError(f"item {iid!r}: unknown category {category!r}")
    is_baseline = bool(resolve_field(record, "is_baseline"))
    priority = record.get("baseline_priority")
    if is_baseline and priority is None:
        raise ValueError(f"item {iid!r}: baseline item without baseline_priority")
    return Item(
        id=str(iid),
        text=str(record.get("text", "")),
        category=category,
        instrument=str(resolve_field(record, "instrument")),
        subcategory=record.get("subcategory"),
        trait=record.get("trait"),
        facet=record.get("facet"),
        tags=frozenset(record.get("tags") or ()),
        correlated_traits=frozenset(record.get("correlated_traits") or ()),
        diagnostic_weight=float(resolve_field(record, "diagnostic_weight")),
        discrimination_index=float(resolve_field(record, "discrimination_index")),
        sensitivity=resolve_sensitivity(record),
        required_signals=_signals_from_dict(record.get("required_signals")),
        is_baseline=is_baseline,
        baseline_priority=int(priority) if priority is not None else None,
        tier=resolve_tier(record),
        reverse_scored=bool(resolve_field(record, "reverse_scored")),
        incompatible_with=frozenset(record.get("incompatible_with") or ()),
        active=bool(resolve_field(record, "active")),
    )


def items_from_records(records: Iterable[Mapping[str, Any]]) -> List[Item]:
    return [item_from_dict(r) for r in records]


def load_bank(path: str | None = None) -> List[Item]:
    source = path or config.ITEM_BANK_PATH
    if source:
        data = Path(source).read_text(encoding="utf-8")
    else:
        data = ir.files(__package__).joinpath("data/bank.json").read_text(encoding="utf-8")
    return items_from_records(json.loads(data))
