from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from . import config
from .catalog import InMemoryCatalog, ItemCatalog
from .filters import ByCategory, ByTrait, HasFacet, IsBaseline, Not, all_of
from .question_bank import TRAITS, load_bank
from .types import CATEGORIES, Item, Sensitivity


def _blank_trait() -> dict[str, int]:
    return {"baseline": 0, "adaptive": 0, "facet": 0}


def coverage(catalog: ItemCatalog) -> dict[str, object]:
    """Active-item counts per trait, category and sensitivity tier."""

    traits: dict[str, dict[str, int]] = {}
    for trait in TRAITS:
        row = _blank_trait()
        row["baseline"] = catalog.count_active(all_of(ByTrait(trait), ByCategory("personality"), IsBaseline()))
        row["adaptive"] = catalog.count_active(all_of(ByTrait(trait), Not(IsBaseline())))
        row["facet"] = catalog.count_active(all_of(ByTrait(trait), HasFacet(), Not(IsBaseline())))
        traits[trait] = row

    categories = {cat: catalog.count_active(ByCategory(cat)) for cat in CATEGORIES}
    nd_baseline = catalog.count_active(all_of(ByCategory("neurodiversity"), IsBaseline()))
    return {
        "traits": traits,
        "categories": {k: v for k, v in categories.items() if v},
        "nd_baseline": nd_baseline,
        "active_total": catalog.count_active(),
    }


def audit_items(items: Iterable[Item]) -> dict[str, object]:
    items = list(items)
    catalog = InMemoryCatalog(items)
    cov = coverage(catalog)

    sensitivity = {level.name: 0 for level in Sensitivity}
    inactive = 0
    ungated = 0
    for item in items:
        if not item.active:
            inactive += 1
            continue
        sensitivity[item.sensitivity.name] += 1
        if item.sensitivity >= Sensitivity.MODERATE and item.required_signals is None:
            ungated += 1

    warnings: list[str] = []
    traits: dict[str, dict[str, int]] = cov["traits"]  # type: ignore[assignment]
    for trait, row in traits.items():
        if row["baseline"] < config.BANK_MIN_BASELINE_PER_TRAIT:
            warnings.append(
                f"{trait} baseline has {row['baseline']} (<{config.BANK_MIN_BASELINE_PER_TRAIT})"
            )
        if row["facet"] == 0:
            warnings.append(f"{trait} has no facet items for extreme-score follow-up")

    nd_baseline = int(cov["nd_baseline"])  # type: ignore[arg-type]
    if nd_baseline < config.BANK_MIN_ND_BASELINE:
        warnings.append(f"neurodiversity baseline has {nd_baseline} (<{config.BANK_MIN_ND_BASELINE})")

    for cat in ("personality", "neurodiversity"):
        n = catalog.count_active(ByCategory(cat))
        if n < config.BANK_MIN_PER_CATEGORY:
            warnings.append(f"category {cat} has {n} active items (<{config.BANK_MIN_PER_CATEGORY})")

    if ungated:
        warnings.append(f"{ungated} MODERATE+ items have no required_signals")

    totals = {"items": len(items), "inactive": inactive, "active": cov["active_total"]}
    return {"coverage": cov, "sensitivity": sensitivity, "warnings": warnings, "totals": totals}


def print_report(summary: dict[str, object]) -> None:
    cov: dict[str, object] = summary["coverage"]  # type: ignore[assignment]
    print("=== Bank Coverage ===")
    traits: dict[str, dict[str, int]] = cov["traits"]  # type: ignore[assignment]
    for trait in TRAITS:
        row = traits[trait]
        print(f"  {trait:<18} baseline:{row['baseline']:3d}  adaptive:{row['adaptive']:3d}  facet:{row['facet']:3d}")
    print(f"  neurodiversity baseline: {cov['nd_baseline']}")
    print("\nCategories:", cov["categories"])
    print("Sensitivity:", summary["sensitivity"])

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path = Path("/tmp/bank_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    print(text)
    return text


def main(_argv: list[str] | None = None) -> int:
    items = load_bank()
    summary = audit_items(items)
    print_report(summary)
    write_summary(summary)
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
