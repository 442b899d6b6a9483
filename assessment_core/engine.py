# assessment_core/engine.py
from __future__ import annotations
from typing import Dict, Iterable, List, Optional
import logging

from . import config
from .baseline import BaselineSelector, baseline_target
from .catalog import InMemoryCatalog, ItemCatalog
from .gating import phase_for_count
from .policy import AdaptiveSelector
from .question_bank import load_bank
from .scoring import neutral_profile, score_profile
from .types import Item, ResponseRecord, SelectionResult, SelectionSession, TraitProfile

log = logging.getLogger(__name__)


class SelectionEngine:
    """The two entry points the orchestration layer calls."""

    def __init__(self, catalog: Optional[ItemCatalog] = None, seed: Optional[int] = None):
        self.catalog = catalog if catalog is not None else InMemoryCatalog(load_bank())
        rng = config.make_rng(seed)
        self.baseline = BaselineSelector(self.catalog, rng)
        self.adaptive = AdaptiveSelector(self.catalog, rng)

    def select_baseline(self, tier: str) -> List[Item]:
        return self.baseline.select_baseline(tier)

    def select_adaptive(
        self,
        profile: TraitProfile,
        exclude_ids: Iterable[str],
        total_count: int,
        session: Optional[SelectionSession] = None,
        responses: Iterable[ResponseRecord] = (),
    ) -> SelectionResult:
        return self.adaptive.select_adaptive(profile, exclude_ids, total_count, session, responses)


class AssessmentSession:
    """Baseline block followed by adaptive batches for one respondent.

    Owns the state the engine itself never holds: presented ids (the
    exclusion set, which only grows), recorded answers, and the profile
    re-scored before each adaptive batch.
    """

    def __init__(self, tier: str = "standard", engine: Optional[SelectionEngine] = None, seed: Optional[int] = None):
        baseline_target(tier)
        self.tier = tier
        self.engine = engine or SelectionEngine(seed=seed)
        self.presented: Dict[str, Item] = {}
        self.responses: List[ResponseRecord] = []
        self.profile: TraitProfile = neutral_profile()
        self.batches = 0
        self.audit_events: List[Dict[str, object]] = []

    @property
    def items_answered(self) -> int:
        return len(self.responses)

    @property
    def phase(self) -> str:
        return phase_for_count(self.items_answered)

    @property
    def exclude_ids(self) -> frozenset:
        return frozenset(self.presented)

    def _present(self, items: List[Item]) -> None:
        for it in items:
            self.presented[it.id] = it

    def start(self) -> List[Item]:
        items = self.engine.select_baseline(self.tier)
        self._present(items)
        log.info("session started: tier=%s baseline=%d", self.tier, len(items))
        return items

    def answer(self, item_id: str, value: int, rt_ms: Optional[float] = None) -> ResponseRecord:
        item = self.presented.get(item_id)
        if item is None:
            raise ValueError(f"item {item_id!r} was not presented in this session")
        if any(r.item_id == item_id for r in self.responses):
            raise ValueError(f"item {item_id!r} already answered")
        try:
            val = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"answer for {item_id!r} must be a Likert value 1..5") from None
        if not 1 <= val <= 5:
            raise ValueError(f"answer for {item_id!r} must be a Likert value 1..5")
        rec = ResponseRecord(
            item_id=item_id, value=val, rt_ms=rt_ms, text=item.text, tags=item.tags, subcategory=item.subcategory,
        )
        self.responses.append(rec)
        return rec

    def refresh_profile(self) -> TraitProfile:
        self.profile = score_profile(self.presented, self.responses, prior=self.profile)
        return self.profile

    def next_batch(self, count: Optional[int] = None) -> List[Item]:
        total = config.ADAPTIVE_BATCH_SIZE if count is None else int(count)
        profile = self.refresh_profile()
        session = SelectionSession(
            exclude_ids=self.exclude_ids, items_answered=self.items_answered, phase=self.phase
        )
        res = self.engine.select_adaptive(profile, session.exclude_ids, total, session, self.responses)
        self.batches += 1
        for evt in res.events:
            self.audit_events.append({"batch": self.batches, **evt})
        self._present(res.items)
        return res.items

    def to_dict(self) -> Dict[str, object]:
        return {
            "tier": self.tier,
            "phase": self.phase,
            "items_answered": self.items_answered,
            "items_presented": len(self.presented),
            "batches": self.batches,
            "profile": {"traits": dict(self.profile.traits), "patterns": list(self.profile.patterns)},
        }
