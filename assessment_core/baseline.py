# assessment_core/baseline.py
from __future__ import annotations

import logging
import random
from typing import List, Optional

from . import config
from .catalog import ItemCatalog
from .filters import ByCategory, ByTier, ByTrait, IsActive, IsBaseline, all_of
from .gating import is_eligible, phase_for_count
from .question_bank import TRAITS
from .types import Item, SelectionSession, UnknownTierError

log = logging.getLogger(__name__)

_BY_PRIORITY = (("baseline_priority", False),)


def baseline_target(tier: str) -> int:
    try:
        return config.BASELINE_COUNTS[tier]
    except KeyError:
        known = ", ".join(sorted(config.BASELINE_COUNTS))
        raise UnknownTierError(f"unknown assessment tier {tier!r} (expected one of: {known})") from None


class BaselineSelector:
    """Fixed first block of items, balanced across the five traits."""

    def __init__(self, catalog: ItemCatalog, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.rng = rng or config.make_rng()
        self._session = SelectionSession(items_answered=0, phase=phase_for_count(0))

    def _eligible(self, items: List[Item]) -> List[Item]:
        return [it for it in items if is_eligible(it, self._session, None)]

    def _query(self, tier: str, *extra) -> List[Item]:
        allowed = frozenset(config.BASELINE_ALLOWED_TIERS[tier])
        pred = all_of(IsActive(), IsBaseline(), ByTier(allowed), *extra)
        return self._eligible(self.catalog.find(pred, sort=_BY_PRIORITY))

    def select_baseline(self, tier: str) -> List[Item]:
        target = baseline_target(tier)
        expected = target
        if tier == "comprehensive":
            expected = min(target, len(TRAITS) * config.COMPREHENSIVE_PER_TRAIT + config.COMPREHENSIVE_ND_QUOTA)
            chosen: List[Item] = []
            for trait in TRAITS:
                picks = self._query(tier, ByCategory("personality"), ByTrait(trait))
                chosen.extend(picks[: config.COMPREHENSIVE_PER_TRAIT])
            seen = {it.id for it in chosen}
            nd = [it for it in self._query(tier, ByCategory("neurodiversity")) if it.id not in seen]
            chosen.extend(nd[: config.COMPREHENSIVE_ND_QUOTA])
            self.rng.shuffle(chosen)
        else:
            chosen = self._query(tier)
        out = chosen[:target]
        if len(out) < expected:
            log.warning("baseline for tier %s is short: %d of %d items", tier, len(out), expected)
        return out
