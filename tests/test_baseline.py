from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace

import pytest

from assessment_core.baseline import BaselineSelector, baseline_target
from assessment_core.catalog import InMemoryCatalog
from assessment_core.config import make_rng
from assessment_core.question_bank import TRAITS
from assessment_core.types import Sensitivity, UnknownTierError
from tests.conftest import build_synthetic_bank


def _selector(items, seed: int = 3) -> BaselineSelector:
    return BaselineSelector(InMemoryCatalog(items), make_rng(seed))


def test_comprehensive_is_balanced(synthetic_bank):
    items = _selector(synthetic_bank).select_baseline("comprehensive")
    assert len(items) == 20
    per_trait = Counter(it.trait for it in items if it.category == "personality")
    assert per_trait == {t: 2 for t in TRAITS}
    assert sum(1 for it in items if it.category == "neurodiversity") == 10
    assert len({it.id for it in items}) == 20


def test_quick_uses_core_items_by_priority(synthetic_bank):
    items = _selector(synthetic_bank).select_baseline("quick")
    assert len(items) == baseline_target("quick") == 10
    assert all(it.tier == "core" for it in items)
    priorities = [it.baseline_priority for it in items]
    assert priorities == sorted(priorities)


def test_standard_allows_comprehensive_tier(synthetic_bank):
    items = _selector(synthetic_bank).select_baseline("standard")
    assert len(items) == 20
    assert {it.tier for it in items} == {"core", "comprehensive"}
    assert all(it.is_baseline for it in items)


def test_unknown_tier():
    with pytest.raises(UnknownTierError):
        baseline_target("express")
    with pytest.raises(UnknownTierError):
        _selector(build_synthetic_bank()).select_baseline("express")


def test_short_catalog_returns_what_exists(caplog):
    bank = build_synthetic_bank(baseline_per_trait=1)
    with caplog.at_level(logging.WARNING, logger="assessment_core.baseline"):
        items = _selector(bank).select_baseline("quick")
    assert len(items) == 5
    assert "short" in caplog.text


def test_inactive_and_sensitive_baseline_items_skipped(synthetic_bank):
    bank = []
    for it in synthetic_bank:
        if it.id == "openness_base_0":
            it = replace(it, active=False)
        elif it.id == "conscientiousness_base_0":
            it = replace(it, sensitivity=Sensitivity.MODERATE)
        bank.append(it)
    ids = {it.id for it in _selector(bank).select_baseline("quick")}
    assert "openness_base_0" not in ids
    assert "conscientiousness_base_0" not in ids
    assert len(ids) == 8
