from __future__ import annotations

import pytest

from assessment_core import config
from assessment_core.catalog import InMemoryCatalog
from assessment_core.engine import AssessmentSession, SelectionEngine
from assessment_core.types import UnknownTierError


def _session(bank, tier: str = "comprehensive") -> AssessmentSession:
    return AssessmentSession(tier, engine=SelectionEngine(InMemoryCatalog(bank), seed=9))


def test_session_runs_baseline_then_batches(synthetic_bank):
    sess = _session(synthetic_bank)
    baseline = sess.start()
    assert len(baseline) == 20
    for it in baseline:
        value = (2 if it.reverse_scored else 4) if it.trait == "neuroticism" else 2
        sess.answer(it.id, value, rt_ms=1500)
    assert sess.items_answered == 20
    assert sess.phase == "trait_building"

    batch = sess.next_batch(10)
    assert 0 < len(batch) <= 10
    assert not {it.id for it in batch} & {it.id for it in baseline}
    assert sess.batches == 1
    assert sess.profile.traits["neuroticism"] == 75.0
    assert all(evt["batch"] == 1 for evt in sess.audit_events)


def test_exclusion_set_only_grows(synthetic_bank):
    sess = _session(synthetic_bank)
    sess.start()
    seen = set(sess.exclude_ids)
    for _ in range(3):
        batch = sess.next_batch(8)
        ids = {it.id for it in batch}
        assert not ids & seen
        seen |= ids
        assert sess.exclude_ids == frozenset(seen)


def test_answer_validation(synthetic_bank):
    sess = _session(synthetic_bank, tier="quick")
    first = sess.start()[0]
    with pytest.raises(ValueError):
        sess.answer("never_presented", 3)
    with pytest.raises(ValueError):
        sess.answer(first.id, 7)
    sess.answer(first.id, 3)
    with pytest.raises(ValueError):
        sess.answer(first.id, 3)


def test_default_batch_size(monkeypatch, synthetic_bank):
    monkeypatch.setattr(config, "ADAPTIVE_BATCH_SIZE", 6)
    sess = _session(synthetic_bank)
    sess.start()
    assert len(sess.next_batch()) == 6


def test_unknown_tier_rejected_up_front(synthetic_bank):
    with pytest.raises(UnknownTierError):
        _session(synthetic_bank, tier="express")


def test_to_dict(synthetic_bank):
    sess = _session(synthetic_bank, tier="quick")
    sess.start()
    out = sess.to_dict()
    assert out["tier"] == "quick"
    assert out["items_presented"] == 10
    assert out["items_answered"] == 0
    assert set(out["profile"]["traits"]) == set(sess.profile.traits)
