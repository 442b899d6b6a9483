"""Sensitivity gating for clinical and trauma-adjacent content.

Higher-sensitivity items must never be the respondent's first contact with
the instrument and must only surface when the accumulated trait signal
warrants it. Anything the gate cannot evaluate counts as unmet.
"""
from __future__ import annotations

from typing import Optional

from . import config
from .question_bank import SEVERITY_LEVELS
from .types import Item, RequiredSignals, Sensitivity, SelectionSession, TraitProfile, TriggerCondition


def phase_for_count(items_answered: int) -> str:
    phase = config.PHASES[0][1]
    for lower, name in config.PHASES:
        if items_answered >= lower:
            phase = name
    return phase


def severity_level(score: float) -> str:
    if score < 20: return "minimal"
    if score < 40: return "mild"
    if score < 60: return "moderate"
    if score < 80: return "severe"
    return "extreme"


def sensitivity_floor(sensitivity: Sensitivity) -> int:
    return {
        Sensitivity.NONE: 0,
        Sensitivity.LOW: config.SENSITIVITY_FLOOR_LOW,
        Sensitivity.MODERATE: config.SENSITIVITY_FLOOR_MODERATE,
        Sensitivity.HIGH: config.SENSITIVITY_FLOOR_HIGH,
        Sensitivity.EXTREME: config.SENSITIVITY_FLOOR_EXTREME,
    }[sensitivity]


def condition_met(cond: TriggerCondition, profile: Optional[TraitProfile]) -> bool:
    if profile is None or not cond.dimension:
        return False
    score = profile.score(cond.dimension)
    if score is None:
        return False
    try:
        score = float(score)
    except (TypeError, ValueError):
        return False
    if cond.min_score is not None and score < cond.min_score:
        return False
    if cond.max_score is not None and score > cond.max_score:
        return False
    if cond.min_level is not None:
        required = SEVERITY_LEVELS.get(str(cond.min_level).lower())
        if required is None:
            return False
        if SEVERITY_LEVELS[severity_level(score)] < required:
            return False
    return True


def _triggers_met(signals: RequiredSignals, profile: Optional[TraitProfile]) -> bool:
    conditions = signals.trigger_conditions
    if not conditions:
        return True
    if signals.any_of:
        return any(condition_met(c, profile) for c in conditions)
    return all(condition_met(c, profile) for c in conditions)


def is_eligible(item: Item, session: SelectionSession, profile: Optional[TraitProfile]) -> bool:
    if item.sensitivity == Sensitivity.NONE:
        return True
    if session.items_answered < sensitivity_floor(item.sensitivity):
        return False
    signals = item.required_signals or RequiredSignals()
    if signals.min_question_count is not None and session.items_answered < signals.min_question_count:
        return False
    if signals.required_phase is not None and session.phase != signals.required_phase:
        return False
    return _triggers_met(signals, profile)
