# assessment_core/allocation.py
from __future__ import annotations

import math
from dataclasses import fields

from . import config
from .types import CategoryBudget, Indicators, SelectionInputError


def _shares(indicators: Indicators) -> dict[str, float]:
    """Category shares of the batch as fractions, before rounding."""

    personality = config.SHARE_PERSONALITY
    facets = config.SHARE_FACETS
    communication = min(
        config.SHARE_COMMUNICATION_MAX,
        config.SHARE_COMMUNICATION_BASE + indicators.communication * config.SHARE_COMMUNICATION_BASE,
    )
    neurodiversity = 0.0
    sensory = 0.0

    if indicators.neurodiversity > config.INDICATOR_THRESHOLD:
        neurodiversity = min(config.SHARE_ND_MAX, indicators.neurodiversity * config.SHARE_ND_SCALE)
        personality = max(config.SHARE_PERSONALITY_FLOOR, personality - neurodiversity / 2.0)

    if indicators.sensory > config.INDICATOR_THRESHOLD:
        sensory = min(config.SHARE_SENSORY_MAX, indicators.sensory * config.SHARE_SENSORY_SCALE)
        facets = max(config.SHARE_FACETS_FLOOR, facets - sensory / 2.0)

    return {
        "personality": personality,
        "facets": facets,
        "communication": communication,
        "processing": config.SHARE_PROCESSING,
        "neurodiversity": neurodiversity,
        "sensory": sensory,
        "other": config.SHARE_OTHER,
    }


def allocate(total: int, indicators: Indicators) -> CategoryBudget:
    """Split ``total`` items into the seven category budgets.

    Triggered neurodiversity/sensory shares round up so a category that
    crossed its threshold keeps at least one slot; everything else rounds
    down. If the rounded counts overshoot ``total`` they are scaled by
    ``total / sum`` and floored, which is the only normalisation applied.
    """

    if total < 0:
        raise SelectionInputError(f"total item count must be >= 0, got {total}")
    shares = _shares(indicators)
    counts: dict[str, int] = {}
    for name, share in shares.items():
        raw = total * share
        if name in ("neurodiversity", "sensory") and share > 0:
            counts[name] = int(math.ceil(raw - 1e-9))
        else:
            counts[name] = int(math.floor(raw + 1e-9))

    s = sum(counts.values())
    if s > total:
        factor = total / s
        counts = {k: int(math.floor(v * factor)) for k, v in counts.items()}

    return CategoryBudget(**{f.name: max(0, counts[f.name]) for f in fields(CategoryBudget)})
