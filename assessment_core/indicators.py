# assessment_core/indicators.py
from __future__ import annotations

import re
import statistics
from typing import Iterable, List, Sequence

from . import config
from .types import Indicators, ResponseRecord, TraitProfile


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


def latency_cv(responses: Sequence[ResponseRecord]) -> float:
    """Coefficient of variation of recorded latencies; 0.0 below two samples."""
    rts = [float(r.rt_ms) for r in responses if r.rt_ms is not None and r.rt_ms > 0]
    if len(rts) < 2:
        return 0.0
    mean = statistics.fmean(rts)
    if mean <= 0:
        return 0.0
    return statistics.pstdev(rts) / mean


def extreme_share(responses: Sequence[ResponseRecord]) -> float:
    likert = [r.value for r in responses if 1 <= r.value <= 5]
    if not likert:
        return 0.0
    return sum(1 for v in likert if v in (1, 5)) / len(likert)


def _keyword_pattern() -> re.Pattern:
    words = "|".join(re.escape(kw) for kw in config.SENSORY_KEYWORDS)
    return re.compile(rf"\b(?:{words})\b", re.IGNORECASE)


def is_sensory_flagged(resp: ResponseRecord) -> bool:
    """Tag or subcategory decides; wording only counts for untagged items."""
    if "sensory" in resp.tags or resp.subcategory == config.SENSORY_SUBCATEGORY:
        return True
    if resp.tags or resp.subcategory:
        return False
    return bool(_keyword_pattern().search(resp.text))


def neurodiversity_indicator(profile: TraitProfile, responses: Sequence[ResponseRecord] = ()) -> float:
    t = profile.traits
    score = 0.0
    # executive-function challenge
    if t["neuroticism"] > config.EF_NEUROTICISM_MIN and t["conscientiousness"] < config.EF_CONSCIENTIOUSNESS_MAX:
        score += 0.2
    if (
        t["openness"] > config.HIGH_OPENNESS_MIN
        and abs(t["extraversion"] - 50.0) > config.EXTRAVERSION_DEVIATION_MIN
    ):
        score += 0.15
    # attention and social-communication pathways
    if t["conscientiousness"] < config.PATHWAY_TRAIT_MAX:
        score += 0.15
    if t["extraversion"] < config.PATHWAY_TRAIT_MAX:
        score += 0.15
    if latency_cv(responses) > config.LATENCY_CV_MIN:
        score += 0.15
    if extreme_share(responses) > config.EXTREME_RESPONSE_SHARE_MIN:
        score += 0.1
    return min(score, 1.0)


def sensory_indicator(profile: TraitProfile, responses: Sequence[ResponseRecord] = ()) -> float:
    score = 0.0
    if profile.traits["neuroticism"] > config.SENSORY_NEUROTICISM_MIN:
        score += 0.2
    for resp in responses:
        if resp.value >= config.SENSORY_RESPONSE_MIN and is_sensory_flagged(resp):
            score += 0.15
    return min(score, 1.0)


def communication_indicator(profile: TraitProfile) -> float:
    return _clamp01(abs(profile.traits["extraversion"] - 50.0) / 50.0)


def estimate(profile: TraitProfile, responses: Iterable[ResponseRecord] = ()) -> Indicators:
    history: List[ResponseRecord] = list(responses)
    return Indicators(
        neurodiversity=neurodiversity_indicator(profile, history),
        sensory=sensory_indicator(profile, history),
        communication=communication_indicator(profile),
    )
