from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional
from .question_bank import TRAITS
from .types import Item, ProfileError, ResponseRecord, TraitProfile

NEUTRAL_SCORE = 50.0


def validate_profile(profile: TraitProfile) -> TraitProfile:
    """Reject profiles the engine would otherwise have to guess about."""
    if not isinstance(profile, TraitProfile):
        raise ProfileError(f"expected TraitProfile, got {type(profile).__name__}")
    missing = [t for t in TRAITS if t not in profile.traits]
    if missing:
        raise ProfileError(f"profile is missing trait scores: {', '.join(missing)}")
    for trait in TRAITS:
        val = profile.traits[trait]
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            raise ProfileError(f"trait {trait!r} must be numeric, got {val!r}")
        if not 0.0 <= float(val) <= 100.0:
            raise ProfileError(f"trait {trait!r} must be within 0..100, got {val}")
    return profile


def profile_from_mapping(traits: Mapping[str, float], patterns: Iterable[str] = (),
                         dimensions: Optional[Mapping[str, float]] = None) -> TraitProfile:
    return validate_profile(TraitProfile(
        traits=dict(traits), patterns=list(patterns), dimensions=dict(dimensions or {}),
    ))


def neutral_profile() -> TraitProfile:
    return TraitProfile(traits={t: NEUTRAL_SCORE for t in TRAITS})


def _likert(item: Item, value: int) -> Optional[int]:
    if not 1 <= int(value) <= 5:
        return None
    return 6 - int(value) if item.reverse_scored else int(value)


def score_profile(
    items: Mapping[str, Item],
    responses: Iterable[ResponseRecord],
    prior: Optional[TraitProfile] = None,
) -> TraitProfile:
    """Mean keyed Likert per trait mapped to 0..100; unmeasured traits keep the prior."""
    base = prior or neutral_profile()
    sums: Dict[str, List[int]] = {t: [] for t in TRAITS}
    for resp in responses:
        item = items.get(resp.item_id)
        if item is None or item.trait not in sums:
            continue
        v = _likert(item, resp.value)
        if v is not None:
            sums[item.trait].append(v)
    traits: Dict[str, float] = {}
    for trait in TRAITS:
        vals = sums[trait]
        if vals:
            traits[trait] = round((sum(vals) / len(vals) - 1.0) / 4.0 * 100.0, 2)
        else:
            traits[trait] = float(base.traits.get(trait, NEUTRAL_SCORE))
    return TraitProfile(traits=traits, patterns=list(base.patterns), dimensions=dict(base.dimensions))
