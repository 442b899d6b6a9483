# assessment_core/policy.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple
import logging
import math
import random

from . import config
from .allocation import allocate
from .catalog import ItemCatalog, SortSpec
from .filters import (
    ByCategory,
    ByCorrelatedTraits,
    ByInstrument,
    BySubcategory,
    ByTags,
    ByTextPattern,
    ByTrait,
    ExcludeIds,
    HasFacet,
    HasSubcategory,
    IsActive,
    IsBaseline,
    MinDiscrimination,
    MinWeight,
    Not,
    Predicate,
    all_of,
    any_of,
)
from .gating import is_eligible, phase_for_count
from .indicators import estimate
from .question_bank import TRAITS
from .scoring import validate_profile
from .types import (
    Item,
    ResponseRecord,
    SelectionInputError,
    SelectionResult,
    SelectionSession,
    TraitProfile,
)

log = logging.getLogger(__name__)

_BY_WEIGHT: SortSpec = (("diagnostic_weight", True),)
_BY_WEIGHT_DISC: SortSpec = (("diagnostic_weight", True), ("discrimination_index", True))


def _emit_trace(event: Dict[str, object]) -> None:
    if not config.DEBUG_TRACE:
        return
    ordered = [f"{key}={event[key]}" for key in config.TRACE_FIELDS if key in event]
    if ordered:
        log.info("trace %s", " ".join(ordered))


def extreme_traits(profile: TraitProfile) -> List[str]:
    """Traits above EXTREME_HIGH or below EXTREME_LOW, most extreme first."""
    hits = [
        t for t in TRAITS
        if profile.traits[t] > config.EXTREME_HIGH or profile.traits[t] < config.EXTREME_LOW
    ]
    return sorted(hits, key=lambda t: (-abs(profile.traits[t] - 50.0), TRAITS.index(t)))


def uncertain_traits(profile: TraitProfile) -> List[str]:
    return [
        t for t in TRAITS
        if config.UNCERTAIN_LOW <= profile.traits[t] <= config.UNCERTAIN_HIGH
    ]


def strongest_weakest(profile: TraitProfile) -> Tuple[str, str]:
    strongest = max(TRAITS, key=lambda t: (profile.traits[t], -TRAITS.index(t)))
    weakest = min(TRAITS, key=lambda t: (profile.traits[t], TRAITS.index(t)))
    return strongest, weakest


def _communication_filter() -> Predicate:
    return any_of(ByInstrument(frozenset({config.COMMUNICATION_INSTRUMENT})), ByTags(frozenset({"communication"})))


def _processing_filter() -> Predicate:
    return any_of(ByInstrument(frozenset({config.PROCESSING_INSTRUMENT})), ByTags(frozenset({"processing"})))


def _sensory_filter() -> Predicate:
    return any_of(
        ByInstrument(frozenset({config.SENSORY_INSTRUMENT})),
        ByTags(frozenset({"sensory"})),
        BySubcategory(frozenset({config.SENSORY_SUBCATEGORY})),
    )


def _general_filter(profile: TraitProfile) -> Predicate:
    parts: List[Predicate] = []
    for trait in extreme_traits(profile):
        parts.append(all_of(ByTrait(trait), MinWeight(config.EXTREME_MIN_WEIGHT)))
    for trait in uncertain_traits(profile):
        parts.append(all_of(ByTrait(trait), MinDiscrimination(config.UNCERTAIN_MIN_DISCRIMINATION)))
    parts.append(ByCorrelatedTraits(frozenset(profile.traits)))
    strongest, weakest = strongest_weakest(profile)
    parts.append(all_of(ByTrait(strongest), HasSubcategory()))
    if weakest != strongest:
        parts.append(all_of(ByTrait(weakest), HasSubcategory()))
    return any_of(*parts)


def _pathway(instruments: Iterable[str], subcategories: Iterable[str], text_pattern: str) -> Predicate:
    return any_of(
        ByInstrument(frozenset(instruments)),
        BySubcategory(frozenset(subcategories)),
        ByTextPattern(text_pattern),
    )


def neurodiversity_filter(profile: TraitProfile) -> Predicate:
    """Neurodiversity items routed by screening pathway.

    Low conscientiousness or high neuroticism opens the ADHD pathway; low
    extraversion or a ``social_difficulty`` pattern opens the autism one.
    With neither flag the pass draws from the general instruments only.
    """
    traits = profile.traits
    pathways: List[Predicate] = []
    if (
        traits["conscientiousness"] < config.ADHD_CONSCIENTIOUSNESS_MAX
        or traits["neuroticism"] > config.ADHD_NEUROTICISM_MIN
    ):
        pathways.append(_pathway(config.ADHD_INSTRUMENTS, config.ADHD_SUBCATEGORIES, config.ADHD_TEXT_PATTERN))
    if (
        traits["extraversion"] < config.AUTISM_EXTRAVERSION_MAX
        or config.SOCIAL_DIFFICULTY_PATTERN in profile.patterns
    ):
        pathways.append(_pathway(config.AUTISM_INSTRUMENTS, config.AUTISM_SUBCATEGORIES, config.AUTISM_TEXT_PATTERN))
    if not pathways:
        pathways.append(ByInstrument(frozenset(config.GENERAL_ND_INSTRUMENTS)))
    return all_of(ByCategory("neurodiversity"), any_of(*pathways))


@dataclass
class BatchState:
    profile: TraitProfile
    session: SelectionSession
    excluded: FrozenSet[str]
    total: int
    chosen: List[Item] = field(default_factory=list)
    chosen_ids: Set[str] = field(default_factory=set)
    events: List[Dict[str, object]] = field(default_factory=list)

    def room(self) -> int:
        return max(self.total - len(self.chosen), 0)


class AdaptiveSelector:
    """Category-balanced follow-up batches driven by the running trait profile.

    Passes run in a fixed order (facets, communication, processing, general
    personality, neurodiversity, sensory, other, fallback); each one only sees
    active non-baseline items that are neither excluded nor already chosen,
    and every candidate goes through the sensitivity gate before acceptance.
    """

    def __init__(self, catalog: ItemCatalog, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.rng = rng or config.make_rng()

    def select_adaptive(
        self,
        profile: TraitProfile,
        exclude_ids: Iterable[str],
        total_count: int,
        session: Optional[SelectionSession] = None,
        responses: Iterable[ResponseRecord] = (),
    ) -> SelectionResult:
        validate_profile(profile)
        if total_count < 0:
            raise SelectionInputError(f"total_count must be >= 0, got {total_count}")

        excluded = frozenset(exclude_ids)
        if session is None:
            # presented ids are not answers; without a session nothing is unlocked
            session = SelectionSession(exclude_ids=excluded, items_answered=0, phase=phase_for_count(0))
        else:
            excluded = excluded | session.exclude_ids

        indicators = estimate(profile, responses)
        budget = allocate(total_count, indicators)
        st = BatchState(profile=profile, session=session, excluded=excluded, total=total_count)
        log.debug("adaptive batch: total=%d indicators=%s budget=%s", total_count, indicators, budget)

        facet_used = self._facet_pass(st, budget.facets)
        comm_used = self._fill(st, "communication", _communication_filter(), _BY_WEIGHT_DISC, budget.communication)

        proc_used = 0
        traits = profile.traits
        if (
            traits["openness"] > config.PROCESSING_OPENNESS_MIN
            or traits["conscientiousness"] < config.PROCESSING_CONSCIENTIOUSNESS_MAX
        ):
            proc_used = self._fill(st, "processing", _processing_filter(), _BY_WEIGHT_DISC, budget.processing)

        carry = (budget.facets - facet_used) + (budget.communication - comm_used) + (budget.processing - proc_used)
        self._fill(st, "personality", _general_filter(profile), _BY_WEIGHT_DISC, budget.personality + carry)

        if budget.neurodiversity > 0:
            self._fill(st, "neurodiversity", neurodiversity_filter(profile), _BY_WEIGHT, budget.neurodiversity)
        if budget.sensory > 0:
            self._fill(st, "sensory", _sensory_filter(), _BY_WEIGHT, budget.sensory)

        self._fill(st, "other", ByInstrument(frozenset(config.OTHER_INSTRUMENTS)), _BY_WEIGHT, budget.other)

        if st.room() > 0:
            self._fill(st, "fallback", MinWeight(config.FALLBACK_MIN_WEIGHT), _BY_WEIGHT, st.room())

        items = list(st.chosen)
        self.rng.shuffle(items)
        items = items[:total_count]
        if len(items) < total_count:
            log.warning("adaptive batch is short: %d of %d items", len(items), total_count)
        return SelectionResult(items=items, indicators=indicators, budget=budget, events=st.events)

    def _facet_pass(self, st: BatchState, budget: int) -> int:
        targets = extreme_traits(st.profile)
        if not targets or budget <= 0:
            return 0
        quota = int(math.ceil(budget / len(targets)))
        used = 0
        for trait in targets:
            take = min(quota, budget - used)
            if take <= 0:
                break
            used += self._fill(st, f"facet:{trait}", all_of(ByTrait(trait), HasFacet()), _BY_WEIGHT, take)
        return used

    def _fill(self, st: BatchState, name: str, pred: Predicate, sort: SortSpec, budget: int) -> int:
        room = min(max(budget, 0), st.room())
        event: Dict[str, object] = {"pass": name, "budget": budget, "candidates": 0, "accepted": 0, "gated": 0}
        if room > 0:
            query = all_of(
                IsActive(),
                Not(IsBaseline()),
                ExcludeIds(frozenset(st.excluded | st.chosen_ids)),
                pred,
            )
            candidates = self.catalog.find(query, sort=sort)
            event["candidates"] = len(candidates)
            accepted = gated = 0
            for item in candidates:
                if accepted >= room:
                    break
                if item.incompatible_with & st.excluded:
                    continue
                if not is_eligible(item, st.session, st.profile):
                    gated += 1
                    continue
                st.chosen.append(item)
                st.chosen_ids.add(item.id)
                accepted += 1
            event["accepted"] = accepted
            event["gated"] = gated
        st.events.append(event)
        log.debug("pass %s budget=%s accepted=%s gated=%s", name, budget, event["accepted"], event["gated"])
        _emit_trace(event)
        return int(event["accepted"])
