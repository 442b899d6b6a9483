from __future__ import annotations

import pytest

from assessment_core import config
from assessment_core.catalog import InMemoryCatalog
from assessment_core.question_bank import TRAITS
from assessment_core.types import Item, RequiredSignals, Sensitivity, TraitProfile, TriggerCondition


def build_synthetic_bank(
    *,
    baseline_per_trait: int = 4,
    facets_per_trait: int = 4,
    nd_baseline: int = 12,
    nd_adaptive: int = 8,
    include_side_instruments: bool = True,
    include_gated: bool = True,
) -> list[Item]:
    """Create a deterministic synthetic bank for tests and smoke runs."""

    items: list[Item] = []
    priority = 1
    for trait in TRAITS:
        for idx in range(baseline_per_trait):
            items.append(
                Item(
                    id=f"{trait}_base_{idx}",
                    text=f"{trait} baseline #{idx}",
                    category="personality",
                    trait=trait,
                    is_baseline=True,
                    baseline_priority=priority,
                    tier="core" if idx < 2 else "comprehensive",
                    reverse_scored=idx % 2 == 1,
                )
            )
            priority += 1
        for idx in range(facets_per_trait):
            items.append(
                Item(
                    id=f"{trait}_facet_{idx}",
                    text=f"{trait} facet #{idx}",
                    category="personality",
                    trait=trait,
                    facet=f"{trait}_f{idx}",
                    correlated_traits=frozenset({trait}),
                    diagnostic_weight=4.0 - idx * 0.5,
                    discrimination_index=0.8 - idx * 0.1,
                )
            )

    for idx in range(nd_baseline):
        items.append(
            Item(
                id=f"nd_base_{idx}",
                text=f"Neurodiversity screen #{idx}",
                category="neurodiversity",
                instrument="ASRS-5",
                is_baseline=True,
                baseline_priority=100 + idx,
                tier="specialized",
            )
        )
    for idx in range(nd_adaptive):
        items.append(
            Item(
                id=f"nd_{idx}",
                text=f"Focus and routine #{idx}",
                category="neurodiversity",
                instrument="ASRS-5",
                diagnostic_weight=3.0,
            )
        )

    if include_side_instruments:
        for idx in range(4):
            items.append(
                Item(
                    id=f"sensory_{idx}",
                    text="Loud sounds and bright light bother me.",
                    category="neurodiversity",
                    instrument=config.SENSORY_INSTRUMENT,
                    subcategory="sensory_processing",
                    tags=frozenset({"sensory"}),
                    diagnostic_weight=2.5,
                )
            )
            items.append(
                Item(
                    id=f"comm_{idx}",
                    text=f"Communication style #{idx}",
                    category="interactive",
                    instrument=config.COMMUNICATION_INSTRUMENT,
                    tags=frozenset({"communication"}),
                    diagnostic_weight=2.0,
                )
            )
            items.append(
                Item(
                    id=f"proc_{idx}",
                    text=f"Processing style #{idx}",
                    category="cognitive",
                    instrument=config.PROCESSING_INSTRUMENT,
                    tags=frozenset({"processing"}),
                    diagnostic_weight=2.0,
                )
            )
        for instrument in config.OTHER_INSTRUMENTS:
            items.append(
                Item(
                    id=f"other_{instrument.lower()}",
                    text=f"{instrument} item",
                    category="attachment",
                    instrument=instrument,
                    diagnostic_weight=2.0,
                )
            )

    if include_gated:
        items.append(
            Item(
                id="trauma_high",
                text="I sometimes feel disconnected from my body.",
                category="trauma_screening",
                instrument="NEURLYN_TRAUMA",
                sensitivity=Sensitivity.HIGH,
                required_signals=RequiredSignals(
                    min_question_count=30,
                    trigger_conditions=(TriggerCondition("neuroticism", min_score=60),),
                ),
                diagnostic_weight=5.0,
            )
        )

    return items


def make_profile(**overrides: float) -> TraitProfile:
    traits = {t: 50.0 for t in TRAITS}
    traits.update(overrides)
    return TraitProfile(traits=traits)


@pytest.fixture
def synthetic_bank() -> list[Item]:
    return build_synthetic_bank()


@pytest.fixture
def catalog(synthetic_bank) -> InMemoryCatalog:
    return InMemoryCatalog(synthetic_bank)
