from __future__ import annotations

import logging
import random
from typing import List

from . import config
from .audit_export import to_csv
from .catalog import InMemoryCatalog
from .engine import AssessmentSession, SelectionEngine
from .question_bank import TRAITS
from .types import Item, RequiredSignals, Sensitivity, TriggerCondition


def _maybe_enable_trace() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    if config.DEBUG_TRACE:
        logging.getLogger("assessment_core.policy").setLevel(logging.INFO)


def _synthetic_bank() -> List[Item]:
    items: List[Item] = []
    for trait in TRAITS:
        for idx in range(4):
            items.append(Item(
                id=f"smoke_{trait}_base_{idx}", text=f"{trait} baseline #{idx}",
                category="personality", trait=trait, is_baseline=True,
                baseline_priority=idx + 1, tier="core",
            ))
        for idx in range(6):
            items.append(Item(
                id=f"smoke_{trait}_facet_{idx}", text=f"{trait} facet #{idx}",
                category="personality", trait=trait, facet=f"{trait}_facet_{idx % 3}",
                correlated_traits=frozenset({trait}),
                diagnostic_weight=float(2 + idx % 3), discrimination_index=0.5 + idx * 0.05,
            ))
    for idx in range(12):
        items.append(Item(
            id=f"smoke_nd_base_{idx}", text=f"Neurodiversity screen #{idx}",
            category="neurodiversity", is_baseline=True, baseline_priority=idx + 1, tier="core",
        ))
        items.append(Item(
            id=f"smoke_nd_{idx}", text=f"Focus and routine #{idx}", category="neurodiversity",
            instrument="ASRS-5", diagnostic_weight=3.0,
        ))
    for idx in range(4):
        items.append(Item(
            id=f"smoke_sensory_{idx}", text="Loud sounds and bright light bother me.",
            category="neurodiversity", instrument=config.SENSORY_INSTRUMENT,
            tags=frozenset({"sensory"}), diagnostic_weight=2.5,
        ))
        items.append(Item(
            id=f"smoke_comm_{idx}", text=f"Communication style #{idx}", category="cognitive",
            instrument=config.COMMUNICATION_INSTRUMENT, trait="extraversion",
            tags=frozenset({"communication"}), diagnostic_weight=2.0,
        ))
        items.append(Item(
            id=f"smoke_proc_{idx}", text=f"Processing style #{idx}", category="cognitive",
            instrument=config.PROCESSING_INSTRUMENT, tags=frozenset({"processing"}),
            diagnostic_weight=2.0,
        ))
    for instrument in config.OTHER_INSTRUMENTS:
        items.append(Item(
            id=f"smoke_{instrument.lower()}", text=f"{instrument} item", category="attachment",
            instrument=instrument, diagnostic_weight=2.0,
        ))
    items.append(Item(
        id="smoke_trauma_high", text="I sometimes feel disconnected from my body.",
        category="trauma_screening", instrument="NEURLYN_TRAUMA", diagnostic_weight=4.0,
        sensitivity=Sensitivity.HIGH,
        required_signals=RequiredSignals(
            min_question_count=30,
            trigger_conditions=(TriggerCondition("neuroticism", min_score=60),),
        ),
    ))
    return items


def run_smoke_session(batches: int = 3) -> None:
    _maybe_enable_trace()

    rng = random.Random(config.DEBUG_SEED or 7)
    engine = SelectionEngine(InMemoryCatalog(_synthetic_bank()), seed=config.DEBUG_SEED or 7)
    session = AssessmentSession("comprehensive", engine=engine)
    logging.info("Starting synthetic comprehensive run with DEBUG_SEED=%s", config.DEBUG_SEED)

    pending = session.start()
    for batch_no in range(batches + 1):
        for item in pending:
            session.answer(item.id, rng.randint(1, 5), rt_ms=rng.uniform(1500, 9000))
        if batch_no == batches:
            break
        pending = session.next_batch()
        logging.info(
            "Batch %d: %d items phase=%s answered=%d",
            session.batches, len(pending), session.phase, session.items_answered,
        )
        if not pending:
            logging.info("Item bank exhausted")
            break

    session.refresh_profile()
    logging.info("Final profile: %s", session.profile.traits)
    logging.info("Audit events:\n%s", to_csv(session.audit_events))


if __name__ == "__main__":  # pragma: no cover
    run_smoke_session()
