# autoplay.py
from __future__ import annotations
import argparse, os, json, random, datetime
from typing import Any, Dict, Optional
from assessment_core import config
from assessment_core.engine import AssessmentSession, SelectionEngine
from assessment_core.types import Item

def _new_run_id() -> str:
    return datetime.datetime.now().strftime("run_%Y%m%d_%H%M%S")

# keyed answer (1..5) each scripted respondent gives per trait
TRAIT_ANSWERS: Dict[str, Dict[str, int]] = {
    "executive": {"openness": 5, "conscientiousness": 1, "extraversion": 3, "agreeableness": 3, "neuroticism": 5},
    "sensory": {"openness": 3, "conscientiousness": 3, "extraversion": 2, "agreeableness": 4, "neuroticism": 4},
    "steady": {"openness": 3, "conscientiousness": 4, "extraversion": 3, "agreeableness": 4, "neuroticism": 2},
}

# latency (ms) range per profile; the executive respondent is erratic
RT_RANGE: Dict[str, tuple[float, float]] = {
    "executive": (400.0, 12000.0),
    "sensory": (2500.0, 4000.0),
    "steady": (2800.0, 3400.0),
}

def _answer_for(item: Item, profile: str, rng: random.Random) -> tuple[int, float]:
    lo, hi = RT_RANGE[profile]
    rt = rng.uniform(lo, hi)
    if item.trait:
        keyed = TRAIT_ANSWERS[profile].get(item.trait, 3)
        return (6 - keyed if item.reverse_scored else keyed), rt
    if profile == "sensory" and ("sensory" in item.tags or item.subcategory == "sensory_processing"):
        return 5, rt
    if profile == "executive" and item.category == "neurodiversity":
        return rng.choice((4, 5)), rt
    return 3, rt

def run(tier: str, profile: str, seed: Optional[int], batches: int) -> Dict[str, Any]:
    rng = random.Random(seed or 1234)
    sess = AssessmentSession(tier=tier, engine=SelectionEngine(seed=seed))

    run_id = _new_run_id()
    os.environ["RUN_ID"] = run_id; os.environ["PROFILE"] = profile

    pending = sess.start()
    for _ in range(batches + 1):
        for it in pending:
            value, rt = _answer_for(it, profile, rng)
            sess.answer(it.id, value, rt_ms=rt)
        if sess.batches >= batches: break
        pending = sess.next_batch()
        if not pending: break
    if sess.items_answered <= 0: raise RuntimeError("Driver answered 0 items.")

    sess.refresh_profile()
    by_category: Dict[str, int] = {}
    for it in sess.presented.values():
        by_category[it.category] = by_category.get(it.category, 0) + 1
    return {
        "run_id": run_id,
        "tier": tier,
        "profile": profile,
        "seed": seed,
        "session": sess.to_dict(),
        "by_category": dict(sorted(by_category.items())),
        "audit": sess.audit_events,
    }

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--tier", choices=sorted(config.BASELINE_COUNTS), default="standard")
    ap.add_argument("--profile", choices=sorted(TRAIT_ANSWERS), default="executive")
    ap.add_argument("--batches", type=int, default=3)
    ap.add_argument("--seed", type=int, default=1337)
    a = ap.parse_args()
    res = run(a.tier, a.profile, a.seed, a.batches)
    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs("reports", exist_ok=True)
    path = os.path.join("reports", f"auto_{a.tier}_{a.profile}_{ts}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(res, f, indent=2)
    print(json.dumps(res["by_category"], indent=2))
    print(f"Summary: {path}")

if __name__ == "__main__":
    main()
