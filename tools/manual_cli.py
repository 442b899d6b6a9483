# tools/manual_cli.py
from __future__ import annotations
import argparse, json, time
from assessment_core.engine import AssessmentSession
from assessment_core.types import Item

LIKERT = "1=strongly disagree .. 5=strongly agree"

def _ask_int(prompt: str, default: int = 3) -> int:
    s = input(prompt).strip()
    if s == "": return default
    try:
        v = int(s)
    except ValueError:
        return default
    return v if 1 <= v <= 5 else default

def ask(it: Item) -> tuple[int, float]:
    tag = it.trait or it.category
    print(f"\n--- {tag} | {it.instrument} | id={it.id} ---")
    print(f"{it.text}  ({LIKERT})")
    t0 = time.perf_counter(); v = _ask_int("Your answer [3]: "); rt = (time.perf_counter() - t0) * 1000.0
    return v, rt

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--tier", choices=["quick", "standard", "comprehensive"], default="quick")
    ap.add_argument("--batches", type=int, default=2)
    ap.add_argument("--batch-size", type=int, default=None)
    ap.add_argument("--seed", type=int, default=None)
    a = ap.parse_args()

    sess = AssessmentSession(tier=a.tier, seed=a.seed)
    print(f"Manual {a.tier} assessment. Ctrl+C to exit.")
    try:
        pending = sess.start()
        while pending:
            for it in pending:
                v, rt = ask(it)
                sess.answer(it.id, v, rt_ms=rt)
            if sess.batches >= a.batches: break
            pending = sess.next_batch(a.batch_size)
            print(f"\n[phase={sess.phase} answered={sess.items_answered}]")
    except KeyboardInterrupt:
        print("\nInterrupted.")

    sess.refresh_profile()
    print("\nProfile:")
    print(json.dumps(sess.to_dict(), indent=2))

if __name__ == "__main__":
    main()
