from __future__ import annotations

from assessment_core.audit_export import to_csv, to_json


EVENTS = [
    {"batch": 1, "pass": "facet:openness", "budget": 2, "candidates": 4, "accepted": 2, "gated": 0},
    {"batch": 1, "pass": "fallback", "budget": "3", "candidates": 9, "accepted": 3},
]


def test_json_normalizes_events():
    body = to_json(EVENTS)
    assert body["events"][0]["pass"] == "facet:openness"
    assert body["events"][1]["budget"] == 3
    assert body["events"][1]["gated"] == 0


def test_csv_has_fixed_header():
    lines = [line for line in to_csv(EVENTS).strip().splitlines() if line]
    assert lines[0] == "batch,pass,budget,candidates,accepted,gated"
    assert len(lines) == len(EVENTS) + 1
    assert lines[2].startswith("1,fallback,3,9,3")


def test_empty_export():
    assert to_json([]) == {"events": []}
    assert to_csv([]).strip() == "batch,pass,budget,candidates,accepted,gated"
