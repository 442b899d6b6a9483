from __future__ import annotations

import importlib
import sys

from fastapi.testclient import TestClient

import assessment_core.question_bank as qb
from tests.conftest import build_synthetic_bank


_DEF_MODULES = [
    "assessment_core.config",
    "api.app",
]


def _reload_app(monkeypatch, bank=None):
    monkeypatch.setattr(qb, "load_bank", lambda path=None: bank if bank is not None else build_synthetic_bank())
    for name in _DEF_MODULES:
        if name in sys.modules:
            importlib.reload(sys.modules[name])
        else:
            __import__(name)
    return sys.modules["api.app"]


def _profile(**overrides):
    traits = {"openness": 50, "conscientiousness": 50, "extraversion": 50, "agreeableness": 50, "neuroticism": 50}
    traits.update(overrides)
    return traits


def test_health_and_root(monkeypatch):
    app_module = _reload_app(monkeypatch)
    client = TestClient(app_module.app)
    assert client.get("/").json()["status"] == "ok"
    health = client.get("/health").json()
    assert health["items_active"] == len(build_synthetic_bank())


def test_session_round_trip(monkeypatch):
    app_module = _reload_app(monkeypatch)
    client = TestClient(app_module.app)

    start = client.post("/session/start", json={"tier": "quick", "seed": 4})
    assert start.status_code == 200
    body = start.json()
    sid = body["session_id"]
    assert len(body["items"]) == 10
    assert body["phase"] == "broad_screening"

    for item in body["items"]:
        resp = client.post(f"/session/{sid}/answer", json={"item_id": item["id"], "value": 4, "rt_ms": 1800})
        assert resp.status_code == 200
    assert resp.json()["items_answered"] == 10

    nxt = client.post(f"/session/{sid}/next", json={"count": 8})
    assert nxt.status_code == 200
    batch = nxt.json()["items"]
    assert 0 < len(batch) <= 8
    assert not {it["id"] for it in batch} & {it["id"] for it in body["items"]}

    prof = client.get(f"/session/{sid}/profile").json()
    assert prof["batches"] == 1
    assert prof["items_presented"] == 10 + len(batch)

    audit = client.get(f"/session/{sid}/audit.json").json()
    assert audit["events"] and audit["events"][0]["batch"] == 1
    csv_resp = client.get(f"/session/{sid}/audit.csv")
    assert csv_resp.status_code == 200
    assert csv_resp.text.startswith("batch,pass,budget")


def test_session_errors(monkeypatch):
    app_module = _reload_app(monkeypatch)
    client = TestClient(app_module.app)

    assert client.post("/session/start", json={"tier": "express"}).status_code == 400
    assert client.post("/session/nope/next", json={}).status_code == 404
    assert client.get("/session/nope/profile").status_code == 404

    sid = client.post("/session/start", json={"tier": "quick"}).json()["session_id"]
    bad = client.post(f"/session/{sid}/answer", json={"item_id": "unknown", "value": 3})
    assert bad.status_code == 400


def test_stateless_selection(monkeypatch):
    app_module = _reload_app(monkeypatch)
    client = TestClient(app_module.app)

    base = client.post("/select/baseline", json={"tier": "comprehensive"})
    assert base.status_code == 200
    assert len(base.json()["items"]) == 20
    assert client.post("/select/baseline", json={"tier": "express"}).status_code == 400

    payload = {
        "traits": _profile(openness=80, conscientiousness=20, neuroticism=75),
        "exclude_ids": [],
        "total_count": 20,
    }
    resp = client.post("/select/adaptive", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert body["indicators"]["neurodiversity"] > 0.3
    assert body["budget"]["neurodiversity"] > 0
    assert any(it["category"] == "neurodiversity" for it in body["items"])

    missing = client.post("/select/adaptive", json={"traits": {"openness": 50}, "total_count": 5})
    assert missing.status_code == 400
    negative = client.post("/select/adaptive", json={"traits": _profile(), "total_count": -2})
    assert negative.status_code == 400


def test_bank_audit_endpoint(monkeypatch):
    app_module = _reload_app(monkeypatch, bank=build_synthetic_bank(nd_baseline=2))
    client = TestClient(app_module.app)
    body = client.get("/bank/audit").json()
    assert any("neurodiversity baseline" in w for w in body["warnings"])


def test_audit_exports_disabled(monkeypatch):
    monkeypatch.setenv("AUDIT_EXPORT_ENABLED", "0")
    app_module = _reload_app(monkeypatch)
    client = TestClient(app_module.app)
    sid = client.post("/session/start", json={"tier": "quick"}).json()["session_id"]
    assert client.get(f"/session/{sid}/audit.json").status_code == 404
    assert client.get(f"/session/{sid}/audit.csv").status_code == 404
    monkeypatch.delenv("AUDIT_EXPORT_ENABLED")
    importlib.reload(sys.modules["assessment_core.config"])


def test_end_session(monkeypatch):
    app_module = _reload_app(monkeypatch)
    client = TestClient(app_module.app)
    sid = client.post("/session/start", json={"tier": "quick"}).json()["session_id"]
    assert client.delete(f"/session/{sid}").status_code == 200
    assert client.get(f"/session/{sid}/profile").status_code == 404


def test_adaptive_without_answer_count_keeps_gated_items_back(monkeypatch):
    app_module = _reload_app(monkeypatch)
    client = TestClient(app_module.app)
    seen = [f"seen_{i}" for i in range(30)]
    payload = {"traits": _profile(neuroticism=70), "exclude_ids": seen, "total_count": 40}
    body = client.post("/select/adaptive", json=payload).json()
    assert "trauma_high" not in {it["id"] for it in body["items"]}

    payload["items_answered"] = 30
    body = client.post("/select/adaptive", json=payload).json()
    assert "trauma_high" in {it["id"] for it in body["items"]}
