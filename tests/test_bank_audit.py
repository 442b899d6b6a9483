from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import assessment_core.audit_bank as audit_bank
from assessment_core import config
from assessment_core.types import Item, Sensitivity
from tests.conftest import build_synthetic_bank


def test_audit_flags_sparse_coverage(tmp_path):
    bank = build_synthetic_bank(baseline_per_trait=1, facets_per_trait=0, nd_baseline=3)

    summary = audit_bank.audit_items(bank)
    assert summary["warnings"], "expected sparse coverage warnings"
    joined = "\n".join(summary["warnings"])
    assert "openness baseline has 1" in joined
    assert "neuroticism has no facet items" in joined
    assert "neurodiversity baseline has 3" in joined

    outfile = tmp_path / "bank_audit.json"
    text = audit_bank.write_summary(summary, path=outfile)
    assert outfile.read_text(encoding="utf-8").strip() == text


def test_audit_flags_ungated_sensitive_items(monkeypatch):
    monkeypatch.setattr(config, "BANK_MIN_PER_CATEGORY", 0)
    bank = build_synthetic_bank() + [
        Item(id="raw", text="t", category="clinical", sensitivity=Sensitivity.HIGH),
    ]
    summary = audit_bank.audit_items(bank)
    assert summary["sensitivity"]["HIGH"] == 2
    assert summary["warnings"] == ["1 MODERATE+ items have no required_signals"]


def test_inactive_items_not_counted(synthetic_bank):
    bank = [replace(it, active=False) if it.id.startswith("openness_base") else it for it in synthetic_bank]
    summary = audit_bank.audit_items(bank)
    assert summary["coverage"]["traits"]["openness"]["baseline"] == 0
    assert summary["totals"]["inactive"] == 4


def test_main_returns_warning_exit(monkeypatch, capsys):
    bank = build_synthetic_bank(nd_baseline=2)
    monkeypatch.setattr(audit_bank, "load_bank", lambda: bank)

    exit_code = audit_bank.main([])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "neurodiversity baseline" in captured.out
    assert Path("/tmp/bank_audit.json").exists()
