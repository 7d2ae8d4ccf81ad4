"""Tests for deterministic (--ci) mode helpers."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from sec_audit.pipeline.synthesize import parse_audit
from sec_audit.reports.exporters import export_json
from sec_audit.utils.determinism import FIXED_TIMESTAMP, deterministic_timestamp, is_ci_mode


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("CI_MODE", raising=False)
    monkeypatch.delenv("DETERMINISTIC", raising=False)


class TestIsCiMode:
    def test_default_off(self) -> None:
        assert is_ci_mode() is False

    @pytest.mark.parametrize("var", ["CI_MODE", "DETERMINISTIC"])
    @pytest.mark.parametrize("value", ["1", "true", "YES"])
    def test_env_enables(self, monkeypatch, var, value) -> None:
        monkeypatch.setenv(var, value)
        assert is_ci_mode() is True

    def test_env_other_values_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("CI_MODE", "0")
        assert is_ci_mode() is False

    def test_either_variable_suffices(self, monkeypatch) -> None:
        monkeypatch.setenv("CI_MODE", "no")
        monkeypatch.setenv("DETERMINISTIC", "true")
        assert is_ci_mode() is True


class TestTimestamp:
    def test_fixed_in_ci_mode(self) -> None:
        assert deterministic_timestamp(ci_mode=True) == FIXED_TIMESTAMP

    def test_fixed_when_env_set(self, monkeypatch) -> None:
        monkeypatch.setenv("DETERMINISTIC", "1")
        assert deterministic_timestamp() == FIXED_TIMESTAMP

    def test_live_timestamp_is_utc_iso(self) -> None:
        parsed = datetime.fromisoformat(deterministic_timestamp())
        assert parsed.utcoffset() is not None
        assert parsed.utcoffset().total_seconds() == 0


class TestCiRuns:
    def test_two_ci_parses_render_identically(self, audit_doc) -> None:
        del audit_doc["scan_timestamp"]
        text = json.dumps(audit_doc)
        first = export_json(parse_audit(text, ci_mode=True), ci_mode=True)
        second = export_json(parse_audit(text, ci_mode=True), ci_mode=True)
        assert first == second
        assert json.loads(first)["scan_timestamp"] == FIXED_TIMESTAMP
