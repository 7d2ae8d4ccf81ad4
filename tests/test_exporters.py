"""Tests for the text / JSON / SARIF / HTML exporters."""

from __future__ import annotations

import json

import pytest

from sec_audit import __version__
from sec_audit.contracts.load import validate_instance
from sec_audit.errors import RenderError
from sec_audit.model import RiskLevel
from sec_audit.model.audit import Audit
from sec_audit.reports.exporters import (
    FORMATS,
    export_audit,
    export_html,
    export_json,
    export_sarif,
    export_text,
)


def _vuln(vid: str, overall: float) -> dict:
    return {
        "id": vid,
        "vulnerability_type": "CodePattern",
        "severity": {"overall": overall},
        "description": f"{vid} description",
        "affected_component": f"src/{vid}.py",
        "remediation": f"fix {vid}",
    }


class TestDeterminism:
    @pytest.mark.parametrize("fmt", FORMATS)
    def test_repeated_rendering_is_byte_identical(self, sample_audit, fmt) -> None:
        assert export_audit(sample_audit, fmt) == export_audit(sample_audit, fmt)

    def test_unknown_format(self, sample_audit) -> None:
        with pytest.raises(RenderError, match="Unknown export format"):
            export_audit(sample_audit, "pdf")


class TestTextExporter:
    def test_sections_in_order(self, sample_audit) -> None:
        text = export_text(sample_audit)
        order = [
            "Security Audit Summary",
            "Vulnerabilities Found",
            "Potential Zero-Day Risks",
            "Dependency Analysis",
            "Supply Chain",
            "Top Recommendations",
            "Executive Summary",
        ]
        positions = [text.index(h) for h in order]
        assert positions == sorted(positions)
        assert "Risk Score: 82/100" in text
        assert "Risk Level: CRITICAL" in text
        assert "* CVE-2024-0001 - Remote code execution in requests" in text
        assert "EXPLOIT AVAILABLE" in text
        assert "requests 2.0.0 -> 2.32.0" in text

    def test_empty_sections_omitted(self) -> None:
        audit = Audit(scan_timestamp="t", risk_score=0.0, risk_level=RiskLevel.NONE)
        text = export_text(audit)
        assert "Security Audit Summary" in text
        for heading in (
            "Vulnerabilities Found",
            "Potential Zero-Day Risks",
            "Dependency Analysis",
            "Exposed Secrets",
            "Compliance",
            "Supply Chain",
            "Top Recommendations",
            "Executive Summary",
        ):
            assert heading not in text

    def test_only_top_five_recommendations(self, make_audit) -> None:
        recs = [{"title": f"rec-{i}"} for i in range(7)]
        text = export_text(make_audit(recommendations=recs))
        assert "rec-4" in text
        assert "rec-5" not in text


class TestJsonExporter:
    def test_round_trips_audit_fields(self, sample_audit) -> None:
        doc = json.loads(export_json(sample_audit))
        assert doc["risk_level"] == "critical"
        assert doc["vulnerabilities"][0]["id"] == "CVE-2024-0001"
        assert export_json(sample_audit).endswith("\n")

    def test_ci_mode_rounds_floats(self, make_audit) -> None:
        audit = make_audit(risk_score=33.333333333)
        assert json.loads(export_json(audit, ci_mode=True))["risk_score"] == 33.3333


class TestSarifExporter:
    def test_shape(self, sample_audit) -> None:
        doc = json.loads(export_sarif(sample_audit))
        assert doc["version"] == "2.1.0"
        assert "$schema" in doc
        assert len(doc["runs"]) == 1
        driver = doc["runs"][0]["tool"]["driver"]
        assert driver["name"] == "sec-audit"
        assert driver["version"] == __version__
        assert driver["informationUri"].startswith("https://")

        (result,) = doc["runs"][0]["results"]
        assert result["ruleId"] == "CVE-2024-0001"
        assert result["level"] == "error"
        assert result["message"]["text"] == "Remote code execution in requests"
        uri = result["locations"][0]["physicalLocation"]["artifactLocation"]["uri"]
        assert uri == "requirements.txt"
        assert result["fixes"][0]["description"]["text"] == "Upgrade requests to 2.32.0"
        validate_instance(doc, "sarif_subset.schema.json")

    def test_levels_follow_severity(self, make_audit) -> None:
        audit = make_audit(
            vulnerabilities=[_vuln("A", 9.5), _vuln("B", 7.5), _vuln("C", 3.0)]
        )
        results = json.loads(export_sarif(audit))["runs"][0]["results"]
        assert [(r["ruleId"], r["level"]) for r in results] == [
            ("A", "error"),
            ("B", "warning"),
            ("C", "note"),
        ]

    def test_no_vulnerabilities(self) -> None:
        audit = Audit(scan_timestamp="t", risk_score=0.0, risk_level=RiskLevel.NONE)
        assert json.loads(export_sarif(audit))["runs"][0]["results"] == []


class TestHtmlExporter:
    @pytest.mark.parametrize(
        "score, band, color",
        [
            (82, "critical", "#d32f2f"),
            (60, "high", "#f57c00"),
            (50, "medium", "#fbc02d"),
            (10, "low", "#388e3c"),
        ],
    )
    def test_badge(self, make_audit, score, band, color) -> None:
        html = export_html(make_audit(risk_score=score))
        assert f'class="risk-score {band}" style="color:{color}"' in html

    def test_contents(self, sample_audit) -> None:
        html = export_html(sample_audit)
        assert html.startswith("<!DOCTYPE html>")
        assert "Vulnerabilities (1)" in html
        assert "CVE-2024-0001" in html
        assert "Direct Dependencies: 12" in html
        assert "Critical issues found." in html

    def test_backend_text_is_escaped(self, make_audit, audit_doc) -> None:
        vuln = dict(audit_doc["vulnerabilities"][0], description="<script>alert(1)</script>")
        html = export_html(
            make_audit(vulnerabilities=[vuln], executive_summary="a & b <b>")
        )
        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "a &amp; b &lt;b&gt;" in html
