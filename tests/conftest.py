"""Shared fixtures: a scripted inference backend and a sample audit document."""

from __future__ import annotations

import copy
import json
import threading
from typing import Any

import pytest

from sec_audit.pipeline.synthesize import parse_audit

# Prompt markers, checked in order; the synthesis prompt embeds the other
# evidence so it must be recognised first.
PROMPT_MARKERS: tuple[tuple[str, str], ...] = (
    ("synthesis", "Perform a comprehensive security audit"),
    ("threat_intel", "current threat landscape"),
    ("dependencies", "List all dependencies"),
    ("code_patterns", "Scan for vulnerable code patterns"),
    ("configurations", "Check for security misconfigurations"),
    ("cves", "latest known-vulnerability (CVE) data"),
    ("zero_days", "potential 0-day vulnerabilities"),
)


def classify_prompt(prompt: str) -> str:
    for key, marker in PROMPT_MARKERS:
        if marker in prompt:
            return key
    raise AssertionError(f"unrecognised prompt: {prompt[:80]!r}")


class ScriptedBackend:
    """In-memory backend answering each query kind from a script.

    A script value may be a string, an exception instance (raised), or a
    list of those (consumed one per call).
    """

    name = "scripted"

    def __init__(self, script: dict[str, Any]):
        self.script = dict(script)
        self.calls: list[str] = []
        self.prompts: dict[str, str] = {}
        self._lock = threading.Lock()

    def generate(self, prompt: str, context: str | None = None) -> str:
        key = classify_prompt(prompt)
        with self._lock:
            self.calls.append(key)
            self.prompts[key] = prompt
            answer = self.script[key]
            if isinstance(answer, list):
                answer = answer.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


SAMPLE_AUDIT_DOC: dict[str, Any] = {
    "scan_timestamp": "2024-05-01T12:00:00+00:00",
    "risk_score": 82,
    "risk_level": "critical",
    "vulnerabilities": [
        {
            "id": "CVE-2024-0001",
            "vulnerability_type": "KnownVulnerability",
            "reference": "CVE-2024-0001",
            "severity": {"base": 9.5, "temporal": 9.0, "environmental": 9.0, "overall": 9.5},
            "cvss_score": 9.8,
            "description": "Remote code execution in requests",
            "affected_component": "requirements.txt",
            "affected_versions": ["<2.32.0"],
            "fixed_versions": ["2.32.0"],
            "exploit_available": True,
            "exploit_complexity": "low",
            "remediation": "Upgrade requests to 2.32.0",
            "references": ["https://example.org/CVE-2024-0001"],
        }
    ],
    "zero_day_risks": [
        {
            "pattern": "pickle.loads on request body",
            "similarity_to_known": 0.8,
            "likelihood": 0.4,
            "potential_impact": "remote code execution",
            "mitigation": "Use json instead of pickle",
        }
    ],
    "dependency_audit": {
        "total_dependencies": 12,
        "vulnerable_dependencies": [
            {
                "package": "requests",
                "current_version": "2.0.0",
                "vulnerabilities": ["CVE-2024-0001"],
                "safe_versions": ["2.32.0", "2.31.1"],
                "severity": "critical",
                "update_urgency": "immediate",
            }
        ],
    },
    "supply_chain": {
        "risk_score": 40,
        "direct_dependencies": 12,
        "transitive_dependencies": 48,
        "dependency_depth": 4,
    },
    "recommendations": [
        {
            "title": "Upgrade requests",
            "description": "Pin requests to a patched release",
            "priority": "critical",
            "effort": "low",
            "impact": "high",
        }
    ],
    "executive_summary": "Critical issues found.",
}


@pytest.fixture
def audit_doc() -> dict[str, Any]:
    """A fresh, mutable copy of the sample audit document."""
    return copy.deepcopy(SAMPLE_AUDIT_DOC)


@pytest.fixture
def sample_audit(audit_doc):
    return parse_audit(json.dumps(audit_doc))


@pytest.fixture
def make_audit(audit_doc):
    """Build an Audit from the sample document with top-level overrides."""

    def _make(**overrides: Any):
        doc = copy.deepcopy(audit_doc)
        doc.update(overrides)
        return parse_audit(json.dumps(doc))

    return _make


@pytest.fixture
def happy_script(audit_doc) -> dict[str, Any]:
    """Backend script for a cycle in which every query succeeds."""
    return {
        "dependencies": "requests==2.0.0\nflask==2.3.0",
        "code_patterns": "app.py:12 pickle.loads(request.data)",
        "configurations": "DEBUG=True in settings.py",
        "cves": "CVE-2024-0001 affects requests<2.32.0",
        "zero_days": "pickle deserialisation of untrusted input",
        "synthesis": json.dumps(audit_doc),
        "threat_intel": "Ransomware groups are exploiting CVE-2024-0001.",
    }


@pytest.fixture
def scripted():
    """The ScriptedBackend class, for tests that build their own script."""
    return ScriptedBackend
