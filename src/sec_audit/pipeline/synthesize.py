"""Synthesis — one composite query turned into a validated :class:`Audit`.

The backend's answer must be a single JSON document matching
``audit.schema.json``. The risk level is never taken on trust: it is
re-derived from ``risk_score`` via :mod:`sec_audit.policy.thresholds`.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import jsonschema

from sec_audit.backends import InferenceBackend
from sec_audit.contracts.load import validate_instance
from sec_audit.core.config import AuditConfig
from sec_audit.errors import SynthesisParseError
from sec_audit.model import RiskLevel
from sec_audit.model.audit import Audit
from sec_audit.pipeline.enrich import ThreatEvidence
from sec_audit.pipeline.prompts import AUDIT_SECTIONS, OUTPUT_CONTRACT, focus_section
from sec_audit.pipeline.scan import ScanEvidence
from sec_audit.policy.thresholds import risk_level_from_score
from sec_audit.utils.determinism import deterministic_timestamp

logger = logging.getLogger(__name__)

AUDIT_SCHEMA = "audit.schema.json"

_FENCE_RE = re.compile(r"^\s*```[\w+-]*[ \t]*\n(?P<body>.*?)\n?```\s*$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove one surrounding Markdown code fence, if present."""
    m = _FENCE_RE.match(text)
    if m:
        return m.group("body")
    return text.strip()


def build_audit_prompt(
    scan: ScanEvidence,
    threats: ThreatEvidence,
    config: AuditConfig | None = None,
) -> str:
    config = config or AuditConfig()
    focus = focus_section(
        zero_day=config.zero_day,
        supply_chain=config.supply_chain,
        compliance=config.compliance,
    )
    parts = [
        "Perform a comprehensive security audit with the following data:",
        f"DEPENDENCIES:\n{scan.dependencies}",
        f"CODE PATTERNS:\n{scan.code_patterns}",
        f"CONFIGURATIONS:\n{scan.configurations}",
        f"CVE DATA:\n{threats.cves}",
        f"POTENTIAL 0-DAY PATTERNS:\n{threats.zero_days}",
        AUDIT_SECTIONS,
    ]
    if focus:
        parts.append(focus)
    parts.append(OUTPUT_CONTRACT)
    return "\n\n".join(parts)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-JSON constant {name}")


def parse_audit(text: str, *, ci_mode: bool = False) -> Audit:
    """Turn a synthesis response into an :class:`Audit`.

    Raises :class:`SynthesisParseError` when the text is not JSON, does not
    match the audit schema, or cannot be built into the model.
    """
    body = strip_code_fence(text)
    try:
        doc: Any = json.loads(body, parse_constant=_reject_constant)
    except ValueError as exc:
        raise SynthesisParseError(
            f"synthesis response is not valid JSON: {exc}", stage="synthesis"
        ) from exc

    try:
        validate_instance(doc, AUDIT_SCHEMA)
    except jsonschema.ValidationError as exc:
        where = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise SynthesisParseError(
            f"synthesis response does not match the audit schema at {where}: {exc.message}",
            stage="synthesis",
        ) from exc

    score = float(doc["risk_score"])
    derived = risk_level_from_score(score)
    claimed = doc.get("risk_level")
    if claimed is not None:
        try:
            claimed_level: RiskLevel | None = RiskLevel.parse(str(claimed))
        except ValueError:
            claimed_level = None
        if claimed_level is not derived:
            logger.warning(
                "backend risk_level %r disagrees with score %.1f; using %s",
                claimed,
                score,
                derived.value,
            )
    doc["risk_level"] = derived.value

    if not doc.get("scan_timestamp"):
        doc["scan_timestamp"] = deterministic_timestamp(ci_mode)

    try:
        return Audit.from_dict(doc)
    except (KeyError, TypeError, ValueError) as exc:
        raise SynthesisParseError(
            f"synthesis response could not be built into an audit: {exc}",
            stage="synthesis",
        ) from exc


class AuditSynthesizer:
    """Issue the composite audit query and parse its answer (no retry here)."""

    def __init__(self, backend: InferenceBackend, config: AuditConfig | None = None) -> None:
        self.backend = backend
        self.config = config or AuditConfig()

    def synthesize(self, scan: ScanEvidence, threats: ThreatEvidence) -> Audit:
        prompt = build_audit_prompt(scan, threats, self.config)
        logger.info("synthesizing audit")
        response = self.backend.generate(prompt)
        audit = parse_audit(response, ci_mode=self.config.ci_mode)
        logger.info(
            "audit synthesized: score=%.1f level=%s vulnerabilities=%d",
            audit.risk_score,
            audit.risk_level.value,
            len(audit.vulnerabilities),
        )
        return audit
