"""Vulnerability: a single structured security observation from synthesis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from . import VulnerabilityType


@dataclass(frozen=True, slots=True)
class SeverityScore:
    """CVSS-style composite, every component on a 0–10 scale."""

    base: float
    temporal: float
    environmental: float
    overall: float

    def to_dict(self) -> dict[str, float]:
        return {
            "base": self.base,
            "temporal": self.temporal,
            "environmental": self.environmental,
            "overall": self.overall,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SeverityScore":
        overall = float(data["overall"])
        return cls(
            base=float(data.get("base", overall)),
            temporal=float(data.get("temporal", overall)),
            environmental=float(data.get("environmental", overall)),
            overall=overall,
        )


@dataclass(frozen=True, slots=True)
class Vulnerability:
    """Immutable finding as assigned by the backend.

    Created only by the synthesizer; list order inside an Audit is the
    backend's order and is never re-sorted.
    """

    id: str
    vulnerability_type: VulnerabilityType
    severity: SeverityScore
    description: str
    affected_component: str = ""
    remediation: str = ""
    exploit_available: bool = False
    exploit_complexity: str = ""
    reference: str | None = None       # CVE/CWE identifier when the type carries one
    cvss_score: float | None = None
    affected_versions: tuple[str, ...] = ()
    fixed_versions: tuple[str, ...] = ()
    references: tuple[str, ...] = ()
    discovered_date: str | None = None
    public_date: str | None = None

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "vulnerability_type": self.vulnerability_type.value,
            "severity": self.severity.to_dict(),
            "description": self.description,
            "affected_component": self.affected_component,
            "remediation": self.remediation,
            "exploit_available": self.exploit_available,
            "exploit_complexity": self.exploit_complexity,
            "cvss_score": self.cvss_score,
            "affected_versions": list(self.affected_versions),
            "fixed_versions": list(self.fixed_versions),
            "references": list(self.references),
        }
        if self.reference is not None:
            d["reference"] = self.reference
        if self.discovered_date is not None:
            d["discovered_date"] = self.discovered_date
        if self.public_date is not None:
            d["public_date"] = self.public_date
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vulnerability":
        cvss = data.get("cvss_score")
        return cls(
            id=data["id"],
            vulnerability_type=VulnerabilityType.parse(data["vulnerability_type"]),
            severity=SeverityScore.from_dict(data["severity"]),
            description=data["description"],
            affected_component=data.get("affected_component", ""),
            remediation=data.get("remediation", ""),
            exploit_available=bool(data.get("exploit_available", False)),
            exploit_complexity=data.get("exploit_complexity", ""),
            reference=data.get("reference"),
            cvss_score=None if cvss is None else float(cvss),
            affected_versions=tuple(data.get("affected_versions", ())),
            fixed_versions=tuple(data.get("fixed_versions", ())),
            references=tuple(data.get("references", ())),
            discovered_date=data.get("discovered_date"),
            public_date=data.get("public_date"),
        )
