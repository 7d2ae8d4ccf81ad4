"""Audit — the immutable, schema-aligned risk assessment for one cycle.

Field names match the wire format in ``data/schemas/audit.schema.json``.
Every list is held as a tuple so an Audit cannot be mutated once the
synthesizer has built it; the executive summary changes only through
:meth:`Audit.with_summary_appendix`, which returns a new object.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, ClassVar

from . import RiskLevel
from .finding import Vulnerability


class _Record:
    """Generic (de)serialisation for flat records of scalars and string lists."""

    __slots__ = ()

    # Nested record lists: field name -> record class
    _NESTED: ClassVar[dict[str, type]] = {}

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in dataclasses.fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, tuple):
                value = [v.to_dict() if isinstance(v, (_Record, Vulnerability)) else v for v in value]
            elif isinstance(value, (_Record, Vulnerability)):
                value = value.to_dict()
            elif isinstance(value, RiskLevel):
                value = value.value
            out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Any:
        kwargs: dict[str, Any] = {}
        for f in dataclasses.fields(cls):  # type: ignore[arg-type]
            if f.name not in data:
                continue
            value = data[f.name]
            nested = cls._NESTED.get(f.name)
            if nested is not None:
                value = tuple(nested.from_dict(item) for item in value)
            elif isinstance(value, list):
                value = tuple(value)
            kwargs[f.name] = value
        return cls(**kwargs)


# ── zero-day ───────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ZeroDayRisk(_Record):
    pattern: str
    description: str = ""
    similarity_to_known: float = 0.0     # 0.0 – 1.0
    likelihood: float = 0.0              # 0.0 – 1.0
    potential_impact: str = ""
    mitigation: str = ""
    detection_confidence: float = 0.0


# ── dependencies ───────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class VulnerableDependency(_Record):
    """A dependency with known vulnerabilities.

    ``safe_versions`` keeps the backend's order; the first entry is the
    remediation target used by the AutoFixer.
    """

    package: str
    current_version: str = ""
    vulnerabilities: tuple[str, ...] = ()
    safe_versions: tuple[str, ...] = ()
    severity: str = ""
    update_urgency: str = ""


@dataclass(frozen=True, slots=True)
class OutdatedDependency(_Record):
    package: str
    current_version: str = ""
    latest_version: str = ""
    versions_behind: int = 0
    security_updates: int = 0
    breaking_changes: bool = False


@dataclass(frozen=True, slots=True)
class LicenseIssue(_Record):
    package: str
    license: str = ""
    issue: str = ""
    compatibility: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class UnmaintainedPackage(_Record):
    package: str
    last_update: str | None = None
    days_since_update: int = 0
    open_issues: int = 0
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TyposquattingRisk(_Record):
    package: str
    similar_to: str = ""
    risk_score: float = 0.0
    indicators: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DependencyAudit(_Record):
    _NESTED: ClassVar[dict[str, type]] = {
        "vulnerable_dependencies": VulnerableDependency,
        "outdated_dependencies": OutdatedDependency,
        "license_issues": LicenseIssue,
        "unmaintained_packages": UnmaintainedPackage,
        "typosquatting_risks": TyposquattingRisk,
    }

    total_dependencies: int = 0
    vulnerable_dependencies: tuple[VulnerableDependency, ...] = ()
    outdated_dependencies: tuple[OutdatedDependency, ...] = ()
    license_issues: tuple[LicenseIssue, ...] = ()
    unmaintained_packages: tuple[UnmaintainedPackage, ...] = ()
    typosquatting_risks: tuple[TyposquattingRisk, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.total_dependencies == 0 and not any(
            getattr(self, name) for name in self._NESTED
        )


# ── code & secrets ─────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CodeVulnerability(_Record):
    vulnerability_class: str
    file: str = ""
    line_range: tuple[int, ...] = ()
    severity: str = ""
    description: str = ""
    code_snippet: str = ""
    fix: str = ""
    cwe_id: str | None = None
    owasp_category: str | None = None


@dataclass(frozen=True, slots=True)
class ExposedSecret(_Record):
    secret_type: str
    file: str = ""
    line: int = 0
    entropy: float = 0.0
    confidence: float = 0.0
    masked_value: str = ""
    remediation: str = ""


@dataclass(frozen=True, slots=True)
class SecretsScan(_Record):
    _NESTED: ClassVar[dict[str, type]] = {"secrets": ExposedSecret}

    secrets_found: int = 0
    secrets: tuple[ExposedSecret, ...] = ()
    false_positives: int = 0


# ── compliance ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ComplianceStandard(_Record):
    name: str                          # OWASP, PCI-DSS, HIPAA, GDPR, SOC2
    version: str = ""
    compliance_level: float = 0.0      # 0 – 100
    missing_controls: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ComplianceViolation(_Record):
    standard: str
    requirement: str = ""
    description: str = ""
    severity: str = ""
    remediation: str = ""


@dataclass(frozen=True, slots=True)
class ComplianceReport(_Record):
    _NESTED: ClassVar[dict[str, type]] = {
        "standards": ComplianceStandard,
        "violations": ComplianceViolation,
    }

    compliance_score: float = 0.0      # 0 – 100
    standards: tuple[ComplianceStandard, ...] = ()
    violations: tuple[ComplianceViolation, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.standards and not self.violations


# ── supply chain ───────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class HighRiskPackage(_Record):
    package: str
    risk_factors: tuple[str, ...] = ()
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AttackVector(_Record):
    vector_type: str
    description: str = ""
    likelihood: float = 0.0
    impact: float = 0.0
    mitigation: str = ""


@dataclass(frozen=True, slots=True)
class SupplyChainAnalysis(_Record):
    _NESTED: ClassVar[dict[str, type]] = {
        "high_risk_packages": HighRiskPackage,
        "attack_vectors": AttackVector,
    }

    risk_score: float = 0.0            # 0 – 100
    direct_dependencies: int = 0
    transitive_dependencies: int = 0
    dependency_depth: int = 0
    high_risk_packages: tuple[HighRiskPackage, ...] = ()
    attack_vectors: tuple[AttackVector, ...] = ()

    @property
    def is_empty(self) -> bool:
        return (
            self.direct_dependencies == 0
            and self.transitive_dependencies == 0
            and not self.high_risk_packages
            and not self.attack_vectors
        )


# ── recommendations ────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SecurityRecommendation(_Record):
    title: str
    description: str = ""
    priority: str = ""
    category: str = ""
    implementation: str = ""
    effort: str = ""
    impact: str = ""


# ── the audit ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Audit(_Record):
    """Unified risk assessment for one scan cycle."""

    _NESTED: ClassVar[dict[str, type]] = {
        "vulnerabilities": Vulnerability,
        "zero_day_risks": ZeroDayRisk,
        "code_vulnerabilities": CodeVulnerability,
        "recommendations": SecurityRecommendation,
    }

    scan_timestamp: str
    risk_score: float                  # 0 – 100
    risk_level: RiskLevel
    vulnerabilities: tuple[Vulnerability, ...] = ()
    zero_day_risks: tuple[ZeroDayRisk, ...] = ()
    dependency_audit: DependencyAudit = field(default_factory=DependencyAudit)
    code_vulnerabilities: tuple[CodeVulnerability, ...] = ()
    secrets_scan: SecretsScan = field(default_factory=SecretsScan)
    compliance: ComplianceReport = field(default_factory=ComplianceReport)
    supply_chain: SupplyChainAnalysis = field(default_factory=SupplyChainAnalysis)
    recommendations: tuple[SecurityRecommendation, ...] = ()
    executive_summary: str = ""

    def __post_init__(self) -> None:
        if not 0.0 <= self.risk_score <= 100.0:
            raise ValueError(f"risk_score must be within 0..100, got {self.risk_score}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Audit":
        """Build an Audit from an already schema-validated document.

        ``risk_level`` must be supplied by the caller; the synthesizer
        derives it from the score rather than trusting the backend.
        """
        return cls(
            scan_timestamp=data["scan_timestamp"],
            risk_score=float(data["risk_score"]),
            risk_level=RiskLevel.parse(data["risk_level"]),
            vulnerabilities=tuple(
                Vulnerability.from_dict(v) for v in data.get("vulnerabilities", ())
            ),
            zero_day_risks=tuple(
                ZeroDayRisk.from_dict(z) for z in data.get("zero_day_risks", ())
            ),
            dependency_audit=DependencyAudit.from_dict(data.get("dependency_audit", {})),
            code_vulnerabilities=tuple(
                CodeVulnerability.from_dict(c) for c in data.get("code_vulnerabilities", ())
            ),
            secrets_scan=SecretsScan.from_dict(data.get("secrets_scan", {})),
            compliance=ComplianceReport.from_dict(data.get("compliance", {})),
            supply_chain=SupplyChainAnalysis.from_dict(data.get("supply_chain", {})),
            recommendations=tuple(
                SecurityRecommendation.from_dict(r) for r in data.get("recommendations", ())
            ),
            executive_summary=data.get("executive_summary", ""),
        )

    def with_summary_appendix(self, text: str) -> "Audit":
        """Return a copy whose executive summary has *text* appended."""
        return dataclasses.replace(self, executive_summary=self.executive_summary + text)
