"""Enums shared across the pipeline, policy and report layers."""

from __future__ import annotations

from enum import Enum


class RiskLevel(str, Enum):
    """Overall risk band of an Audit, derived from ``risk_score``."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, raw: str) -> "RiskLevel":
        """Case-insensitive lookup (backends answer "High" as often as "high")."""
        return cls(raw.strip().lower())


class VulnerabilityType(str, Enum):
    """Type tag carried by every Finding."""

    KNOWN_VULNERABILITY = "KnownVulnerability"
    WEAKNESS_CLASS = "WeaknessClass"
    ZERO_DAY = "ZeroDay"
    SUPPLY_CHAIN = "SupplyChain"
    DEPENDENCY = "Dependency"
    CONFIGURATION = "Configuration"
    CODE_PATTERN = "CodePattern"
    SECRET = "Secret"
    COMPLIANCE = "Compliance"

    @classmethod
    def parse(cls, raw: str) -> "VulnerabilityType":
        return cls(_TYPE_ALIASES.get(raw, raw))


_TYPE_ALIASES = {
    "CVE": VulnerabilityType.KNOWN_VULNERABILITY.value,
    "CWE": VulnerabilityType.WEAKNESS_CLASS.value,
}
