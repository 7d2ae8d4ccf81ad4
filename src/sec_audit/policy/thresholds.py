"""Score → level → exit-code policy — single source of truth.

The synthesizer, the risk gate and every renderer must derive bands from
this module instead of hard-coding thresholds locally.
"""

from __future__ import annotations

from dataclasses import dataclass

from sec_audit.model import RiskLevel
from sec_audit.utils.exit_codes import ExitCode


@dataclass(frozen=True, slots=True)
class RiskThresholds:
    """Lower bounds for risk_score → RiskLevel mapping."""

    critical_above: float = 75.0   # strictly greater
    high_min: float = 50.0
    medium_min: float = 25.0
    low_min: float = 5.0


DEFAULT_THRESHOLDS = RiskThresholds()

# Levels that fail --ci and raise a monitoring alert.
BLOCKING_LEVELS = frozenset({RiskLevel.HIGH, RiskLevel.CRITICAL})


def risk_level_from_score(
    score: float,
    *,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> RiskLevel:
    """Map a 0–100 risk score to a ``RiskLevel``.

    Policy: >75 critical, 50–75 high, 25–50 medium, 5–25 low, <5 none.
    """
    if score > thresholds.critical_above:
        return RiskLevel.CRITICAL
    if score >= thresholds.high_min:
        return RiskLevel.HIGH
    if score >= thresholds.medium_min:
        return RiskLevel.MEDIUM
    if score >= thresholds.low_min:
        return RiskLevel.LOW
    return RiskLevel.NONE


def is_blocking(level: RiskLevel) -> bool:
    return level in BLOCKING_LEVELS


def exit_code_from_level(level: RiskLevel) -> int:
    """Map a ``RiskLevel`` to the --ci exit code.

    Policy: high/critical → 1, everything else → 0.
    """
    if is_blocking(level):
        return ExitCode.GATE_FAILED
    return ExitCode.SUCCESS


def sarif_level_from_severity(overall: float) -> str:
    """Map ``SeverityScore.overall`` (0–10) to a SARIF result level.

    Policy: ≥9.0 error, ≥7.0 warning, else note.
    """
    if overall >= 9.0:
        return "error"
    if overall >= 7.0:
        return "warning"
    return "note"


def badge_band_from_score(score: float) -> str:
    """Map a risk score to the HTML badge band.

    Policy: >75 critical, >50 high, >25 medium, else low.
    """
    if score > 75.0:
        return "critical"
    if score > 50.0:
        return "high"
    if score > 25.0:
        return "medium"
    return "low"
