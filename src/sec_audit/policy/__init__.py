"""CI gating and alerting policy."""

from sec_audit.policy.gate import Decision, GateMode, decide
from sec_audit.policy.thresholds import (
    BLOCKING_LEVELS,
    DEFAULT_THRESHOLDS,
    RiskThresholds,
    exit_code_from_level,
    is_blocking,
    risk_level_from_score,
)

__all__ = [
    "BLOCKING_LEVELS",
    "DEFAULT_THRESHOLDS",
    "Decision",
    "GateMode",
    "RiskThresholds",
    "decide",
    "exit_code_from_level",
    "is_blocking",
    "risk_level_from_score",
]
