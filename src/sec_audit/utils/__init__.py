"""Shared utilities for sec_audit."""

from sec_audit.utils.determinism import (
    FIXED_TIMESTAMP,
    deterministic_timestamp,
    is_ci_mode,
)
from sec_audit.utils.exit_codes import ExitCode
from sec_audit.utils.json_norm import stable_json_dumps

__all__ = [
    "ExitCode",
    "stable_json_dumps",
    # Determinism utilities
    "FIXED_TIMESTAMP",
    "deterministic_timestamp",
    "is_ci_mode",
]
