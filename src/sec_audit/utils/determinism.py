"""Determinism utilities for CI-reproducible audit output.

When --ci is enabled:
- Missing scan timestamps are filled with a known epoch
- Floating point values in JSON output are rounded

Renderers never read the clock; the only timestamp in a report is the
Audit's own ``scan_timestamp``.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone

# Fixed timestamp for CI mode (ISO 8601 with timezone)
FIXED_TIMESTAMP = "2000-01-01T00:00:00+00:00"


def is_ci_mode() -> bool:
    """True when CI_MODE or DETERMINISTIC is set to 1/true/yes."""
    if os.environ.get("CI_MODE", "").lower() in ("1", "true", "yes"):
        return True
    return os.environ.get("DETERMINISTIC", "").lower() in ("1", "true", "yes")


def deterministic_timestamp(ci_mode: bool = False) -> str:
    """Return a timestamp string.

    In CI mode, returns FIXED_TIMESTAMP.
    Otherwise returns current UTC time in ISO 8601 format.
    """
    if ci_mode or is_ci_mode():
        return FIXED_TIMESTAMP
    return datetime.now(timezone.utc).isoformat()
