"""Process exit codes for ``sec-audit``.

Code  Meaning
----  -------
  0   Audit completed (and passed the gate under --ci)
  1   --ci gate failed: risk level high or critical
  2   No backend configured, backend unreachable, parse or render failure
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    GATE_FAILED = 1
    ERROR = 2

    @property
    def failed(self) -> bool:
        return self is not ExitCode.SUCCESS
