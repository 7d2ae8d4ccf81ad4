"""Risk gate: pure mapping from an Audit to CI and alerting decisions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sec_audit.model.audit import Audit
from sec_audit.model.finding import Vulnerability
from sec_audit.policy.thresholds import exit_code_from_level, is_blocking
from sec_audit.utils.exit_codes import ExitCode

# Number of findings carried by a monitoring alert.
ALERT_TOP_N = 5


class GateMode(str, Enum):
    CI = "ci"
    MONITOR = "monitor"


@dataclass(frozen=True, slots=True)
class Decision:
    mode: GateMode
    exit_code: int = ExitCode.SUCCESS
    alert: bool = False
    alert_findings: tuple[Vulnerability, ...] = ()

    @property
    def passed(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS and not self.alert


def decide(audit: Audit, mode: GateMode) -> Decision:
    """Decide the outcome for *audit* under *mode*.

    CI: exit code 1 iff the risk level is high or critical.
    MONITOR: alert iff the risk level is high or critical; the payload is
    the first five vulnerabilities in the Audit's own order.
    """
    if mode is GateMode.CI:
        return Decision(mode=mode, exit_code=exit_code_from_level(audit.risk_level))

    if is_blocking(audit.risk_level):
        return Decision(
            mode=mode,
            alert=True,
            alert_findings=audit.vulnerabilities[:ALERT_TOP_N],
        )
    return Decision(mode=mode)
