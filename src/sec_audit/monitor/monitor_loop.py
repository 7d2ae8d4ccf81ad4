"""Continuous monitoring: re-run the audit cycle on a fixed interval.

Ticks are scheduled with the ``schedule`` library on a private
``schedule.Scheduler`` so several loops never share the module-level
default scheduler. The first tick runs immediately; the wait between ticks
is :meth:`CancelToken.wait`, so cancelling stops the loop at once instead
of after the current sleep.

A failed cycle (scan, enrichment, synthesis or backend error) is logged and
the loop stays RUNNING; only cancellation stops it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import schedule

from sec_audit.core.cancel import CancelToken
from sec_audit.errors import CYCLE_ERRORS, CancelledError
from sec_audit.model.audit import Audit
from sec_audit.policy.gate import Decision, GateMode, decide

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 3600.0


class MonitorState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True, slots=True)
class TickResult:
    """Outcome of one monitoring tick."""

    tick: int
    audit: Optional[Audit] = None
    decision: Optional[Decision] = None
    new_vulnerability_ids: tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.audit is not None


def log_alert(decision: Decision, audit: Audit) -> None:
    """Default alert sink: one ERROR line plus the alert findings."""
    logger.error(
        "SECURITY ALERT: %s risk (%.1f/100), immediate action required",
        audit.risk_level.value.upper(),
        audit.risk_score,
    )
    for vuln in decision.alert_findings:
        logger.error("  %s: %s", vuln.id, vuln.description)


class MonitorLoop:
    """Run ``run_cycle`` every *interval* seconds until cancelled."""

    def __init__(
        self,
        run_cycle: Callable[[], Audit],
        *,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        cancel: CancelToken | None = None,
        on_audit: Callable[[Audit], None] | None = None,
        on_alert: Callable[[Decision, Audit], None] | None = log_alert,
    ):
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.run_cycle = run_cycle
        self.interval = interval
        self.cancel = cancel or CancelToken()
        self.on_audit = on_audit
        self.on_alert = on_alert

        self.state = MonitorState.STOPPED
        self.previous_audit: Optional[Audit] = None
        self.last_tick: Optional[TickResult] = None
        self.tick_count = 0
        self.failure_count = 0

        self._scheduler = schedule.Scheduler()

    # ── tick ────────────────────────────────────────────────────────

    def tick(self) -> TickResult:
        """Run one cycle, gate it in monitor mode and emit alerts."""
        self.tick_count += 1
        n = self.tick_count
        logger.info("monitor tick %d", n)

        try:
            audit = self.run_cycle()
        except CYCLE_ERRORS as exc:
            self.failure_count += 1
            logger.error("monitor tick %d failed: %s", n, exc)
            result = TickResult(tick=n, error=str(exc))
            self.last_tick = result
            return result

        decision = decide(audit, GateMode.MONITOR)
        new_ids = _new_vulnerability_ids(self.previous_audit, audit)
        if new_ids:
            logger.info("tick %d: %d new vulnerabilities: %s", n, len(new_ids), ", ".join(new_ids))

        self.previous_audit = audit
        result = TickResult(tick=n, audit=audit, decision=decision, new_vulnerability_ids=new_ids)
        self.last_tick = result

        if self.on_audit is not None:
            self.on_audit(audit)
        if decision.alert and self.on_alert is not None:
            self.on_alert(decision, audit)
        return result

    # ── loop ────────────────────────────────────────────────────────

    def run(self, max_ticks: int | None = None) -> None:
        """Block until cancelled (or until *max_ticks* ticks have run)."""
        self._scheduler.clear()
        self._scheduler.every(self.interval).seconds.do(self.tick)
        self.state = MonitorState.RUNNING
        logger.info("monitor started (every %gs)", self.interval)
        try:
            if not self.cancel.cancelled:
                self._scheduler.run_all()
            while not self.cancel.cancelled:
                if max_ticks is not None and self.tick_count >= max_ticks:
                    break
                idle = self._scheduler.idle_seconds
                if idle is not None and idle > 0 and self.cancel.wait(idle):
                    break
                self._scheduler.run_pending()
        except CancelledError:
            logger.info("monitor tick interrupted by cancellation")
        finally:
            self._scheduler.clear()
            self.state = MonitorState.STOPPED
            logger.info("monitor stopped after %d ticks", self.tick_count)

    def stop(self) -> None:
        self.cancel.cancel()


def _new_vulnerability_ids(previous: Optional[Audit], current: Audit) -> tuple[str, ...]:
    """Ids present in *current* but not in *previous*, in *current*'s order."""
    seen = set() if previous is None else {v.id for v in previous.vulnerabilities}
    return tuple(v.id for v in current.vulnerabilities if v.id not in seen)
