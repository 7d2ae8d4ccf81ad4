"""Cooperative cancellation shared by the CLI, the monitor loop and backends."""

from __future__ import annotations

import threading

from sec_audit.errors import CancelledError


class CancelToken:
    """Thin wrapper over ``threading.Event`` with an interruptible sleep."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to *seconds*; return True early if cancelled meanwhile."""
        return self._event.wait(max(0.0, seconds))

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError("audit cancelled")

    @property
    def event(self) -> threading.Event:
        return self._event
