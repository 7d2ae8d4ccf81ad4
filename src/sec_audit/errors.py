"""Error taxonomy for the audit pipeline.

Error                  Fatal for        Handled by
---------------------  ---------------  -------------------------------------
StartupError           the process      CLI (exit 2 before any cycle runs)
BackendError           the query        wrapped by the stage that issued it
ScanError              the cycle        CLI exit 2 / MonitorLoop logs + continues
EnrichmentError        the cycle        CLI exit 2 / MonitorLoop logs + continues
SynthesisParseError    the cycle        CLI exit 2 / MonitorLoop logs + continues
AugmentationError      nothing          swallowed by the augmenter
RenderError            the report       CLI exit 2
AutoFixError           one dependency   counted by the AutoFixer
CancelledError         the cycle        CLI / MonitorLoop shut down quietly
"""

from __future__ import annotations


class SecAuditError(RuntimeError):
    """Base class for every error raised by sec_audit."""


class StartupError(SecAuditError):
    """Raised when no inference backend can be configured."""


class BackendError(SecAuditError):
    """Raised when an inference backend call fails (transport or protocol)."""

    def __init__(self, message: str, *, backend: str = "", status_code: int | None = None) -> None:
        self.backend = backend
        self.status_code = status_code
        prefix = f"{backend}: " if backend else ""
        super().__init__(f"{prefix}{message}")


class StageError(SecAuditError):
    """A pipeline stage failed; ``stage`` names the query that failed."""

    def __init__(self, message: str, *, stage: str = "") -> None:
        self.stage = stage
        super().__init__(message)


class ScanError(StageError):
    """One of the three inventory queries failed."""


class EnrichmentError(StageError):
    """The CVE-matching or anomaly-detection query failed."""


class SynthesisParseError(StageError):
    """The synthesis response was not a valid Audit document."""


class AugmentationError(StageError):
    """The live threat-intelligence query failed."""


class RenderError(SecAuditError):
    """A report could not be produced in the requested format."""


class AutoFixError(SecAuditError):
    """A single manifest update failed."""

    def __init__(self, package: str, detail: str) -> None:
        self.package = package
        super().__init__(f"could not update {package}: {detail}")


class CancelledError(SecAuditError):
    """The cancellation token was set while work was in flight."""


# Errors a monitor tick survives; anything else is a programming error.
CYCLE_ERRORS: tuple[type[SecAuditError], ...] = (
    ScanError,
    EnrichmentError,
    SynthesisParseError,
    BackendError,
)
