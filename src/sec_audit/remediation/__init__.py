"""Automatic dependency remediation."""

from sec_audit.remediation.autofix import (
    AutoFixer,
    DryRunWriter,
    FixReport,
    FixSelection,
    ManifestWriter,
    RequirementsFileWriter,
)

__all__ = [
    "AutoFixer",
    "DryRunWriter",
    "FixReport",
    "FixSelection",
    "ManifestWriter",
    "RequirementsFileWriter",
]
