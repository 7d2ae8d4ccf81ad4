"""Scan layer: three independent inventory queries for one project."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from sec_audit.backends import InferenceBackend
from sec_audit.errors import ScanError
from sec_audit.pipeline.concurrency import run_all_or_fail
from sec_audit.pipeline.prompts import (
    CODE_PATTERN_SCAN_PROMPT,
    CONFIG_SCAN_PROMPT,
    DEPENDENCY_SCAN_PROMPT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanEvidence:
    """Opaque backend text for each inventory concern."""

    dependencies: str
    code_patterns: str
    configurations: str


class ScanCoordinator:
    def __init__(self, backend: InferenceBackend) -> None:
        self.backend = backend

    def collect(self, project_path: Path | str) -> ScanEvidence:
        """Run the dependency, code-pattern and configuration scans concurrently.

        All three must succeed. The first failure cancels the others and
        raises :class:`ScanError`; no partial evidence is returned.
        """
        path = str(project_path)
        logger.info("scanning %s", path)
        results = run_all_or_fail(
            {
                "dependencies": lambda: self.backend.generate(
                    DEPENDENCY_SCAN_PROMPT.format(path=path)
                ),
                "code_patterns": lambda: self.backend.generate(
                    CODE_PATTERN_SCAN_PROMPT.format(path=path)
                ),
                "configurations": lambda: self.backend.generate(
                    CONFIG_SCAN_PROMPT.format(path=path)
                ),
            },
            error_cls=ScanError,
        )
        logger.info("scan complete")
        return ScanEvidence(**results)
