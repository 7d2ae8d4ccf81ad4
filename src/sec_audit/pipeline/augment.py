"""Best-effort live threat-intelligence appendix for the executive summary."""

from __future__ import annotations

import logging

from sec_audit.backends import InferenceBackend
from sec_audit.errors import AugmentationError, BackendError
from sec_audit.model.audit import Audit
from sec_audit.pipeline.prompts import THREAT_LANDSCAPE_PROMPT

logger = logging.getLogger(__name__)

THREAT_INTEL_HEADING = "\n\n## Active Threat Intelligence\n"


class LiveIntelligenceAugmenter:
    def __init__(self, backend: InferenceBackend) -> None:
        self.backend = backend

    def augment(self, audit: Audit) -> Audit:
        """Append the threat-landscape narrative to the executive summary.

        Never fails the cycle: on a backend failure the input Audit is
        returned unchanged. Cancellation still propagates.
        """
        try:
            intel = self._query()
        except AugmentationError as exc:
            logger.warning("threat intelligence unavailable, continuing without it: %s", exc)
            return audit
        return audit.with_summary_appendix(THREAT_INTEL_HEADING + intel)

    def _query(self) -> str:
        try:
            return self.backend.generate(THREAT_LANDSCAPE_PROMPT)
        except BackendError as exc:
            raise AugmentationError(str(exc), stage="threat_intel") from exc
