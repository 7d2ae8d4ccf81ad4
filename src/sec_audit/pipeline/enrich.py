"""Enrichment layer: known-vulnerability matching and anomaly detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sec_audit.backends import InferenceBackend
from sec_audit.errors import EnrichmentError
from sec_audit.pipeline.concurrency import run_all_or_fail
from sec_audit.pipeline.prompts import CVE_MATCH_PROMPT, ZERO_DAY_PROMPT

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ThreatEvidence:
    cves: str
    zero_days: str


class ThreatEnricher:
    def __init__(self, backend: InferenceBackend) -> None:
        self.backend = backend

    def enrich(self, dependency_evidence: str, code_pattern_evidence: str) -> ThreatEvidence:
        """Issue the CVE and zero-day queries concurrently.

        Fails fast with :class:`EnrichmentError` on the first failure.
        """
        logger.info("enriching scan evidence with threat data")
        results = run_all_or_fail(
            {
                "cves": lambda: self.backend.generate(
                    CVE_MATCH_PROMPT.format(dependencies=dependency_evidence)
                ),
                "zero_days": lambda: self.backend.generate(
                    ZERO_DAY_PROMPT.format(code_patterns=code_pattern_evidence)
                ),
            },
            error_cls=EnrichmentError,
        )
        return ThreatEvidence(**results)
