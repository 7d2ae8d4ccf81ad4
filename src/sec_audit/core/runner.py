"""Runner: wires scan → enrich → synthesize → augment into one audit cycle."""

from __future__ import annotations

import logging

from sec_audit.backends import InferenceBackend
from sec_audit.core.cancel import CancelToken
from sec_audit.core.config import AuditConfig
from sec_audit.model.audit import Audit
from sec_audit.pipeline.augment import LiveIntelligenceAugmenter
from sec_audit.pipeline.enrich import ThreatEnricher
from sec_audit.pipeline.scan import ScanCoordinator
from sec_audit.pipeline.synthesize import AuditSynthesizer

_logger = logging.getLogger(__name__)


class AuditPipeline:
    """One backend, one configuration, any number of cycles."""

    def __init__(
        self,
        backend: InferenceBackend,
        config: AuditConfig | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> None:
        self.config = config or AuditConfig()
        self.cancel = cancel or CancelToken()
        self.scanner = ScanCoordinator(backend)
        self.enricher = ThreatEnricher(backend)
        self.synthesizer = AuditSynthesizer(backend, self.config)
        self.augmenter = LiveIntelligenceAugmenter(backend)

    def run(self) -> Audit:
        """Execute one full cycle and return the augmented Audit.

        Layers run strictly in order; each starts only after the previous
        one fully succeeded. Scan, enrichment and synthesis failures
        propagate, augmentation failures do not.
        """
        # ── 1. inventory ────────────────────────────────────────────────
        self.cancel.raise_if_cancelled()
        scan = self.scanner.collect(self.config.root)

        # ── 2. threat enrichment ────────────────────────────────────────
        self.cancel.raise_if_cancelled()
        threats = self.enricher.enrich(scan.dependencies, scan.code_patterns)

        # ── 3. synthesis ────────────────────────────────────────────────
        self.cancel.raise_if_cancelled()
        audit = self.synthesizer.synthesize(scan, threats)

        # ── 4. live intelligence (best effort) ──────────────────────────
        self.cancel.raise_if_cancelled()
        audit = self.augmenter.augment(audit)

        _logger.info(
            "audit cycle complete: %s risk (%.1f/100)",
            audit.risk_level.value,
            audit.risk_score,
        )
        return audit


def run_audit(
    backend: InferenceBackend,
    config: AuditConfig | None = None,
    *,
    cancel: CancelToken | None = None,
) -> Audit:
    """Convenience entry point for a single one-shot audit."""
    return AuditPipeline(backend, config, cancel=cancel).run()
