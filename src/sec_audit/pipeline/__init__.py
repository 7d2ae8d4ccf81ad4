"""Audit pipeline stages: scan → enrich → synthesize → augment."""

from sec_audit.pipeline.augment import LiveIntelligenceAugmenter
from sec_audit.pipeline.enrich import ThreatEnricher, ThreatEvidence
from sec_audit.pipeline.scan import ScanCoordinator, ScanEvidence
from sec_audit.pipeline.synthesize import AuditSynthesizer, parse_audit

__all__ = [
    "AuditSynthesizer",
    "LiveIntelligenceAugmenter",
    "ScanCoordinator",
    "ScanEvidence",
    "ThreatEnricher",
    "ThreatEvidence",
    "parse_audit",
]
