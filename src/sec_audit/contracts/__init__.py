"""Bundled JSON-schema contracts (audit document, SARIF subset)."""

from sec_audit.contracts.load import load_schema, validate_instance

__all__ = ["load_schema", "validate_instance"]
