"""Report rendering for audits."""

from sec_audit.reports.exporters import (
    FORMATS,
    export_audit,
    export_html,
    export_json,
    export_sarif,
    export_text,
)

__all__ = [
    "FORMATS",
    "export_audit",
    "export_html",
    "export_json",
    "export_sarif",
    "export_text",
]
