"""Multi-format exporters for a finished :class:`Audit`.

Supports:

*  **text** — terminal summary, one section per populated audit area.
*  **JSON** — canonical machine-readable document (CI artifact storage).
*  **SARIF 2.1.0** — code-scanning upload; validated before it is returned.
*  **HTML** — self-contained document with embedded CSS.

Every exporter is a pure function of the Audit: no clock reads, no
environment lookups, so the same Audit always renders to the same bytes.
"""

from __future__ import annotations

import html as html_mod

import jsonschema

from sec_audit.contracts.load import validate_instance
from sec_audit.errors import RenderError
from sec_audit.model.audit import Audit
from sec_audit.policy.thresholds import badge_band_from_score, sarif_level_from_severity
from sec_audit.utils.json_norm import stable_json_dumps

FORMATS = ("text", "json", "sarif", "html")

TOP_RECOMMENDATIONS = 5

SARIF_SCHEMA_URI = "https://json.schemastore.org/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"
TOOL_NAME = "sec-audit"
TOOL_INFORMATION_URI = "https://github.com/sec-audit/sec-audit"


def _num(value: float) -> str:
    return f"{value:g}"


def _heading(title: str) -> list[str]:
    return [title, "-" * len(title)]


# ════════════════════════════════════════════════════════════════════
# Text exporter
# ════════════════════════════════════════════════════════════════════


def export_text(audit: Audit) -> str:
    """Render the terminal summary.

    Section order is fixed; a section is left out when its data is empty.
    """
    lines: list[str] = [
        "Security Audit Summary",
        "======================",
        f"Risk Score: {_num(audit.risk_score)}/100",
        f"Risk Level: {audit.risk_level.value.upper()}",
        f"Scan Time: {audit.scan_timestamp}",
    ]

    if audit.vulnerabilities:
        lines.append("")
        lines.extend(_heading("Vulnerabilities Found"))
        for v in audit.vulnerabilities:
            lines.append(f"* {v.id} - {v.description}")
            lines.append(f"  Type: {v.vulnerability_type.value}")
            lines.append(f"  Severity: {_num(v.severity.overall)}/10")
            if v.cvss_score is not None:
                lines.append(f"  CVSS Score: {_num(v.cvss_score)}")
            if v.affected_component:
                lines.append(f"  Component: {v.affected_component}")
            if v.remediation:
                lines.append(f"  Fix: {v.remediation}")
            if v.exploit_available:
                lines.append("  !! EXPLOIT AVAILABLE")

    if audit.zero_day_risks:
        lines.append("")
        lines.extend(_heading("Potential Zero-Day Risks"))
        for risk in audit.zero_day_risks:
            lines.append(f"* Pattern: {risk.pattern}")
            lines.append(f"  Similarity to known: {_num(round(risk.similarity_to_known * 100, 2))}%")
            lines.append(f"  Likelihood: {_num(round(risk.likelihood * 100, 2))}%")
            if risk.mitigation:
                lines.append(f"  Mitigation: {risk.mitigation}")

    deps = audit.dependency_audit
    if not deps.is_empty:
        lines.append("")
        lines.extend(_heading("Dependency Analysis"))
        lines.append(f"Total Dependencies: {deps.total_dependencies}")
        lines.append(f"Vulnerable: {len(deps.vulnerable_dependencies)}")
        lines.append(f"Outdated: {len(deps.outdated_dependencies)}")
        lines.append(f"Unmaintained: {len(deps.unmaintained_packages)}")
        for dep in deps.vulnerable_dependencies:
            safe = f" -> {dep.safe_versions[0]}" if dep.safe_versions else ""
            lines.append(f"  {dep.package} {dep.current_version}{safe}")
        if deps.typosquatting_risks:
            lines.append("Typosquatting Risks:")
            for t in deps.typosquatting_risks:
                lines.append(f"  {t.package} (similar to: {t.similar_to})")

    secrets = audit.secrets_scan
    if secrets.secrets_found or secrets.secrets:
        lines.append("")
        lines.extend(_heading("Exposed Secrets"))
        lines.append(f"Secrets Found: {secrets.secrets_found}")
        for s in secrets.secrets:
            lines.append(f"  {s.secret_type} in {s.file} (line {s.line})")

    if not audit.compliance.is_empty:
        lines.append("")
        lines.extend(_heading("Compliance"))
        lines.append(f"Compliance Score: {_num(audit.compliance.compliance_score)}%")
        for std in audit.compliance.standards:
            lines.append(f"  {std.name}: {_num(std.compliance_level)}%")
        for violation in audit.compliance.violations:
            lines.append(f"  [{violation.standard}] {violation.requirement}: {violation.description}")

    chain = audit.supply_chain
    if not chain.is_empty:
        lines.append("")
        lines.extend(_heading("Supply Chain"))
        lines.append(f"Supply Chain Risk: {_num(chain.risk_score)}/100")
        lines.append(f"  Direct deps: {chain.direct_dependencies}")
        lines.append(f"  Transitive deps: {chain.transitive_dependencies}")
        lines.append(f"  Max depth: {chain.dependency_depth}")

    if audit.recommendations:
        lines.append("")
        lines.extend(_heading("Top Recommendations"))
        for i, rec in enumerate(audit.recommendations[:TOP_RECOMMENDATIONS], 1):
            lines.append(f"{i}. {rec.title} - {rec.description}")
            if rec.effort or rec.impact:
                lines.append(f"   Effort: {rec.effort} | Impact: {rec.impact}")

    if audit.executive_summary:
        lines.append("")
        lines.extend(_heading("Executive Summary"))
        lines.append(audit.executive_summary)

    return "\n".join(lines) + "\n"


# ════════════════════════════════════════════════════════════════════
# JSON exporter
# ════════════════════════════════════════════════════════════════════


def export_json(audit: Audit, *, indent: int = 2, ci_mode: bool = False) -> str:
    """Export an ``Audit`` as canonical JSON (floats rounded under --ci)."""
    return stable_json_dumps(audit.to_dict(), indent=indent, ci_mode=ci_mode)


# ════════════════════════════════════════════════════════════════════
# SARIF exporter
# ════════════════════════════════════════════════════════════════════


def build_sarif(audit: Audit) -> dict:
    """Build the SARIF 2.1.0 log: one run, one result per vulnerability."""
    from sec_audit import __version__

    results = [
        {
            "ruleId": v.id,
            "level": sarif_level_from_severity(v.severity.overall),
            "message": {"text": v.description},
            "locations": [
                {"physicalLocation": {"artifactLocation": {"uri": v.affected_component}}}
            ],
            "fixes": [{"description": {"text": v.remediation}}],
        }
        for v in audit.vulnerabilities
    ]
    return {
        "$schema": SARIF_SCHEMA_URI,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": __version__,
                        "informationUri": TOOL_INFORMATION_URI,
                    }
                },
                "results": results,
            }
        ],
    }


def export_sarif(audit: Audit) -> str:
    """Export an ``Audit`` as SARIF 2.1.0 JSON.

    Raises :class:`RenderError` if the document fails the bundled SARIF
    subset schema.
    """
    doc = build_sarif(audit)
    try:
        validate_instance(doc, "sarif_subset.schema.json")
    except jsonschema.ValidationError as exc:
        raise RenderError(f"SARIF output failed validation: {exc.message}") from exc
    return stable_json_dumps(doc)


# ════════════════════════════════════════════════════════════════════
# HTML exporter
# ════════════════════════════════════════════════════════════════════

_BAND_COLOR = {
    "critical": "#d32f2f",
    "high": "#f57c00",
    "medium": "#fbc02d",
    "low": "#388e3c",
}

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Security Audit Report</title>
<style>
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; margin: 2rem; color: #212529; }}
  h1 {{ color: #343a40; }}
  .summary {{ background: #f8f9fa; padding: 1rem; border-radius: 6px; margin-bottom: 1.5rem; }}
  .risk-score {{ font-size: 48px; font-weight: bold; }}
  .critical {{ color: #d32f2f; }}
  .high {{ color: #f57c00; }}
  .medium {{ color: #fbc02d; }}
  .low {{ color: #388e3c; }}
  .vulnerability {{ border-left: 4px solid #d32f2f; padding-left: 1rem; margin: 1rem 0; }}
  .metric {{ display: inline-block; margin: 0.5rem 1rem 0.5rem 0; padding: 0.5rem; background: #f5f5f5; border-radius: 6px; }}
  footer {{ margin-top: 2rem; color: #6c757d; font-size: 0.85em; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def export_html(audit: Audit) -> str:
    """Export an ``Audit`` as a self-contained HTML document."""
    from sec_audit import __version__

    esc = html_mod.escape
    band = badge_band_from_score(audit.risk_score)
    color = _BAND_COLOR[band]
    parts: list[str] = []

    parts.append("<h1>Security Audit Report</h1>")
    parts.append('<div class="summary">')
    parts.append(
        f'<div class="risk-score {band}" style="color:{color}">'
        f"{_num(audit.risk_score)}/100</div>"
    )
    parts.append(f"<p><strong>Risk Level:</strong> {audit.risk_level.value.upper()}</p>")
    parts.append(f"<p><strong>Scan Time:</strong> {esc(audit.scan_timestamp)}</p>")
    parts.append("</div>")

    parts.append(f"<h2>Vulnerabilities ({len(audit.vulnerabilities)})</h2>")
    for v in audit.vulnerabilities:
        parts.append('<div class="vulnerability">')
        parts.append(f"<h3>{esc(v.id)}</h3>")
        parts.append(f"<p>{esc(v.description)}</p>")
        parts.append(
            f"<p><strong>Severity:</strong> {_num(v.severity.overall)}/10 "
            f"&bull; <strong>Component:</strong> <code>{esc(v.affected_component)}</code></p>"
        )
        if v.remediation:
            parts.append(f"<p><strong>Fix:</strong> {esc(v.remediation)}</p>")
        parts.append("</div>")

    chain = audit.supply_chain
    parts.append("<h2>Supply Chain Analysis</h2>")
    parts.append(f'<div class="metric">Direct Dependencies: {chain.direct_dependencies}</div>')
    parts.append(f'<div class="metric">Transitive Dependencies: {chain.transitive_dependencies}</div>')
    parts.append(f'<div class="metric">Supply Chain Risk: {_num(chain.risk_score)}/100</div>')

    parts.append("<h2>Executive Summary</h2>")
    parts.append(f"<p>{esc(audit.executive_summary)}</p>")

    parts.append(f"<footer>Generated by {TOOL_NAME} {esc(__version__)}</footer>")
    return _HTML_TEMPLATE.format(body="\n".join(parts))


# ════════════════════════════════════════════════════════════════════
# Dispatcher
# ════════════════════════════════════════════════════════════════════


def export_audit(audit: Audit, fmt: str = "text", *, ci_mode: bool = False) -> str:
    """Export an ``Audit`` in the specified format.

    Parameters
    ----------
    audit:
        The audit to export.
    fmt:
        One of ``"text"``, ``"json"``, ``"sarif"``, ``"html"``.
    ci_mode:
        Round floats in JSON output for cross-platform stability.

    Raises
    ------
    RenderError
        If *fmt* is not recognised.
    """
    if fmt == "text":
        return export_text(audit)
    if fmt == "json":
        return export_json(audit, ci_mode=ci_mode)
    if fmt == "sarif":
        return export_sarif(audit)
    if fmt == "html":
        return export_html(audit)
    raise RenderError(f"Unknown export format: {fmt!r} (use {'|'.join(FORMATS)})")
