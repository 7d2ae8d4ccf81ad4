"""Prompt templates for every backend query issued by the pipeline."""

from __future__ import annotations

from typing import Sequence

DEPENDENCY_SCAN_PROMPT = (
    "List all dependencies and their versions found in the project at: {path}. "
    "Read every package manifest (requirements.txt, pyproject.toml, setup.cfg, "
    "package.json, Cargo.toml, go.mod, ...)."
)

CODE_PATTERN_SCAN_PROMPT = (
    "Scan for vulnerable code patterns in the project at: {path}. "
    "Look for SQL injection, XSS, command injection, path traversal, "
    "insecure deserialization, and other security anti-patterns."
)

CONFIG_SCAN_PROMPT = (
    "Check for security misconfigurations in: {path}. "
    "Look at CORS settings, authentication config, TLS settings, "
    "exposed debug endpoints, default credentials, etc."
)

CVE_MATCH_PROMPT = """\
Check these dependencies against the latest known-vulnerability (CVE) data.
Include any CVEs published in the last 30 days.
Focus on critical and high severity vulnerabilities.

Dependencies:
{dependencies}

For each vulnerability found, provide:
- CVE ID
- CVSS score
- Description
- Affected versions
- Fixed versions
- Exploit availability
- Public exploit code existence
- Remediation steps
"""

ZERO_DAY_PROMPT = """\
Analyze these code patterns for potential 0-day vulnerabilities.
Look for patterns similar to recent CVEs but not yet documented.
Consider emerging attack vectors and novel exploitation techniques.

Code patterns:
{code_patterns}

Identify:
1. Patterns similar to known vulnerabilities but in new contexts
2. Unsafe combinations of safe operations
3. Race conditions and TOCTOU bugs
4. Logic flaws that could be exploited
5. Novel attack surfaces in new APIs/frameworks
6. Potential for chain exploitation
7. Side-channel vulnerabilities

Provide confidence scores and potential impact assessments.
"""

AUDIT_SECTIONS = """\
AUDIT REQUIREMENTS:

1. VULNERABILITY ASSESSMENT:
   - Map all findings to CVE/CWE identifiers
   - Calculate CVSS scores
   - Determine exploit complexity
   - Check for public exploits

2. ZERO-DAY DETECTION:
   - Identify patterns similar to recent CVEs
   - Flag unusual code constructs
   - Find backdoor patterns

3. DEPENDENCY ANALYSIS:
   - Check all dependencies against CVE data
   - Identify typosquatting risks
   - Detect unmaintained packages
   - License compatibility issues

4. CODE SECURITY:
   - OWASP Top 10
   - CWE Top 25 dangerous software errors
   - Cryptographic weaknesses
   - Authentication/authorization flaws

5. COMPLIANCE CHECK:
   - OWASP ASVS
   - PCI-DSS, GDPR, SOC2 where applicable

6. SUPPLY CHAIN SECURITY:
   - Dependency confusion attacks
   - Malicious package detection
   - Build pipeline security

7. RECOMMENDATIONS:
   - Prioritized remediation plan
   - Quick wins vs long-term fixes
   - Monitoring and detection improvements
"""

OUTPUT_CONTRACT = """\
OUTPUT FORMAT:
Reply with ONE JSON object and nothing else, using these keys:
scan_timestamp (ISO 8601), risk_score (0-100), risk_level
(none|low|medium|high|critical), vulnerabilities[] (id, vulnerability_type
one of KnownVulnerability|WeaknessClass|ZeroDay|SupplyChain|Dependency|
Configuration|CodePattern|Secret|Compliance, reference, severity {base,
temporal, environmental, overall} each 0-10, cvss_score, description,
affected_component, affected_versions[], fixed_versions[],
exploit_available, exploit_complexity, remediation, references[]),
zero_day_risks[], dependency_audit {total_dependencies,
vulnerable_dependencies[] (package, current_version, vulnerabilities[],
safe_versions[] safest first, severity, update_urgency),
outdated_dependencies[], license_issues[], unmaintained_packages[],
typosquatting_risks[]}, code_vulnerabilities[], secrets_scan,
compliance {compliance_score, standards[], violations[]}, supply_chain
{risk_score, direct_dependencies, transitive_dependencies,
dependency_depth, high_risk_packages[], attack_vectors[]},
recommendations[] (title, description, priority, category,
implementation, effort, impact), executive_summary (for non-technical
stakeholders).
"""

THREAT_LANDSCAPE_PROMPT = (
    "Based on the current threat landscape, what are the most actively "
    "exploited vulnerabilities related to the technologies in this audit? "
    "Include recent ransomware campaigns, APT activities, and emerging threats."
)


def focus_section(
    *,
    zero_day: bool = False,
    supply_chain: bool = False,
    compliance: Sequence[str] = (),
) -> str:
    """Extra emphasis requested on the command line; empty when none."""
    lines: list[str] = []
    if zero_day:
        lines.append("- Give zero-day detection extra depth; report every plausible pattern.")
    if supply_chain:
        lines.append("- Give supply chain security extra depth, including transitive dependencies.")
    if compliance:
        lines.append(
            "- Assess compliance against: " + ", ".join(s.upper() for s in compliance) + "."
        )
    if not lines:
        return ""
    return "AUDIT FOCUS:\n" + "\n".join(lines) + "\n"
