"""
Dependency Auto-Fixer
=====================
Upgrades vulnerable dependencies to the first safe version the audit lists.

Writers:
- RequirementsFileWriter (rewrites pins in requirements.txt, keeps a .bak)
- DryRunWriter (records what would change)

Usage:
    from sec_audit.remediation.autofix import AutoFixer, RequirementsFileWriter

    fixer = AutoFixer(RequirementsFileWriter(Path("requirements.txt")))
    report = fixer.apply_fixes(audit.dependency_audit)
    print(report.describe())
"""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from sec_audit.errors import AutoFixError
from sec_audit.model.audit import DependencyAudit

logger = logging.getLogger(__name__)

# name, optional extras, optional specifier+version, remainder (markers/comments)
_REQUIREMENT_RE = re.compile(
    r"^(?P<indent>\s*)"
    r"(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)"
    r"(?P<extras>\[[^\]]*\])?"
    r"(?:\s*(?:===|==|>=|<=|~=|!=|>|<)\s*[^;#\s,]+(?:\s*,\s*(?:===|==|>=|<=|~=|!=|>|<)\s*[^;#\s,]+)*)?"
    r"(?P<rest>.*)$"
)


def normalize_name(name: str) -> str:
    """PEP 503 project-name normalisation."""
    return re.sub(r"[-_.]+", "-", name).lower()


class ManifestWriter(Protocol):
    """Applies one ``package → version`` update to a dependency manifest."""

    def apply(self, package: str, version: str) -> None:
        ...


@dataclass(frozen=True, slots=True)
class FixSelection:
    package: str
    current_version: str
    target_version: str


@dataclass
class FixReport:
    """Result of one auto-fix pass."""

    selections: List[FixSelection] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def fixed_count(self) -> int:
        return len(self.selections)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def describe(self) -> str:
        if not self.selections:
            return "No auto-fixable vulnerabilities found"
        lines = [
            f"  Updating {s.package} {s.current_version or '?'} -> {s.target_version}"
            for s in self.selections
        ]
        lines.append(f"Selected fixes for {self.fixed_count} vulnerable dependencies")
        if self.failures:
            lines.append(f"{self.failed_count} updates could not be written:")
            lines.extend(f"  {msg}" for msg in self.failures)
        return "\n".join(lines)


class DryRunWriter:
    """Records the updates without touching any file."""

    def __init__(self) -> None:
        self.updates: list[tuple[str, str]] = []

    def apply(self, package: str, version: str) -> None:
        self.updates.append((package, version))


class RequirementsFileWriter:
    """Rewrites the pin of a package in a ``requirements.txt`` file."""

    def __init__(self, path: Path, create_backup: bool = True):
        self.path = Path(path)
        self.create_backup = create_backup
        self.backup_path: Optional[Path] = None

    def apply(self, package: str, version: str) -> None:
        if not self.path.exists():
            raise AutoFixError(package, f"{self.path} not found")

        lines = self.path.read_text(encoding="utf-8").splitlines(keepends=True)
        wanted = normalize_name(package)
        for i, line in enumerate(lines):
            stripped = line.strip()
            if not stripped or stripped.startswith(("#", "-")):
                continue
            m = _REQUIREMENT_RE.match(line.rstrip("\r\n"))
            if m is None or normalize_name(m.group("name")) != wanted:
                continue
            if m.group("rest").lstrip().startswith("@"):
                raise AutoFixError(package, "installed from a direct URL reference, not a version")
            newline = line[len(line.rstrip("\r\n")):]
            lines[i] = (
                f"{m.group('indent')}{m.group('name')}{m.group('extras') or ''}"
                f"=={version}{m.group('rest')}{newline}"
            )
            break
        else:
            raise AutoFixError(package, f"not listed in {self.path.name}")

        if self.create_backup and self.backup_path is None:
            backup = self.path.with_suffix(self.path.suffix + ".bak")
            shutil.copy2(self.path, backup)
            self.backup_path = backup

        self.path.write_text("".join(lines), encoding="utf-8")


class AutoFixer:
    """Selects ``safe_versions[0]`` for every vulnerable dependency."""

    def __init__(self, writer: ManifestWriter | None = None):
        self.writer = writer if writer is not None else DryRunWriter()

    def apply_fixes(self, dependency_audit: DependencyAudit) -> FixReport:
        """Select and write a remediation for each fixable dependency.

        Dependencies without a safe version are skipped. A writer failure
        is logged and counted; it never aborts the pass.
        """
        report = FixReport()
        for dep in dependency_audit.vulnerable_dependencies:
            if not dep.safe_versions:
                logger.debug("no safe version listed for %s", dep.package)
                continue
            target = dep.safe_versions[0]
            report.selections.append(
                FixSelection(dep.package, dep.current_version, target)
            )
            logger.info("updating %s to %s", dep.package, target)
            try:
                self.writer.apply(dep.package, target)
            except (AutoFixError, OSError) as exc:
                logger.warning("auto-fix failed for %s: %s", dep.package, exc)
                report.failures.append(str(exc))
        return report
