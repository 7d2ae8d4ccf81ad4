"""Exit code contract tests: enforce stable CLI exit semantics.

Code  Meaning
----  -------
  0   Audit completed (and passed the gate under --ci)
  1   --ci gate failed
  2   No backend, unreachable backend, parse or render failure
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from sec_audit.utils.exit_codes import ExitCode

REPO_ROOT = Path(__file__).resolve().parents[1]

_BACKEND_VARS = ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "OLLAMA_HOST", "SEC_AUDIT_BACKEND")


def _run(*args: str, **extra_env: str) -> subprocess.CompletedProcess[str]:
    env = {k: v for k, v in os.environ.items() if k not in _BACKEND_VARS}
    env["PYTHONPATH"] = str(REPO_ROOT / "src") + (
        ":" + env.get("PYTHONPATH", "") if env.get("PYTHONPATH") else ""
    )
    env.update(extra_env)
    return subprocess.run(
        [sys.executable, "-m", "sec_audit", *args],
        capture_output=True,
        text=True,
        env=env,
    )


class TestExitCodeEnum:
    def test_values_are_frozen(self) -> None:
        assert [int(c) for c in ExitCode] == [0, 1, 2]

    @pytest.mark.parametrize(
        "code, failed",
        [(ExitCode.SUCCESS, False), (ExitCode.GATE_FAILED, True), (ExitCode.ERROR, True)],
    )
    def test_failed(self, code, failed) -> None:
        assert code.failed is failed


# ── process-level exit codes ────────────────────────────────────────

class TestProcessExitCodes:
    def test_no_backend_configured_exits_2(self, tmp_path) -> None:
        r = _run("audit", "--path", str(tmp_path))
        assert r.returncode == 2
        assert "No inference backend configured" in r.stderr
        assert r.stdout == ""

    def test_explicit_backend_without_credential_exits_2(self, tmp_path) -> None:
        r = _run("audit", "--path", str(tmp_path), "--backend", "anthropic")
        assert r.returncode == 2
        assert "ANTHROPIC_API_KEY" in r.stderr

    def test_missing_command_exits_2(self) -> None:
        assert _run().returncode == 2

    def test_version_exits_0(self) -> None:
        r = _run("--version")
        assert r.returncode == 0
        assert r.stdout.startswith("sec-audit ")
