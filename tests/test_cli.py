"""Tests for the ``sec-audit`` command line (backend replaced by a script)."""

from __future__ import annotations

import json
import signal
from unittest.mock import patch

import pytest

from sec_audit.__main__ import main
from sec_audit.errors import BackendError
from sec_audit.monitor.monitor_loop import MonitorLoop


@pytest.fixture
def run_cli(scripted, happy_script):
    """Run main() with create_backend patched to a scripted backend."""

    def _run(argv, script=None):
        backend = scripted(script if script is not None else happy_script)
        with patch("sec_audit.__main__.create_backend", return_value=backend):
            code = main(argv)
        return code, backend

    return _run


class TestAuditCommand:
    def test_text_report_on_stdout(self, run_cli, tmp_path, capsys) -> None:
        code, _ = run_cli(["audit", "--path", str(tmp_path)])
        out = capsys.readouterr().out
        assert code == 0
        assert "CVE-2024-0001 - Remote code execution in requests" in out
        assert "## Active Threat Intelligence" in out

    def test_sarif_written_to_output(self, run_cli, tmp_path, capsys) -> None:
        target = tmp_path / "reports" / "audit.sarif"
        code, _ = run_cli(
            ["audit", "--path", str(tmp_path), "--format", "sarif", "--output", str(target)]
        )
        captured = capsys.readouterr()
        assert code == 0
        assert captured.out == ""
        doc = json.loads(target.read_text(encoding="utf-8"))
        assert doc["runs"][0]["results"][0]["level"] == "error"

    def test_unwritable_output_exits_2(self, run_cli, tmp_path, capsys) -> None:
        blocker = tmp_path / "taken"
        blocker.write_text("", encoding="utf-8")
        code, _ = run_cli(["audit", "--path", str(tmp_path), "--output", str(blocker / "r.txt")])
        assert code == 2
        assert capsys.readouterr().err.startswith("error: could not write report")

    def test_ci_fails_on_critical(self, run_cli, tmp_path, capsys) -> None:
        code, _ = run_cli(["audit", "--path", str(tmp_path), "--ci"])
        err = capsys.readouterr().err
        assert code == 1
        assert "Security audit failed: CRITICAL risk detected" in err
        assert "Risk score: 82/100" in err

    def test_ci_passes_on_low(self, run_cli, happy_script, audit_doc, tmp_path, capsys) -> None:
        audit_doc.update(risk_score=12, risk_level="low")
        happy_script["synthesis"] = json.dumps(audit_doc)
        code, _ = run_cli(["audit", "--path", str(tmp_path), "--ci"], happy_script)
        assert code == 0
        assert "Security audit passed" in capsys.readouterr().err

    def test_focus_flags_reach_synthesis_prompt(self, run_cli, tmp_path) -> None:
        _, backend = run_cli(
            ["audit", "--path", str(tmp_path), "--supply-chain", "--compliance", "gdpr", "soc2"]
        )
        prompt = backend.prompts["synthesis"]
        assert "supply chain security extra depth" in prompt
        assert "GDPR, SOC2" in prompt

    def test_scan_failure_exits_2(self, run_cli, happy_script, tmp_path, capsys) -> None:
        happy_script["dependencies"] = BackendError("HTTP 500", backend="scripted")
        code, backend = run_cli(["audit", "--path", str(tmp_path)], happy_script)
        assert code == 2
        assert capsys.readouterr().err.startswith("error: ")
        assert "synthesis" not in backend.calls

    def test_unparseable_synthesis_exits_2(self, run_cli, happy_script, tmp_path, capsys) -> None:
        happy_script["synthesis"] = "Sorry, I cannot help with that."
        code, _ = run_cli(["audit", "--path", str(tmp_path)], happy_script)
        assert code == 2
        assert "not valid JSON" in capsys.readouterr().err

    def test_fix_rewrites_requirements(self, run_cli, tmp_path, capsys) -> None:
        req = tmp_path / "requirements.txt"
        req.write_text("requests==2.0.0\n", encoding="utf-8")
        code, _ = run_cli(["audit", "--path", str(tmp_path), "--fix"])
        assert code == 0
        assert req.read_text(encoding="utf-8") == "requests==2.32.0\n"
        assert (tmp_path / "requirements.txt.bak").exists()
        assert "requests 2.0.0 -> 2.32.0" in capsys.readouterr().err

    def test_fix_without_requirements_is_dry_run(self, run_cli, tmp_path, capsys) -> None:
        code, _ = run_cli(["audit", "--path", str(tmp_path), "--fix"])
        assert code == 0
        assert "showing planned updates only" in capsys.readouterr().err
        assert not (tmp_path / "requirements.txt").exists()

    def test_missing_path(self, run_cli, tmp_path, capsys) -> None:
        code, _ = run_cli(["audit", "--path", str(tmp_path / "nope")])
        assert code == 2
        assert "not a directory" in capsys.readouterr().err


class TestStartup:
    def test_no_backend_configured(self, tmp_path, monkeypatch, capsys) -> None:
        for var in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "OLLAMA_HOST", "SEC_AUDIT_BACKEND"):
            monkeypatch.delenv(var, raising=False)
        code = main(["audit", "--path", str(tmp_path)])
        assert code == 2
        assert "No inference backend configured" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys) -> None:
        assert main([]) == 2
        assert "usage:" in capsys.readouterr().err

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert "sec-audit" in capsys.readouterr().out


class TestMonitorCommand:
    def test_single_tick_alerts_and_restores_signals(
        self, run_cli, tmp_path, capsys, monkeypatch
    ) -> None:
        original_run = MonitorLoop.run
        monkeypatch.setattr(
            MonitorLoop, "run", lambda self, max_ticks=None: original_run(self, max_ticks=1)
        )
        before = signal.getsignal(signal.SIGINT)

        code, _ = run_cli(["audit", "--path", str(tmp_path), "--monitor", "--interval", "0.01"])

        captured = capsys.readouterr()
        assert code == 0
        assert "Remote code execution in requests" in captured.out
        assert "SECURITY ALERT: CRITICAL risk" in captured.err
        assert signal.getsignal(signal.SIGINT) is before

    def test_unwritable_output_keeps_loop_running(
        self, run_cli, tmp_path, capsys, monkeypatch
    ) -> None:
        original_run = MonitorLoop.run
        loops = []

        def run_twice(self, max_ticks=None):
            loops.append(self)
            original_run(self, max_ticks=2)

        monkeypatch.setattr(MonitorLoop, "run", run_twice)
        blocker = tmp_path / "taken"
        blocker.write_text("", encoding="utf-8")

        code, backend = run_cli(
            [
                "audit", "--path", str(tmp_path), "--monitor", "--interval", "0.01",
                "--output", str(blocker / "r.txt"),
            ]
        )

        assert code == 0
        assert loops[0].tick_count == 2
        assert loops[0].failure_count == 0
        assert backend.calls.count("synthesis") == 2
