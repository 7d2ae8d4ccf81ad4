"""CLI entry-point for sec_audit.

Usage:
    python -m sec_audit audit [--path DIR] [--format text|json|sarif|html] [--output FILE]
    python -m sec_audit audit --ci                      # exit 1 on high/critical risk
    python -m sec_audit audit --fix                     # pin safe versions in requirements.txt
    python -m sec_audit audit --zero-day --supply-chain --compliance owasp pci-dss
    python -m sec_audit audit --monitor [--interval SECONDS]
    python -m sec_audit audit --backend openai|anthropic|ollama
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from sec_audit import __version__
from sec_audit.backends import BACKEND_PRECEDENCE, create_backend
from sec_audit.core.cancel import CancelToken
from sec_audit.core.config import AuditConfig, Settings
from sec_audit.core.runner import AuditPipeline
from sec_audit.errors import CancelledError, RenderError, SecAuditError, StartupError
from sec_audit.model.audit import Audit
from sec_audit.monitor.monitor_loop import MonitorLoop, log_alert
from sec_audit.policy.gate import Decision, GateMode, decide
from sec_audit.remediation.autofix import AutoFixer, DryRunWriter, RequirementsFileWriter
from sec_audit.reports.exporters import FORMATS, export_audit
from sec_audit.utils.determinism import is_ci_mode
from sec_audit.utils.exit_codes import ExitCode

logger = logging.getLogger("sec_audit")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sec-audit",
        description="Backend-driven security auditing for software projects.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = p.add_subparsers(dest="command")

    # ── audit subcommand ────────────────────────────────────────────
    audit_p = sub.add_parser(
        "audit",
        help="Audit a project and render the result.",
    )
    audit_p.add_argument(
        "--path",
        type=Path,
        default=Path("."),
        help="Project directory to audit (default: current directory).",
    )
    audit_p.add_argument(
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="text",
        help="Output format (default: text).",
    )
    audit_p.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the report to FILE instead of stdout.",
    )
    audit_p.add_argument(
        "--fix",
        action="store_true",
        default=False,
        help="Pin vulnerable dependencies to their first safe version.",
    )
    audit_p.add_argument(
        "--zero-day",
        dest="zero_day",
        action="store_true",
        default=False,
        help="Ask for deeper zero-day pattern analysis.",
    )
    audit_p.add_argument(
        "--supply-chain",
        dest="supply_chain",
        action="store_true",
        default=False,
        help="Ask for deeper supply chain analysis.",
    )
    audit_p.add_argument(
        "--compliance",
        nargs="+",
        metavar="STD",
        default=[],
        help="Compliance standards to assess (e.g. owasp pci-dss gdpr).",
    )
    audit_p.add_argument(
        "--monitor",
        action="store_true",
        default=False,
        help="Re-run the audit continuously until interrupted.",
    )
    audit_p.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between monitoring runs (default: SEC_AUDIT_MONITOR_INTERVAL or 3600).",
    )
    audit_p.add_argument(
        "--ci",
        "--deterministic",
        dest="ci_mode",
        action="store_true",
        default=False,
        help="Fail (exit 1) on high/critical risk; deterministic timestamps.",
    )
    audit_p.add_argument(
        "--backend",
        choices=[name for name, _ in BACKEND_PRECEDENCE],
        default=None,
        help="Inference backend (default: first configured credential).",
    )
    audit_p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Verbose (DEBUG) logging.",
    )
    return p


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def _write_report(output: str, out: Path | None) -> None:
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(output, encoding="utf-8")
        print(f"Report written to {out}", file=sys.stderr)
    else:
        sys.stdout.write(output)
        sys.stdout.flush()


def _apply_fixes(audit: Audit, root: Path) -> None:
    requirements = root / "requirements.txt"
    if requirements.is_file():
        writer = RequirementsFileWriter(requirements)
    else:
        print("No requirements.txt found; showing planned updates only.", file=sys.stderr)
        writer = DryRunWriter()
    report = AutoFixer(writer).apply_fixes(audit.dependency_audit)
    print(report.describe(), file=sys.stderr)


def _run_monitor(
    args: argparse.Namespace,
    pipeline: AuditPipeline,
    cancel: CancelToken,
    interval: float,
) -> int:
    def on_audit(audit: Audit) -> None:
        try:
            output = export_audit(audit, args.fmt, ci_mode=pipeline.config.ci_mode)
            _write_report(output, args.output)
        except RenderError as exc:
            logger.error("could not render audit: %s", exc)
        except OSError as exc:
            logger.error("could not write report: %s", exc)

    def on_alert(decision: Decision, audit: Audit) -> None:
        log_alert(decision, audit)
        print(
            f"SECURITY ALERT: {audit.risk_level.value.upper()} risk "
            f"({audit.risk_score:g}/100), immediate action required",
            file=sys.stderr,
        )

    loop = MonitorLoop(
        pipeline.run,
        interval=interval,
        cancel=cancel,
        on_audit=on_audit,
        on_alert=on_alert,
    )

    def _stop(signum, frame) -> None:
        logger.info("received signal %d, stopping monitor", signum)
        cancel.cancel()

    previous = {sig: signal.signal(sig, _stop) for sig in (signal.SIGINT, signal.SIGTERM)}
    print("Starting continuous security monitoring (Ctrl+C to stop)", file=sys.stderr)
    try:
        loop.run()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return ExitCode.SUCCESS


def _handle_audit(args: argparse.Namespace) -> int:
    """Dispatch ``sec-audit audit``."""
    _configure_logging(args.verbose)

    root: Path = args.path.resolve()
    if not root.is_dir():
        print(f"error: path is not a directory: {root}", file=sys.stderr)
        return ExitCode.ERROR

    settings = Settings()
    if args.backend:
        settings.SEC_AUDIT_BACKEND = args.backend

    config = AuditConfig(
        root=root,
        zero_day=args.zero_day,
        supply_chain=args.supply_chain,
        compliance=tuple(args.compliance),
        ci_mode=args.ci_mode or is_ci_mode(),
    )
    cancel = CancelToken()

    try:
        backend = create_backend(settings, cancel=cancel)
    except StartupError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ExitCode.ERROR

    pipeline = AuditPipeline(backend, config, cancel=cancel)
    try:
        if args.monitor:
            interval = (
                args.interval if args.interval is not None else settings.SEC_AUDIT_MONITOR_INTERVAL
            )
            return _run_monitor(args, pipeline, cancel, interval)

        try:
            audit = pipeline.run()
            output = export_audit(audit, args.fmt, ci_mode=pipeline.config.ci_mode)
        except CancelledError:
            print("error: audit cancelled", file=sys.stderr)
            return ExitCode.ERROR
        except SecAuditError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return ExitCode.ERROR

        try:
            _write_report(output, args.output)
        except OSError as exc:
            print(f"error: could not write report: {exc}", file=sys.stderr)
            return ExitCode.ERROR

        if args.fix:
            _apply_fixes(audit, root)

        if args.ci_mode:
            decision = decide(audit, GateMode.CI)
            if ExitCode(decision.exit_code).failed:
                print(
                    f"Security audit failed: {audit.risk_level.value.upper()} risk detected",
                    file=sys.stderr,
                )
                print(f"Risk score: {audit.risk_score:g}/100", file=sys.stderr)
                return decision.exit_code
            print("Security audit passed", file=sys.stderr)
        return ExitCode.SUCCESS
    finally:
        close = getattr(backend, "close", None)
        if callable(close):
            close()


def main(argv: list[str] | None = None) -> int:
    """Entry-point; returns an exit code (0 = pass, 1 = CI gate failure, 2 = error)."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "audit":
        return _handle_audit(args)

    parser.print_help(sys.stderr)
    return ExitCode.ERROR


if __name__ == "__main__":
    raise SystemExit(main())
