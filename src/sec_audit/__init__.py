"""sec_audit — backend-driven security auditing with CI gating and monitoring."""

__all__ = [
    "__version__",
    "Audit",
    "AuditConfig",
    "AuditPipeline",
    "MonitorLoop",
    "RiskLevel",
    "Settings",
    "create_backend",
    "run_audit",
]
__version__ = "0.1.0"

from sec_audit.backends import create_backend  # noqa: E402
from sec_audit.core.config import AuditConfig, Settings  # noqa: E402
from sec_audit.core.runner import AuditPipeline, run_audit  # noqa: E402
from sec_audit.model import RiskLevel  # noqa: E402
from sec_audit.model.audit import Audit  # noqa: E402
from sec_audit.monitor.monitor_loop import MonitorLoop  # noqa: E402
