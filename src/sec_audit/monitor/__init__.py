"""Continuous security monitoring."""

from sec_audit.monitor.monitor_loop import MonitorLoop, MonitorState, TickResult, log_alert

__all__ = ["MonitorLoop", "MonitorState", "TickResult", "log_alert"]
