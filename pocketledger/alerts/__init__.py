"""Alert engine package."""

from pocketledger.alerts.engine import AlertEngine, AlertNotifier, log_notifier

__all__ = ["AlertEngine", "AlertNotifier", "log_notifier"]
