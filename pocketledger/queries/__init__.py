"""Read-only reporting package."""

from pocketledger.queries.reports import QUICK_PERIODS, ReportBuilder, period_bounds

__all__ = ["QUICK_PERIODS", "ReportBuilder", "period_bounds"]
