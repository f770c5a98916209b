"""Read models for dashboards and reporting."""

from .dashboard import (
    DashboardMetrics,
    OvertimeSummary,
    dashboard_metrics,
    overtime_summary,
)

__all__ = [
    "DashboardMetrics",
    "OvertimeSummary",
    "dashboard_metrics",
    "overtime_summary",
]
