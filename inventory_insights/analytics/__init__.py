from .alerts import build_alerts
from .trends import (
    build_item_time_series,
    build_usage_trends,
    compute_consumption_rate,
    compute_item_changes,
    compute_usage_summary,
)

__all__ = [
    "build_alerts",
    "build_item_time_series",
    "build_usage_trends",
    "compute_consumption_rate",
    "compute_item_changes",
    "compute_usage_summary",
]
