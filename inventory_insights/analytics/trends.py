import logging
import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

from inventory_insights import settings
from inventory_insights.normalizer import (
    item_total,
    snapshot_quantity,
    split_item_key,
    submission_quantity,
)
from inventory_insights.schemas import (
    ConsumptionRate,
    InventorySubmission,
    ItemChange,
    ItemTimeSeries,
    TimeSeriesPoint,
    UsageSnapshot,
    UsageTrends,
)
from inventory_insights.utils import as_utc, days_ceil

logger = logging.getLogger(__name__)

# All functions here take a client's history newest first, as the repository returns it.


def _key_union(newer: dict, older: dict) -> list[str]:
    keys = list(newer)
    keys.extend(k for k in older if k not in newer)
    return keys


def classify_trend(change: int) -> str:
    if change > 0:
        return "up"
    if change < 0:
        return "down"
    return "stable"


def compute_item_changes(submissions: Sequence[InventorySubmission]) -> list[ItemChange]:
    """Per-item change between the two most recent submissions."""
    if len(submissions) < 2:
        return []

    current = submissions[0].data
    previous = submissions[1].data
    changes = []

    for key in _key_union(current, previous):
        current_qty = item_total(current, key)
        prev_qty = item_total(previous, key)
        if current_qty == 0 and prev_qty == 0:
            continue
        category, item_name = split_item_key(key)
        change = current_qty - prev_qty
        changes.append(
            ItemChange(
                category=category,
                item_name=item_name,
                current_qty=current_qty,
                prev_qty=prev_qty,
                change=change,
                trend=classify_trend(change),
            )
        )
    return changes


def compute_usage_summary(
    submissions: Sequence[InventorySubmission],
    limit: int = settings.USAGE_SUMMARY_WINDOW,
) -> list[UsageSnapshot]:
    """Total stock on hand per submission, oldest first, for the dashboard sparkline."""
    recent = list(submissions[:limit])
    recent.reverse()
    return [
        UsageSnapshot(
            date=sub.submitted_at,
            total_quantity=submission_quantity(sub.data),
            item_count=len(sub.data),
        )
        for sub in recent
    ]


def compute_consumption_rate(
    submissions: Sequence[InventorySubmission],
    now: Optional[datetime] = None,
    window_days: int = settings.CONSUMPTION_WINDOW_DAYS,
    limit: int = settings.CONSUMPTION_TOP_N,
    max_submissions: int = settings.TREND_WINDOW,
) -> list[ConsumptionRate]:
    """
    Rolling weekly consumption per item and a projected weeks-until-depletion.

    Only submissions inside the trailing window count. Each adjacent (newer, older)
    pair contributes its own decrease; a pair where stock went up (a restock)
    contributes nothing and does not offset consumption seen in other pairs, so
    weeksRemaining reads as "if the current depletion pace continues".
    """
    now = as_utc(now)
    cutoff = now - timedelta(days=window_days)
    window = [s for s in submissions[:max_submissions] if s.timestamp >= cutoff]

    if len(window) < 2:
        logger.debug(f"Consumption rate skipped: {len(window)} submission(s) in window")
        return []

    consumption: dict[str, dict] = {}
    for newer, older in zip(window, window[1:]):
        # Same-day submissions still count as one day
        days_between = max(1, days_ceil(older.timestamp, newer.timestamp))

        for key in _key_union(newer.data, older.data):
            consumed = item_total(older.data, key) - item_total(newer.data, key)
            if consumed <= 0:
                continue
            totals = consumption.setdefault(
                key, {"total_consumed": 0, "total_days": 0, "data_points": 0}
            )
            totals["total_consumed"] += consumed
            totals["total_days"] += days_between
            totals["data_points"] += 1

    newest = window[0].data
    rates = []
    for key, totals in consumption.items():
        if totals["total_consumed"] <= 0 or totals["total_days"] <= 0:
            continue
        avg_weekly_rate = totals["total_consumed"] / totals["total_days"] * 7
        current_qty = item_total(newest, key)
        weeks_remaining = (
            math.ceil(current_qty / avg_weekly_rate)
            if avg_weekly_rate > 0 and current_qty > 0
            else 0
        )
        category, item_name = split_item_key(key)
        rates.append(
            ConsumptionRate(
                category=category,
                item_name=item_name,
                current_qty=current_qty,
                avg_weekly_rate=avg_weekly_rate,
                weekly_rate=f"{avg_weekly_rate:.1f}",
                weeks_remaining=weeks_remaining,
                **totals,
            )
        )

    rates.sort(key=lambda r: r.avg_weekly_rate, reverse=True)
    return rates[:limit]


def build_item_time_series(
    submissions: Sequence[InventorySubmission],
    limit: int = settings.TREND_WINDOW,
) -> list[ItemTimeSeries]:
    """
    One quantity series per item across the recent submissions, oldest point first.
    Items missing from a submission simply have no point for that date.
    """
    series: dict[str, ItemTimeSeries] = {}
    recent = list(submissions[:limit])
    recent.reverse()

    for sub in recent:
        for key, value in sub.data.items():
            if key not in series:
                category, item_name = split_item_key(key)
                series[key] = ItemTimeSeries(key=key, category=category, item_name=item_name)
            series[key].data_points.append(
                TimeSeriesPoint(date=sub.submitted_at, quantity=snapshot_quantity(value))
            )

    return sorted(series.values(), key=lambda s: (s.category, s.item_name))


def build_usage_trends(
    submissions: Sequence[InventorySubmission],
    now: Optional[datetime] = None,
) -> UsageTrends:
    return UsageTrends(
        item_changes=compute_item_changes(submissions),
        usage_summary=compute_usage_summary(submissions),
        consumption_rate=compute_consumption_rate(submissions, now=now),
        item_time_series=build_item_time_series(submissions),
    )
