import logging
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from inventory_insights import settings
from inventory_insights.normalizer import normalize_snapshot, split_item_key
from inventory_insights.schemas import Alerts, Batch, ExpiringAlert, LowStockAlert
from inventory_insights.utils import as_utc, days_ceil, parse_timestamp

logger = logging.getLogger(__name__)


def batch_label(item_name: str, batch: Batch, batch_index: int, batch_count: int) -> str:
    """Item name plus a lot (or batch position) suffix so multi-batch items stay distinguishable."""
    if batch.lot_number:
        return f"{item_name} (Lot: {batch.lot_number})"
    if batch_count > 1:
        return f"{item_name} (Batch {batch_index + 1})"
    return item_name


def is_low_stock(quantity: int, threshold: int = settings.LOW_STOCK_THRESHOLD) -> bool:
    # Zero means "out" (or never stocked), which is not flagged here
    return 0 < quantity <= threshold


def days_until_expiry(
    expiry: str, now: datetime, horizon_days: int = settings.EXPIRY_WARNING_DAYS
) -> Optional[int]:
    """Days until the batch expires, or None when it is undated, already expired, or beyond the horizon."""
    expiry_at = parse_timestamp(expiry) if expiry else None
    if expiry_at is None:
        return None
    if expiry_at < now or expiry_at > now + timedelta(days=horizon_days):
        return None
    return days_ceil(now, expiry_at)


def build_alerts(
    data: Mapping[str, Any],
    now: Optional[datetime] = None,
    horizon_days: int = settings.EXPIRY_WARNING_DAYS,
) -> Alerts:
    """
    Scans one submission's inventory map for low-stock and soon-to-expire batches.

    Low stock is sorted by quantity (most urgent first), expiring items by days
    remaining. Malformed items never raise; they simply produce no alert.
    """
    now = as_utc(now)
    low_stock: list[LowStockAlert] = []
    expiring: list[ExpiringAlert] = []

    for key, value in (data or {}).items():
        category, item_name = split_item_key(key)
        batches = normalize_snapshot(value).batches

        for idx, batch in enumerate(batches):
            label = batch_label(item_name, batch, idx, len(batches))
            lot_number = batch.lot_number or None

            if is_low_stock(batch.total_qty):
                low_stock.append(
                    LowStockAlert(
                        category=category,
                        item_name=label,
                        quantity=batch.total_qty,
                        lot_number=lot_number,
                    )
                )

            days_left = days_until_expiry(batch.expiry, now, horizon_days)
            if days_left is not None:
                expiring.append(
                    ExpiringAlert(
                        category=category,
                        item_name=label,
                        expiry=batch.expiry,
                        lot_number=lot_number,
                        days_until_expiry=days_left,
                    )
                )

    low_stock.sort(key=lambda a: a.quantity)
    expiring.sort(key=lambda a: a.days_until_expiry)

    logger.debug(
        f"Alerts: {len(low_stock)} low stock, {len(expiring)} expiring within {horizon_days} days"
    )
    return Alerts(low_stock=low_stock, expiring_soon=expiring)
