import logging
import math
from datetime import datetime, timedelta
from typing import Optional

import pandas as pd

from . import settings
from .analytics import build_alerts, build_usage_trends
from .normalizer import make_item_key, normalize_inventory_data
from .repository import InventoryRepository
from .schemas import (
    AdminAlerts,
    AdminReport,
    AdminSummary,
    Batch,
    ClientExpiringAlert,
    ClientLowStockAlert,
    ClientRecord,
    ClientSummary,
    InventoryReport,
    InventorySubmission,
    ItemSnapshot,
    LatestSnapshot,
    TemplateCategory,
)
from .utils import as_utc, parse_timestamp

logger = logging.getLogger(__name__)


def assemble_client_report(
    history: list[InventorySubmission],
    template: list[TemplateCategory],
    custom_items: list[dict],
    now: Optional[datetime] = None,
) -> InventoryReport:
    """
    Alerts from the newest submission plus usage trends from the recent history.
    A client with no history gets empty alerts and trends alongside the template.
    """
    now = as_utc(now)
    report = InventoryReport(
        submissions=history[: settings.TREND_WINDOW],
        template=template,
        custom_items=custom_items,
    )
    if history:
        report.alerts = build_alerts(history[0].data, now=now)
        report.usage_trends = build_usage_trends(history, now=now)
    return report


def build_client_report(
    slug: str, repository: InventoryRepository, now: Optional[datetime] = None
) -> InventoryReport:
    history = repository.get_history(slug)
    logger.info(f"Building inventory report for '{slug}' from {len(history)} submission(s)")
    return assemble_client_report(
        history,
        repository.get_template(),
        repository.get_custom_items(slug),
        now=now,
    )


def empty_inventory_data(template: list[TemplateCategory]) -> dict[str, ItemSnapshot]:
    """One blank batch per template item, used to pre-fill the form for a new client."""
    return {
        make_item_key(category.category, item): ItemSnapshot(batches=[Batch()])
        for category in template
        for item in category.items
    }


def latest_snapshot(slug: str, repository: InventoryRepository) -> LatestSnapshot:
    history = repository.get_history(slug, limit=1)
    if not history:
        return LatestSnapshot(data=empty_inventory_data(repository.get_template()))

    latest = history[0]
    return LatestSnapshot(
        id=latest.id,
        slug=latest.slug,
        submitted_at=latest.submitted_at,
        submitted_by=latest.submitted_by,
        data=normalize_inventory_data(latest.data),
    )


def _summarize_client(
    slug: str, client_name: str, submissions: list[InventorySubmission], now: datetime
) -> tuple[dict, list[ClientLowStockAlert], list[ClientExpiringAlert]]:
    latest = submissions[0]
    snapshots = normalize_inventory_data(latest.data)
    batches = [b for snap in snapshots.values() for b in snap.batches]
    alerts = build_alerts(latest.data, now=now)

    # NaN never compares below the inactivity cutoff and sorts last
    last_ts = parse_timestamp(latest.submitted_at)

    tag = {"client_name": client_name, "slug": slug}
    low_stock = [
        ClientLowStockAlert(**a.model_dump(), **tag) for a in alerts.low_stock
    ]
    expiring = [
        ClientExpiringAlert(**a.model_dump(), **tag) for a in alerts.expiring_soon
    ]

    summary = {
        "slug": slug,
        "client_name": client_name,
        "last_submission": latest.submitted_at,
        "last_submission_ts": last_ts.timestamp() if last_ts else math.nan,
        "total_items": len(batches),
        "total_quantity": sum(b.total_qty for b in batches),
        "low_stock_count": len(low_stock),
        "expiring_count": len(expiring),
        "submission_count": len(submissions),
    }
    return summary, low_stock, expiring


def assemble_admin_report(
    all_history: list[InventorySubmission],
    clients: list[ClientRecord],
    now: Optional[datetime] = None,
) -> AdminReport:
    """
    Cross-client view for admins: every client's current alerts, a per-client
    summary and the clients that have gone quiet. all_history is newest first.
    """
    now = as_utc(now)
    names = {c.slug: c.display_name for c in clients}

    by_slug: dict[str, list[InventorySubmission]] = {}
    for submission in all_history:
        by_slug.setdefault(submission.slug, []).append(submission)

    rows = []
    all_low_stock: list[ClientLowStockAlert] = []
    all_expiring: list[ClientExpiringAlert] = []

    for slug, submissions in by_slug.items():
        recent = submissions[: settings.TREND_WINDOW]
        summary, low_stock, expiring = _summarize_client(
            slug, names.get(slug, slug), recent, now
        )
        rows.append(summary)
        all_low_stock.extend(low_stock)
        all_expiring.extend(expiring)

    all_low_stock.sort(key=lambda a: a.quantity)
    all_expiring.sort(key=lambda a: a.days_until_expiry)

    client_summaries: list[ClientSummary] = []
    inactive_clients: list[ClientSummary] = []
    if rows:
        df = pd.DataFrame(rows)
        df = df.sort_values("last_submission_ts", ascending=False, kind="stable")
        inactive_cutoff = now - timedelta(days=settings.INACTIVE_CLIENT_DAYS)
        inactive_df = df[df["last_submission_ts"] < inactive_cutoff.timestamp()].sort_values(
            "last_submission_ts", ascending=True, kind="stable"
        )
        df = df.drop(columns=["last_submission_ts"])
        inactive_df = inactive_df.drop(columns=["last_submission_ts"])
        client_summaries = [ClientSummary(**r) for r in df.to_dict("records")]
        inactive_clients = [ClientSummary(**r) for r in inactive_df.to_dict("records")]

    logger.info(
        f"Admin report: {len(rows)} active client(s), {len(all_low_stock)} low stock, "
        f"{len(all_expiring)} expiring, {len(inactive_clients)} inactive"
    )
    return AdminReport(
        summary=AdminSummary(
            total_clients=len(clients),
            active_clients=len(rows),
            total_low_stock_alerts=len(all_low_stock),
            total_expiring_alerts=len(all_expiring),
        ),
        alerts=AdminAlerts(low_stock=all_low_stock, expiring_soon=all_expiring),
        client_summaries=client_summaries,
        inactive_clients=inactive_clients,
    )


def build_admin_report(
    repository: InventoryRepository, now: Optional[datetime] = None
) -> AdminReport:
    return assemble_admin_report(repository.get_all_history(), repository.get_clients(), now=now)
