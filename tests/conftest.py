from datetime import datetime, timedelta, timezone

import pytest

from inventory_insights import settings
from inventory_insights.repository import KeyValueInventoryRepository, MemoryStore
from inventory_insights.schemas import InventorySubmission

NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


def at(days_ago: float, now: datetime = NOW) -> str:
    return (now - timedelta(days=days_ago)).isoformat()


def make_submission(days_ago: float, data: dict, slug: str = "acme-labs", sub_id: str = None) -> InventorySubmission:
    return InventorySubmission(
        id=sub_id or f"{slug}-{days_ago}",
        slug=slug,
        submitted_at=at(days_ago),
        submitted_by="lab@acme.test",
        data=data,
    )


def qty(open_qty, closed_qty=0, **extra) -> dict:
    return {"batches": [{"openQty": open_qty, "closedQty": closed_qty, **extra}]}


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def repository(store):
    return KeyValueInventoryRepository(store)


@pytest.fixture
def seed(store):
    """Writes raw submission records straight into the store, bypassing submit()."""

    def _seed(*submissions: InventorySubmission):
        existing = store.get(settings.SUBMISSIONS_KEY, [])
        store.set(settings.SUBMISSIONS_KEY, existing + [s.to_json() for s in submissions])

    return _seed


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    out = tmp_path / "output"
    monkeypatch.setattr(settings, "OUTPUT_DIR", out)
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    return out
