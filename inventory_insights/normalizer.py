"""
Snapshot normalization.

Older submissions stored a single batch's fields directly under the item key;
current ones store {"batches": [...]}. Everything downstream works only on the
canonical ItemSnapshot, so stored values go through normalize_snapshot first.
"""

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from .schemas import Batch, ItemSnapshot

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|"


def split_item_key(key: str) -> tuple[str, str]:
    """'Reagent|BHB - R1' -> ('Reagent', 'BHB - R1'). Splits on the first separator only."""
    category, _, item_name = key.partition(KEY_SEPARATOR)
    return category, item_name


def make_item_key(category: str, item_name: str) -> str:
    return f"{category}{KEY_SEPARATOR}{item_name}"


def _to_batch(value: Any) -> Batch:
    if isinstance(value, Batch):
        return value
    if not isinstance(value, Mapping):
        return Batch()
    try:
        return Batch.model_validate(dict(value))
    except ValidationError as e:
        logger.debug(f"Discarding malformed batch {value!r}: {e}")
        return Batch()


def normalize_snapshot(value: Any) -> ItemSnapshot:
    """
    Converts whatever is stored under an item key into an ItemSnapshot with at
    least one batch. Never raises; missing or malformed values become a single
    empty batch. Normalizing an ItemSnapshot returns it unchanged.
    """
    if isinstance(value, ItemSnapshot):
        return value if value.batches else ItemSnapshot(batches=[Batch()])

    if isinstance(value, Mapping):
        raw_batches = value.get("batches")
        if isinstance(raw_batches, list):
            batches = [_to_batch(b) for b in raw_batches]
        else:
            # Legacy flat form: the mapping itself is the only batch
            batches = [_to_batch(value)]
    else:
        # None, lists and scalars carry no usable batch fields
        batches = []

    return ItemSnapshot(batches=batches or [Batch()])


def normalize_inventory_data(data: Any) -> dict[str, ItemSnapshot]:
    if not isinstance(data, Mapping):
        return {}
    return {key: normalize_snapshot(value) for key, value in data.items()}


def snapshot_quantity(value: Any) -> int:
    return sum(batch.total_qty for batch in normalize_snapshot(value).batches)


def item_total(data: Mapping[str, Any], key: str) -> int:
    """Total quantity across every batch of an item; 0 when the item is absent."""
    value = data.get(key)
    if not value:
        return 0
    return snapshot_quantity(value)


def submission_quantity(data: Mapping[str, Any]) -> int:
    return sum(snapshot_quantity(value) for value in data.values())
