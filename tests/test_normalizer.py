import math

import pytest

from inventory_insights.normalizer import (
    item_total,
    normalize_inventory_data,
    normalize_snapshot,
    split_item_key,
    submission_quantity,
)
from inventory_insights.schemas import Batch
from inventory_insights.utils import to_quantity


def test_canonical_snapshot_is_unchanged():
    value = {"batches": [{"lotNumber": "L-1", "openQty": 5, "closedQty": 1}]}

    normalized = normalize_snapshot(value)

    assert normalized.to_json(exclude_unset=True) == value
    assert normalize_snapshot(normalized) == normalized


def test_legacy_flat_batch_becomes_single_batch():
    normalized = normalize_snapshot({"openQty": 5})

    assert normalized.to_json(exclude_unset=True) == {"batches": [{"openQty": 5}]}


@pytest.mark.parametrize("value", [None, [], [{"openQty": 3}], "junk", 7, {"batches": []}])
def test_unusable_values_degrade_to_one_empty_batch(value):
    normalized = normalize_snapshot(value)

    assert normalized.batches == [Batch()]
    assert normalized.batches[0].total_qty == 0


def test_malformed_batch_entries_never_raise():
    normalized = normalize_snapshot(
        {"batches": [{"openQty": {"nested": 1}, "lotNumber": None, "expiry": ["x"]}, "junk"]}
    )

    assert len(normalized.batches) == 2
    assert normalized.batches[0].open_qty == 0
    assert normalized.batches[0].lot_number == ""
    assert normalized.batches[0].expiry == ""
    assert normalized.batches[1] == Batch()


@pytest.mark.parametrize(
    "raw, expected",
    [
        (4, 4),
        ("12", 12),
        ("3 boxes", 3),
        ("5.7", 5),
        (4.9, 4),
        ("", 0),
        ("abc", 0),
        (None, 0),
        (math.nan, 0),
        (True, 0),
    ],
)
def test_quantity_coercion(raw, expected):
    assert to_quantity(raw) == expected


def test_split_item_key_uses_first_separator():
    assert split_item_key("Reagent|BHB - R1") == ("Reagent", "BHB - R1")
    assert split_item_key("Controls|Odd|Name") == ("Controls", "Odd|Name")
    assert split_item_key("Uncategorized") == ("Uncategorized", "")


def test_item_total_sums_batches_and_defaults_to_zero():
    data = {
        "Reagent|BHB - R1": {"batches": [{"openQty": "2", "closedQty": 3}, {"openQty": 1}]},
        "Reagent|BHB - R2": {"openQty": 4, "closedQty": "1"},
    }

    assert item_total(data, "Reagent|BHB - R1") == 6
    assert item_total(data, "Reagent|BHB - R2") == 5
    assert item_total(data, "Reagent|Missing") == 0
    assert submission_quantity(data) == 11


def test_normalize_inventory_data_handles_non_mapping():
    assert normalize_inventory_data(None) == {}
    assert list(normalize_inventory_data({"A|b": {"openQty": 1}})) == ["A|b"]
