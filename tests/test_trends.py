from datetime import timedelta

import pytest

from inventory_insights.analytics import (
    build_item_time_series,
    compute_consumption_rate,
    compute_item_changes,
    compute_usage_summary,
)
from inventory_insights.schemas import InventorySubmission
from tests.conftest import make_submission, qty

BHB = "Reagent|BHB - R1"


def _changes_by_item(submissions):
    return {c.item_name: c for c in compute_item_changes(submissions)}


def test_item_changes_classify_trend():
    history = [
        make_submission(0, {BHB: qty(10), "Reagent|BHB - R2": qty(5), "Reagent|pH - R1": qty(1)}),
        make_submission(7, {BHB: qty(7), "Reagent|BHB - R2": qty(5), "Reagent|pH - R1": qty(4)}),
    ]

    changes = _changes_by_item(history)

    assert (changes["BHB - R1"].change, changes["BHB - R1"].trend) == (3, "up")
    assert (changes["BHB - R2"].change, changes["BHB - R2"].trend) == (0, "stable")
    assert (changes["pH - R1"].change, changes["pH - R1"].trend) == (-3, "down")


def test_item_changes_cover_key_union_and_skip_all_zero():
    history = [
        make_submission(0, {"Reagent|New": qty(4), "Reagent|Empty": qty(0)}),
        make_submission(7, {"Reagent|Gone": qty(2), "Reagent|Empty": qty("")}),
    ]

    changes = compute_item_changes(history)

    assert [c.item_name for c in changes] == ["New", "Gone"]
    assert (changes[1].current_qty, changes[1].prev_qty, changes[1].trend) == (0, 2, "down")


def test_item_changes_need_two_submissions():
    assert compute_item_changes([]) == []
    assert compute_item_changes([make_submission(0, {BHB: qty(3)})]) == []


def test_consumption_rate_single_pair(now):
    history = [make_submission(0, {BHB: qty(13)}), make_submission(7, {BHB: qty(20)})]

    [rate] = compute_consumption_rate(history, now=now)

    assert rate.item_name == "BHB - R1"
    assert rate.total_consumed == 7
    assert rate.total_days == 7
    assert rate.data_points == 1
    assert rate.avg_weekly_rate == pytest.approx(7)
    assert rate.weekly_rate == "7.0"
    assert rate.current_qty == 13
    assert rate.weeks_remaining == 2


def test_restock_does_not_offset_consumption(now):
    history = [
        make_submission(0, {BHB: qty(15)}),
        make_submission(7, {BHB: qty(20)}),  # restocked
        make_submission(14, {BHB: qty(10)}),
    ]

    [rate] = compute_consumption_rate(history, now=now)

    assert rate.total_consumed == 5
    assert rate.total_days == 7
    assert rate.data_points == 1
    assert rate.avg_weekly_rate == pytest.approx(5)
    assert rate.weeks_remaining == 3


def test_submissions_outside_window_are_ignored(now):
    history = [
        make_submission(0, {BHB: qty(10)}),
        make_submission(10, {BHB: qty(20)}),
        make_submission(40, {BHB: qty(500)}),
    ]

    [rate] = compute_consumption_rate(history, now=now)

    assert rate.total_consumed == 10
    assert rate.total_days == 10
    assert rate.avg_weekly_rate == pytest.approx(7)
    assert rate.weeks_remaining == 2


def test_fewer_than_two_submissions_in_window(now):
    history = [make_submission(0, {BHB: qty(10)}), make_submission(31, {BHB: qty(20)})]

    assert compute_consumption_rate(history, now=now) == []
    assert compute_consumption_rate([], now=now) == []


def test_same_day_submissions_count_as_one_day(now):
    history = [
        make_submission(0, {BHB: qty(3)}),
        make_submission(2 / 24, {BHB: qty(5)}),
    ]

    [rate] = compute_consumption_rate(history, now=now)

    assert rate.total_days == 1
    assert rate.avg_weekly_rate == pytest.approx(14)
    assert rate.weeks_remaining == 1


def test_depleted_item_projects_zero_weeks(now):
    history = [make_submission(0, {BHB: qty(0)}), make_submission(7, {BHB: qty(6)})]

    [rate] = compute_consumption_rate(history, now=now)

    assert rate.current_qty == 0
    assert rate.weeks_remaining == 0


def test_consumption_rate_sorted_and_capped(now):
    newer = {f"Reagent|Item {i:02d}": qty(100 - i) for i in range(12)}
    older = {f"Reagent|Item {i:02d}": qty(100) for i in range(12)}
    history = [make_submission(0, newer), make_submission(7, older)]

    rates = compute_consumption_rate(history, now=now)

    assert len(rates) == 10
    assert rates[0].item_name == "Item 11"
    assert [r.avg_weekly_rate for r in rates] == sorted((r.avg_weekly_rate for r in rates), reverse=True)
    assert "Item 00" not in {r.item_name for r in rates}


def test_consumption_rate_looks_at_twelve_most_recent_only(now):
    # 14 daily submissions, all inside the window; only the newest 12 (11 pairs) count
    history = [make_submission(day, {BHB: qty(10 + day)}) for day in range(14)]

    [rate] = compute_consumption_rate(history, now=now)

    assert rate.data_points == 11
    assert rate.total_consumed == 11


@pytest.mark.parametrize("submitted_at", ["yesterday-ish", "now", "today"])
def test_unparseable_timestamp_never_enters_window(now, submitted_at):
    broken = InventorySubmission(id="x", slug="acme-labs", submitted_at=submitted_at, data={BHB: qty(90)})
    history = [make_submission(0, {BHB: qty(10)}), broken]

    assert compute_consumption_rate(history, now=now) == []


def test_usage_summary_is_chronological():
    history = [
        make_submission(0, {BHB: qty(3), "Reagent|BHB - R2": qty(1, 1)}),
        make_submission(7, {BHB: qty(8)}),
    ]

    summary = compute_usage_summary(history)

    assert [(s.total_quantity, s.item_count) for s in summary] == [(8, 1), (5, 2)]
    assert summary[0].date == history[1].submitted_at


def test_usage_summary_limited_to_eight():
    history = [make_submission(day, {BHB: qty(day)}) for day in range(10)]

    summary = compute_usage_summary(history)

    assert len(summary) == 8
    assert summary[-1].total_quantity == 0
    assert summary[0].total_quantity == 7


def test_item_time_series_chronological_with_gaps():
    history = [
        make_submission(0, {"Reagent|Zeta": qty(1), "Controls|Alpha": qty(4)}),
        make_submission(7, {"Reagent|Zeta": qty(2)}),
        make_submission(14, {"Reagent|Zeta": qty(3), "Controls|Alpha": qty(6)}),
    ]

    series = build_item_time_series(history)

    assert [(s.category, s.item_name) for s in series] == [("Controls", "Alpha"), ("Reagent", "Zeta")]
    alpha, zeta = series
    assert alpha.key == "Controls|Alpha"
    assert [p.quantity for p in alpha.data_points] == [6, 4]
    assert [p.date for p in alpha.data_points] == [history[2].submitted_at, history[0].submitted_at]
    assert [p.quantity for p in zeta.data_points] == [3, 2, 1]


def test_item_time_series_limited_to_twelve_submissions():
    history = [make_submission(day, {BHB: qty(day)}) for day in range(20)]

    [series] = build_item_time_series(history)

    assert len(series.data_points) == 12
    assert series.data_points[0].quantity == 11
    assert series.data_points[-1].quantity == 0


def test_window_boundary_is_inclusive(now):
    history = [make_submission(0, {BHB: qty(10)}), make_submission(30, {BHB: qty(40)})]

    [rate] = compute_consumption_rate(history, now=now, window_days=30)

    assert rate.total_days == 30
    assert rate.total_consumed == 30
    assert rate.avg_weekly_rate == pytest.approx(7)


def test_window_is_relative_to_reference_time(now):
    history = [make_submission(0, {BHB: qty(10)}), make_submission(7, {BHB: qty(20)})]

    assert compute_consumption_rate(history, now=now + timedelta(days=40)) == []
