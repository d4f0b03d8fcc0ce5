"""Tests for dashboard aggregation: filtering, KPIs, buckets, breakdowns."""

import datetime as dt

import pytest

from sales_station.analytics.common import month_key, week_key
from sales_station.analytics.dashboard import aggregate, bucket_key, date_bounds
from sales_station.config import NO_TOP_PRODUCT, RECENT_DETAIL_LIMIT
from sales_station.data.schemas import DateRange, ViewFilter, ViewMode


def _range(start: str, end: str, **kwargs) -> ViewFilter:
    return ViewFilter(start=dt.date.fromisoformat(start), end=dt.date.fromisoformat(end), **kwargs)


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------

def test_full_range_total_equals_sum_of_amounts(sample_records) -> None:
    bounds = date_bounds(sample_records)
    view = aggregate(sample_records, ViewFilter(start=bounds.start, end=bounds.end))

    assert view["total_sales"] == sum(r.amount for r in sample_records)
    assert view["total_quantity"] == sum(r.quantity for r in sample_records)
    assert view["record_count"] == len(sample_records)


def test_aggregate_is_idempotent(sample_records) -> None:
    filters = _range("2024-01-01", "2024-02-29", view_mode=ViewMode.WEEK, group_by_category=True)

    assert aggregate(sample_records, filters) == aggregate(sample_records, filters)


def test_end_date_includes_whole_day(sample_records) -> None:
    view = aggregate(sample_records, _range("2024-01-01", "2024-01-08"))

    assert view["record_count"] == 4
    assert view["total_sales"] == 4100.0


def test_start_date_is_inclusive(sample_records) -> None:
    view = aggregate(sample_records, _range("2024-02-15", "2024-02-15"))

    assert view["record_count"] == 1
    assert view["total_sales"] == 450.0


def test_product_filter(sample_records) -> None:
    view = aggregate(sample_records, _range("2024-01-01", "2024-12-31", product="女士養髮液70ml"))

    assert view["total_sales"] == 3600.0
    assert view["total_quantity"] == 3
    assert view["top_product"] == "女士養髮液70ml"


# ---------------------------------------------------------------------------
# Empty cases
# ---------------------------------------------------------------------------

def test_empty_input_returns_zeroed_view() -> None:
    view = aggregate([], ViewFilter())

    assert view["total_sales"] == 0
    assert view["total_quantity"] == 0
    assert view["top_product"] == NO_TOP_PRODUCT
    assert view["trend"] == []
    assert view["category_breakdown"] == []
    assert view["recent"] == []


def test_filter_matching_nothing_returns_zeroed_view(sample_records) -> None:
    view = aggregate(sample_records, _range("2023-01-01", "2023-12-31"))

    assert view["record_count"] == 0
    assert view["top_product"] == NO_TOP_PRODUCT
    assert view["trend"] == []
    assert view["category_keys"] == sorted({r.category for r in sample_records})


# ---------------------------------------------------------------------------
# Top product
# ---------------------------------------------------------------------------

def test_top_product_by_summed_amount(sample_records) -> None:
    view = aggregate(sample_records, ViewFilter())

    assert view["top_product"] == "女士養髮液70ml"


def test_top_product_tie_goes_to_first_seen(make_record) -> None:
    x_first = [make_record("2024-01-01", product="X"), make_record("2024-01-02", product="Y")]
    y_first = list(reversed(x_first))

    assert aggregate(x_first, ViewFilter())["top_product"] == "X"
    assert aggregate(y_first, ViewFilter())["top_product"] == "Y"


def test_zero_amount_sales_have_no_top_product(make_record) -> None:
    records = [make_record("2024-01-01", amount=0.0)]

    assert aggregate(records, ViewFilter())["top_product"] == NO_TOP_PRODUCT


# ---------------------------------------------------------------------------
# Trend buckets
# ---------------------------------------------------------------------------

def test_monday_2024_01_01_is_week_one() -> None:
    assert week_key(dt.date(2024, 1, 1)) == "2024-W01"
    assert bucket_key("2024-01-01", ViewMode.WEEK) == "2024-W01"


def test_week_belongs_to_iso_year() -> None:
    assert week_key(dt.date(2021, 1, 1)) == "2020-W53"
    assert week_key(dt.date(2024, 12, 30)) == "2025-W01"


def test_month_key_is_zero_padded() -> None:
    assert month_key(dt.date(2024, 3, 9)) == "2024-03"


def test_day_buckets(sample_records) -> None:
    view = aggregate(sample_records, ViewFilter(view_mode=ViewMode.DAY))

    assert [row["bucket"] for row in view["trend"]] == [
        "2024-01-01", "2024-01-03", "2024-01-08", "2024-02-02", "2024-02-15",
    ]
    jan_8 = view["trend"][2]
    assert jan_8["amount"] == 2000.0
    assert jan_8["quantity"] == 4


def test_week_buckets(sample_records) -> None:
    view = aggregate(sample_records, ViewFilter(view_mode=ViewMode.WEEK))

    assert [(row["bucket"], row["amount"], row["quantity"]) for row in view["trend"]] == [
        ("2024-W01", 2100.0, 3),
        ("2024-W02", 2000.0, 4),
        ("2024-W05", 2400.0, 2),
        ("2024-W07", 450.0, 1),
    ]


def test_month_buckets_sorted(sample_records) -> None:
    shuffled = list(reversed(sample_records))
    view = aggregate(shuffled, ViewFilter(view_mode=ViewMode.MONTH))

    assert [(row["bucket"], row["amount"]) for row in view["trend"]] == [
        ("2024-01", 4100.0),
        ("2024-02", 2850.0),
    ]


def test_category_split_is_zero_filled(sample_records) -> None:
    """Categories hidden by the product filter still appear in every bucket."""
    filters = ViewFilter(view_mode=ViewMode.WEEK, product="女士養髮液70ml", group_by_category=True)
    view = aggregate(sample_records, filters)
    categories = sorted({r.category for r in sample_records})

    assert [row["bucket"] for row in view["trend"]] == ["2024-W01", "2024-W05"]
    for row in view["trend"]:
        assert sorted(row["by_category"]) == categories
    assert view["trend"][0]["by_category"] == {"洗髮露": 0.0, "養髮液": 1200.0, "居家保養": 0.0}


def test_category_split_sums_match_bucket_amount(sample_records) -> None:
    view = aggregate(sample_records, ViewFilter(view_mode=ViewMode.MONTH, group_by_category=True))

    for row in view["trend"]:
        assert sum(row["by_category"].values()) == pytest.approx(row["amount"])


def test_no_category_split_unless_requested(sample_records) -> None:
    view = aggregate(sample_records, ViewFilter())

    assert all("by_category" not in row for row in view["trend"])


# ---------------------------------------------------------------------------
# Category breakdown & bounds
# ---------------------------------------------------------------------------

def test_category_breakdown(sample_records) -> None:
    view = aggregate(sample_records, ViewFilter())
    breakdown = {item["name"]: item for item in view["category_breakdown"]}

    assert breakdown["洗髮露"]["value"] == 2700.0
    assert breakdown["養髮液"]["value"] == 3600.0
    assert breakdown["居家保養"]["value"] == 650.0
    assert sum(item["value"] for item in view["category_breakdown"]) == view["total_sales"]
    assert breakdown["養髮液"]["share"] == pytest.approx(51.8)


def test_date_bounds(sample_records) -> None:
    assert date_bounds(sample_records) == DateRange(dt.date(2024, 1, 1), dt.date(2024, 2, 15))
    assert date_bounds([]) is None


# ---------------------------------------------------------------------------
# Latest details
# ---------------------------------------------------------------------------

def test_recent_rows_follow_the_filter_newest_first(sample_records) -> None:
    view = aggregate(sample_records, _range("2024-01-01", "2024-12-31", product="女士養髮液70ml"))

    assert [row["date"] for row in view["recent"]] == ["2024-02-02", "2024-01-03"]
    assert view["recent"][0]["amount"] == 2400.0
    assert view["recent"][0]["quantity"] == 2


def test_recent_rows_are_capped(make_record) -> None:
    first = dt.date(2024, 1, 1)
    records = [make_record((first + dt.timedelta(days=i)).isoformat()) for i in range(RECENT_DETAIL_LIMIT + 20)]

    view = aggregate(records, ViewFilter())

    assert view["record_count"] == RECENT_DETAIL_LIMIT + 20
    assert len(view["recent"]) == RECENT_DETAIL_LIMIT
    assert view["recent"][0]["id"] == records[-1].id
    assert view["recent"][-1]["id"] == records[20].id
