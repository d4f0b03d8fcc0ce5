"""
Dashboard analytics — turn the flat record list into KPIs, a bucketed
trend series, a category breakdown, and the latest detail rows for one
view filter.

Every function here is pure: same records and filter, same output.
"""
from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional

import pandas as pd

from sales_station.config import ALL_PRODUCTS, NO_TOP_PRODUCT, RECENT_DETAIL_LIMIT
from sales_station.data.schemas import DateRange, SalesRecord, ViewFilter, ViewMode
from sales_station.analytics.common import month_key, pct_of_total, week_key


_RECORD_COLUMNS = ["id", "date", "category", "product_name", "quantity", "amount", "timestamp"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def records_frame(records: Iterable[SalesRecord]) -> pd.DataFrame:
    """Records as a DataFrame, one row per record, input order preserved."""
    rows = [
        (r.id, r.date, r.category, r.product_name, r.quantity, r.amount, r.timestamp)
        for r in records
    ]
    return pd.DataFrame.from_records(rows, columns=_RECORD_COLUMNS)


def bucket_key(date_str: str, view_mode: ViewMode) -> str:
    """Trend bucket for a YYYY-MM-DD date under the given view mode."""
    if view_mode == ViewMode.DAY:
        return date_str
    day = dt.date.fromisoformat(date_str)
    if view_mode == ViewMode.WEEK:
        return week_key(day)
    return month_key(day)


def date_bounds(records: Iterable[SalesRecord]) -> Optional[DateRange]:
    """Earliest and latest record dates, or None for no records."""
    records = list(records)
    if not records:
        return None
    first = min(records, key=lambda r: r.timestamp)
    last = max(records, key=lambda r: r.timestamp)
    return DateRange(first.day, last.day)


def _empty_view(category_keys: list[str]) -> dict:
    return {
        "record_count": 0,
        "total_sales": 0.0,
        "total_quantity": 0,
        "top_product": NO_TOP_PRODUCT,
        "trend": [],
        "category_breakdown": [],
        "category_keys": category_keys,
        "recent": [],
    }


def _apply_filter(df: pd.DataFrame, filters: ViewFilter) -> pd.DataFrame:
    start_ts, end_ts = filters.resolve()
    mask = pd.Series(True, index=df.index)
    if start_ts is not None:
        mask &= df["timestamp"] >= start_ts
    if end_ts is not None:
        mask &= df["timestamp"] < end_ts
    if filters.product != ALL_PRODUCTS:
        mask &= df["product_name"] == filters.product
    return df[mask]


def top_product(df: pd.DataFrame) -> str:
    """Product with the highest summed amount.

    Ties keep the product seen first in record order; a product needs a
    positive total to qualify.
    """
    by_product = df.groupby("product_name", sort=False)["amount"].sum()
    best, best_amount = NO_TOP_PRODUCT, 0.0
    for name, total in by_product.items():
        if total > best_amount:
            best, best_amount = name, float(total)
    return best


def _trend_series(df: pd.DataFrame, view_mode: ViewMode) -> tuple[list[dict], pd.Series]:
    buckets = df["date"].map(lambda d: bucket_key(d, view_mode))
    grouped = (
        df.assign(bucket=buckets)
        .groupby("bucket", sort=True)
        .agg(amount=("amount", "sum"), quantity=("quantity", "sum"))
    )
    rows = [
        {"bucket": row.Index, "amount": float(row.amount), "quantity": int(row.quantity)}
        for row in grouped.itertuples()
    ]
    return rows, buckets


def _fill_category_amounts(
    rows: list[dict],
    df: pd.DataFrame,
    buckets: pd.Series,
    category_keys: list[str],
) -> None:
    """Give every bucket an amount for every category, zero where unsold.

    Stacked charts need the same key set in each bucket.
    """
    per_cell = df.assign(bucket=buckets).groupby(["bucket", "category"])["amount"].sum().to_dict()
    for row in rows:
        row["by_category"] = {
            cat: float(per_cell.get((row["bucket"], cat), 0.0)) for cat in category_keys
        }


def _category_breakdown(df: pd.DataFrame, total_sales: float) -> list[dict]:
    by_category = df.groupby("category", sort=False)["amount"].sum()
    return [
        {
            "name": name,
            "value": float(value),
            "share": round(pct_of_total(float(value), total_sales), 1),
        }
        for name, value in by_category.items()
    ]


def recent_details(df: pd.DataFrame, limit: int = RECENT_DETAIL_LIMIT) -> list[dict]:
    """Filtered rows newest first, capped at ``limit``; same-day rows keep input order."""
    newest = df.sort_values("timestamp", ascending=False, kind="stable")
    return [
        {
            "id": row.id,
            "date": row.date,
            "category": row.category,
            "product_name": row.product_name,
            "quantity": int(row.quantity),
            "amount": float(row.amount),
            "timestamp": int(row.timestamp),
        }
        for row in newest.head(limit).itertuples(index=False)
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def aggregate(records: Iterable[SalesRecord], filters: ViewFilter) -> dict:
    """Build the dashboard view model for one filter.

    Category keys come from the whole record set, so the stacked trend keeps
    the same series when a product or date filter hides a category.
    """
    df = records_frame(records)
    category_keys = sorted(df["category"].unique().tolist()) if not df.empty else []

    filtered = _apply_filter(df, filters) if not df.empty else df
    if filtered.empty:
        return _empty_view(category_keys)

    # Sequential sum so the total equals a plain running total of the amounts
    total_sales = sum(filtered["amount"].tolist())
    total_quantity = int(filtered["quantity"].sum())

    trend, buckets = _trend_series(filtered, filters.view_mode)
    if filters.group_by_category:
        _fill_category_amounts(trend, filtered, buckets, category_keys)

    return {
        "record_count": int(len(filtered)),
        "total_sales": total_sales,
        "total_quantity": total_quantity,
        "top_product": top_product(filtered),
        "trend": trend,
        "category_breakdown": _category_breakdown(filtered, total_sales),
        "category_keys": category_keys,
        "recent": recent_details(filtered),
    }
