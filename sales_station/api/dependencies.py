"""
FastAPI dependencies — DataStore singleton, view filter parsing.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import HTTPException, Query

from sales_station.config import ALL_PRODUCTS
from sales_station.data.store import DataStore
from sales_station.data.schemas import ViewFilter, ViewMode

# ---------------------------------------------------------------------------
# Global store singleton (set during startup)
# ---------------------------------------------------------------------------
_store: DataStore | None = None


def set_store(store: DataStore | None) -> None:
    global _store
    _store = store


def get_store() -> DataStore:
    if _store is None or not _store.is_loaded:
        raise HTTPException(503, "Data not loaded yet")
    return _store


# ---------------------------------------------------------------------------
# View filter parsing from query params
# ---------------------------------------------------------------------------

def _parse_date(value: Optional[str], name: str) -> Optional[dt.date]:
    if not value:
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise HTTPException(400, f"Invalid {name}: {value} (expected YYYY-MM-DD)")


def parse_view_filter(
    start: Optional[str] = Query(None, description="YYYY-MM-DD, inclusive"),
    end: Optional[str] = Query(None, description="YYYY-MM-DD, inclusive"),
    view_mode: str = Query("day", description="day|week|month"),
    product: str = Query(ALL_PRODUCTS, description="'all' or an exact product name"),
    group_by_category: bool = Query(False, description="Split trend buckets by category"),
) -> ViewFilter:
    """Parse dashboard query parameters into a ViewFilter.

    Missing dates are left open; the router fills them from the store's
    default range.
    """
    try:
        mode = ViewMode(view_mode)
    except ValueError:
        raise HTTPException(400, f"Invalid view_mode: {view_mode}")

    sd = _parse_date(start, "start")
    ed = _parse_date(end, "end")
    if sd and ed and sd > ed:
        raise HTTPException(400, f"start ({sd}) is after end ({ed})")

    return ViewFilter(
        start=sd,
        end=ed,
        view_mode=mode,
        product=product or ALL_PRODUCTS,
        group_by_category=group_by_category,
    )
