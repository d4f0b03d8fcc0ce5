"""
Dashboard endpoint — KPIs, trend series, and category breakdown for a view.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sales_station.data.store import DataStore
from sales_station.data.schemas import ViewFilter
from sales_station.api.dependencies import get_store, parse_view_filter
from sales_station.analytics.common import sanitize_for_json
from sales_station.analytics.dashboard import aggregate

router = APIRouter(prefix="/api", tags=["dashboard"])


def _safe_json(data: dict) -> JSONResponse:
    return JSONResponse(content=sanitize_for_json(data))


@router.get("/dashboard")
def dashboard(
    store: DataStore = Depends(get_store),
    filters: ViewFilter = Depends(parse_view_filter),
):
    """View model for the given range, bucket size, and product.

    Open range ends fall back to the data's first/last date.
    """
    records = store.records
    default = store.default_range
    if default is not None:
        if filters.start is None:
            filters.start = default.start
        if filters.end is None:
            filters.end = default.end

    view = aggregate(records, filters)
    return _safe_json({
        "range": {
            "start": filters.start.isoformat() if filters.start else None,
            "end": filters.end.isoformat() if filters.end else None,
            "label": filters.label,
        },
        "default_range": default.to_dict() if default else None,
        "view_mode": filters.view_mode.value,
        "product": filters.product,
        "group_by_category": filters.group_by_category,
        "products": sorted({r.product_name for r in records}),
        "last_error": store.last_error,
        **view,
    })
