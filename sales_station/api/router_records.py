"""
Record endpoints: list the current snapshot, submit one form entry.
"""
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from sales_station.data.normalize import build_entry
from sales_station.data.store import DataStore
from sales_station.api.dependencies import get_store
from sales_station.api.response_models import RecordsResponse, SaveResponse, SalesEntryRequest
from sales_station.exceptions import EntryValidationError

router = APIRouter(prefix="/api", tags=["records"])


@router.get("/records", response_model=RecordsResponse)
def list_records(store: DataStore = Depends(get_store)):
    records = store.records
    return {"records": [asdict(r) for r in records], "count": len(records)}


@router.post("/records", response_model=SaveResponse, status_code=201)
def create_record(entry: SalesEntryRequest, store: DataStore = Depends(get_store)):
    """Validate and save one sale. 400 on bad input, 502 if the save fails."""
    try:
        record = build_entry(entry.model_dump())
    except EntryValidationError as exc:
        raise HTTPException(400, {"message": "Invalid sales entry", "problems": exc.problems})

    if not store.append(record):
        raise HTTPException(502, f"Save failed: {store.last_error}")
    return {"status": "saved", "record": asdict(record)}
