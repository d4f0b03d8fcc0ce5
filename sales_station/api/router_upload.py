"""
Upload endpoint: import a spreadsheet of past sales.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.concurrency import run_in_threadpool

from sales_station.data.loader import load_import_file
from sales_station.data.store import DataStore
from sales_station.api.dependencies import get_store
from sales_station.exceptions import ImportBatchError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/import")
async def import_sheet(file: UploadFile = File(...), store: DataStore = Depends(get_store)):
    """Import the first sheet of an .xlsx/.xls/.csv file.

    The whole batch is rejected if a required column is missing or no row
    survives; rows with unreadable dates are dropped and counted.
    """
    if not file.filename:
        raise HTTPException(400, "Missing filename")

    content = await file.read()
    try:
        result = await run_in_threadpool(load_import_file, content, file.filename)
    except ImportBatchError as exc:
        raise HTTPException(400, {"message": str(exc), "missing_columns": exc.missing_columns})

    if not result.usable:
        raise HTTPException(400, {"message": "No valid sales rows in file", **result.summary()})

    if not await run_in_threadpool(store.append_batch, result.records):
        raise HTTPException(502, f"Import could not be saved: {store.last_error}")

    logger.info("Imported %d records from %s", len(result.records), file.filename)
    return {"status": "imported", "file": file.filename, **result.summary()}
