"""
Column mapping, date decoding, numeric coercion, and record construction
for spreadsheet imports, stored payloads, and form entries.
"""
from __future__ import annotations

import datetime as dt
import logging
import math
import uuid
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from sales_station.config import (
    COLUMN_MAP,
    MS_PER_DAY,
    REQUIRED_COLUMNS,
    SPREADSHEET_EPOCH_OFFSET_DAYS,
)
from sales_station.data.schemas import ImportResult, SalesRecord
from sales_station.exceptions import EntryValidationError, ImportBatchError

logger = logging.getLogger(__name__)

# Quantities at or above this do not fit the int64 column and are dropped
_QUANTITY_LIMIT = float(np.iinfo(np.int64).max)

_STORED_ROW_NAMESPACE = uuid.UUID("6f1c2b8e-4d3a-5e7f-9a10-3b2c4d5e6f70")


# ---------------------------------------------------------------------------
# Column normalisation
# ---------------------------------------------------------------------------

def canonical_column(name: Any) -> str | None:
    """Map a raw header (localized or English alias) to a record field."""
    text = str(name).strip()
    return COLUMN_MAP.get(text) or COLUMN_MAP.get(text.lower())


def missing_columns(columns: Iterable[Any]) -> list[str]:
    """Required fields not covered by ``columns``, in report order."""
    present = {canonical_column(c) for c in columns}
    return [f for f in REQUIRED_COLUMNS if f not in present]


def describe_columns(fields: list[str]) -> str:
    return ", ".join(f"{REQUIRED_COLUMNS[f]} ({f})" for f in fields)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename raw headers to record fields, keeping the first of any duplicates."""
    renames = {c: canonical_column(c) for c in df.columns if canonical_column(c)}
    df = df.rename(columns=renames)
    return df.loc[:, ~df.columns.duplicated()]


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def serial_to_date(serial: float) -> dt.date | None:
    """Decode a spreadsheet serial day number (25569 == 1970-01-01)."""
    if not math.isfinite(serial):
        return None
    ms = round((serial - SPREADSHEET_EPOCH_OFFSET_DAYS) * MS_PER_DAY)
    try:
        return (dt.datetime(1970, 1, 1) + dt.timedelta(milliseconds=ms)).date()
    except OverflowError:
        return None


def parse_sale_date(value: Any) -> dt.date | None:
    """Decode a date cell: serial number, datetime/date, or parseable string.

    Returns None when the value cannot be read as a calendar date.
    """
    if value is None or isinstance(value, bool):
        return None
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        return serial_to_date(float(value))
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value

    text = str(value).strip()
    if not text:
        return None
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


# ---------------------------------------------------------------------------
# Numbers & labels
# ---------------------------------------------------------------------------

def _coerce_numeric(series: pd.Series) -> pd.Series:
    """Numbers as floats; blanks, text, and infinities become 0."""
    if series.dtype == object:
        series = series.astype(str).str.replace(r"[\$,\s]", "", regex=True)
    values = pd.to_numeric(series, errors="coerce")
    return values.replace([np.inf, -np.inf], np.nan).fillna(0).astype(float)


def _to_number(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _clean_label(value: Any) -> str:
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return ""
    return str(value).strip()


# ---------------------------------------------------------------------------
# Import batches
# ---------------------------------------------------------------------------

def normalize_frame(df: pd.DataFrame) -> ImportResult:
    """Normalize a sheet of raw rows into records.

    Raises ImportBatchError if a required column is missing. Rows with an
    unreadable date, a negative quantity/amount, or a quantity too large to
    store are dropped and counted.
    """
    df = normalize_columns(df)
    missing = missing_columns(df.columns)
    if missing:
        raise ImportBatchError(f"Missing required columns: {describe_columns(missing)}", missing)

    result = ImportResult(total_rows=len(df))
    if df.empty:
        return result

    days = df["date"].map(parse_sale_date)
    quantity = _coerce_numeric(df["quantity"])
    amount = _coerce_numeric(df["amount"])

    valid_date = days.notna()
    negative = (quantity < 0) | (amount < 0)
    too_large = quantity >= _QUANTITY_LIMIT
    keep = valid_date & ~negative & ~too_large

    result.dropped_invalid_date = int((~valid_date).sum())
    result.dropped_negative = int((valid_date & negative).sum())
    result.dropped_out_of_range = int((valid_date & ~negative & too_large).sum())

    rows = zip(
        days[keep],
        df.loc[keep, "category"],
        df.loc[keep, "product_name"],
        quantity[keep].astype("int64"),
        amount[keep],
    )
    result.records = [
        SalesRecord.create(day, _clean_label(cat), _clean_label(prod), int(qty), float(amt))
        for day, cat, prod, qty, amt in rows
    ]

    if result.dropped:
        logger.info(
            "Import: %d of %d rows dropped (%d bad dates, %d negative, %d out of range)",
            result.dropped, result.total_rows,
            result.dropped_invalid_date, result.dropped_negative, result.dropped_out_of_range,
        )
    return result


def normalize_rows(rows: list[Mapping[str, Any]]) -> ImportResult:
    """Normalize row mappings. Any row lacking a required column rejects the batch."""
    missing: set[str] = set()
    for row in rows:
        missing.update(missing_columns(row.keys()))
    if missing:
        ordered = [f for f in REQUIRED_COLUMNS if f in missing]
        raise ImportBatchError(f"Missing required columns: {describe_columns(ordered)}", ordered)
    if not rows:
        return ImportResult()
    return normalize_frame(pd.DataFrame.from_records([_canonical_row(row) for row in rows]))


def _canonical_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Key a row by record field so rows using different aliases line up."""
    fields: dict[str, Any] = {}
    for key, value in row.items():
        name = canonical_column(key)
        if name:
            fields.setdefault(name, value)
    return fields


# ---------------------------------------------------------------------------
# Stored payloads
# ---------------------------------------------------------------------------

def stored_row_id(fields: Mapping[str, Any], position: int) -> str:
    """Stable id for a stored row that has none: same content and slot, same id."""
    parts = [str(position)] + [str(fields.get(f, "")) for f in REQUIRED_COLUMNS]
    return str(uuid.uuid5(_STORED_ROW_NAMESPACE, "\x1f".join(parts)))


def record_from_payload(payload: Mapping[str, Any], position: int = 0) -> SalesRecord | None:
    """Rebuild a stored record; None if it is unreadable.

    The timestamp is re-derived from the date so it always agrees with it.
    Rows stored without an id get one derived from their content and
    ``position``, so it survives reloads.
    """
    if not isinstance(payload, Mapping):
        return None
    fields = _canonical_row(payload)
    day = parse_sale_date(fields.get("date"))
    quantity = _to_number(fields.get("quantity") or 0)
    amount = _to_number(fields.get("amount") or 0)
    if day is None or quantity is None or amount is None:
        return None

    record_id = payload.get("id")
    try:
        return SalesRecord.create(
            day,
            _clean_label(fields.get("category")),
            _clean_label(fields.get("product_name")),
            int(quantity),
            amount,
            record_id=str(record_id) if record_id not in (None, "") else stored_row_id(fields, position),
        )
    except ValueError:
        return None


def records_from_payloads(payloads: Any, source: str) -> list[SalesRecord]:
    """Rebuild a stored array, skipping (and logging) unreadable entries."""
    if not isinstance(payloads, list):
        logger.warning("%s: expected a list of records, got %s", source, type(payloads).__name__)
        return []
    records = []
    for position, item in enumerate(payloads):
        record = record_from_payload(item, position)
        if record is None:
            logger.warning("%s: skipping unreadable record %r", source, item)
            continue
        records.append(record)
    return records


# ---------------------------------------------------------------------------
# Form entries
# ---------------------------------------------------------------------------

def build_entry(fields: Mapping[str, Any]) -> SalesRecord:
    """Validate a form submission and build the record.

    Raises EntryValidationError listing every failed check.
    """
    problems = []
    day = parse_sale_date(fields.get("date"))
    category = _clean_label(fields.get("category"))
    product = _clean_label(fields.get("product_name") or fields.get("product"))
    quantity = _to_number(fields.get("quantity"))
    amount = _to_number(fields.get("amount"))

    if day is None:
        problems.append("date is missing or not a valid calendar date")
    if not category:
        problems.append("category is required")
    if not product:
        problems.append("product name is required")
    if quantity is None or quantity < 1 or quantity != int(quantity):
        problems.append("quantity must be a whole number of at least 1")
    if amount is None or amount <= 0:
        problems.append("amount must be greater than 0")
    if problems:
        raise EntryValidationError(problems)

    return SalesRecord.create(day, category, product, int(quantity), amount)
