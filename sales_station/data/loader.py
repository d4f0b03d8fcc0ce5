"""
Spreadsheet reading for bulk imports (first sheet, header row).
"""
from __future__ import annotations

import io
import logging
from pathlib import Path

import pandas as pd

from sales_station.config import IMPORT_EXTENSIONS
from sales_station.data.normalize import normalize_frame
from sales_station.data.schemas import ImportResult
from sales_station.exceptions import ImportBatchError

logger = logging.getLogger(__name__)

_EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
}


def read_sheet(content: bytes, filename: str) -> pd.DataFrame:
    """Parse an uploaded spreadsheet into raw rows.

    Cells keep their native types (serial numbers, datetimes, text) so the
    normalizer can decide how to read each date.
    """
    suffix = Path(filename).suffix.lower()
    if suffix not in IMPORT_EXTENSIONS:
        raise ImportBatchError(
            f"Unsupported file type '{suffix or filename}' "
            f"(accepted: {', '.join(sorted(IMPORT_EXTENSIONS))})"
        )

    try:
        if suffix == ".csv":
            return pd.read_csv(io.BytesIO(content), encoding="utf-8-sig")
        return pd.read_excel(io.BytesIO(content), sheet_name=0, engine=_EXCEL_ENGINES[suffix])
    except Exception as exc:
        logger.warning("Could not parse %s: %s", filename, exc)
        raise ImportBatchError(f"Could not parse {filename}: {exc}") from exc


def load_import_file(content: bytes, filename: str) -> ImportResult:
    """Read and normalize one spreadsheet upload."""
    df = read_sheet(content, filename)
    result = normalize_frame(df)
    logger.info(
        "Parsed %s: %d rows → %d records (%d dropped)",
        filename, result.total_rows, len(result.records), result.dropped,
    )
    return result
