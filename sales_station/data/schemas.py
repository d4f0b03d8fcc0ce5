"""
Sales record and view filter schemas.
"""
from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from sales_station.config import ALL_PRODUCTS, MS_PER_DAY, REQUIRED_COLUMNS

_UNIX_EPOCH = dt.date(1970, 1, 1)


def epoch_millis(day: dt.date) -> int:
    """Epoch milliseconds of 00:00 UTC on a civil date."""
    return (day - _UNIX_EPOCH).days * MS_PER_DAY


def new_record_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class SalesRecord:
    """One sold line. Immutable once created."""
    id: str
    date: str                  # YYYY-MM-DD
    category: str
    product_name: str
    quantity: int
    amount: float
    timestamp: int             # epoch ms of ``date``

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"quantity must be >= 0 (got {self.quantity})")
        if self.amount < 0:
            raise ValueError(f"amount must be >= 0 (got {self.amount})")

    @classmethod
    def create(
        cls,
        day: dt.date,
        category: str,
        product_name: str,
        quantity: int,
        amount: float,
        record_id: str | None = None,
    ) -> "SalesRecord":
        """Build a record, synthesizing id and timestamp from ``day``."""
        return cls(
            id=record_id or new_record_id(),
            date=day.isoformat(),
            category=category,
            product_name=product_name,
            quantity=quantity,
            amount=amount,
            timestamp=epoch_millis(day),
        )

    @property
    def day(self) -> dt.date:
        return dt.date.fromisoformat(self.date)

    def to_payload(self) -> dict:
        """Serialize with the localized keys the sheet and local blob use."""
        return {
            "id": self.id,
            REQUIRED_COLUMNS["date"]: self.date,
            REQUIRED_COLUMNS["category"]: self.category,
            REQUIRED_COLUMNS["product_name"]: self.product_name,
            REQUIRED_COLUMNS["quantity"]: self.quantity,
            REQUIRED_COLUMNS["amount"]: self.amount,
            "timestamp": self.timestamp,
        }


class ViewMode(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class DateRange:
    start: dt.date
    end: dt.date

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass
class ViewFilter:
    """Dashboard view state: inclusive date range, bucket size, product focus."""
    start: Optional[dt.date] = None      # None = unbounded
    end: Optional[dt.date] = None        # None = unbounded
    view_mode: ViewMode = ViewMode.DAY
    product: str = ALL_PRODUCTS
    group_by_category: bool = False

    def resolve(self) -> tuple[Optional[int], Optional[int]]:
        """Return the half-open timestamp window [start, end + 1 day)."""
        start_ts = epoch_millis(self.start) if self.start else None
        end_ts = epoch_millis(self.end) + MS_PER_DAY if self.end else None
        return start_ts, end_ts

    @property
    def label(self) -> str:
        """Human-readable label for the range."""
        if self.start is None and self.end is None:
            return "All Time"
        s = self.start.isoformat() if self.start else "?"
        e = self.end.isoformat() if self.end else "?"
        return f"{s} to {e}"


@dataclass
class ImportResult:
    """Outcome of normalizing an import batch."""
    records: list[SalesRecord] = field(default_factory=list)
    total_rows: int = 0
    dropped_invalid_date: int = 0
    dropped_negative: int = 0
    dropped_out_of_range: int = 0

    @property
    def dropped(self) -> int:
        return self.dropped_invalid_date + self.dropped_negative + self.dropped_out_of_range

    @property
    def usable(self) -> bool:
        return len(self.records) > 0

    def summary(self) -> dict:
        return {
            "rows": self.total_rows,
            "imported": len(self.records),
            "dropped": self.dropped,
            "dropped_invalid_date": self.dropped_invalid_date,
            "dropped_negative": self.dropped_negative,
            "dropped_out_of_range": self.dropped_out_of_range,
        }
