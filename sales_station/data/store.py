"""
DataStore — in-memory record snapshot backed by a persistence backend.

Loaded once at startup, read on every request, replaced (never mutated)
on refresh and append so readers always hold a consistent tuple.
"""
from __future__ import annotations

import logging
import threading

from sales_station.data.backends import SalesBackend
from sales_station.data.schemas import DateRange, SalesRecord
from sales_station.analytics.dashboard import date_bounds
from sales_station.exceptions import TransportError

logger = logging.getLogger(__name__)


class DataStore:
    """Current sales records plus the last reported load/save error."""

    def __init__(self, backend: SalesBackend) -> None:
        self.backend = backend
        self._records: tuple[SalesRecord, ...] = ()
        self._lock = threading.Lock()
        self.last_error: str | None = None
        self.default_range: DateRange | None = None
        self._loaded = False

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    @property
    def records(self) -> tuple[SalesRecord, ...]:
        return self._records

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def _replace(self, records: tuple[SalesRecord, ...]) -> None:
        with self._lock:
            self._swap(records)

    def _extend(self, records: list[SalesRecord]) -> None:
        with self._lock:
            self._swap(self._records + tuple(records))

    def _swap(self, records: tuple[SalesRecord, ...]) -> None:
        was_empty = not self._records
        self._records = records
        if was_empty and records:
            self._init_default_range(records)
        elif not records:
            self.default_range = None

    def _init_default_range(self, records: tuple[SalesRecord, ...]) -> None:
        """Runs once per empty → non-empty transition."""
        self.default_range = date_bounds(records)
        logger.info("Default dashboard range: %s to %s", self.default_range.start, self.default_range.end)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> "DataStore":
        self.refresh()
        self._loaded = True
        return self

    def refresh(self) -> tuple[SalesRecord, ...]:
        """Reload from the backend; on failure keep the last-known snapshot."""
        try:
            records = self.backend.load_all()
        except TransportError as exc:
            logger.error("Failed to load sales data: %s", exc)
            self.last_error = str(exc)
            return self._records

        self.last_error = None
        self._replace(tuple(records))
        logger.info("Loaded %d sales records (%s mode)", len(records), self.backend.mode)
        return self._records

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def append(self, record: SalesRecord) -> bool:
        return self.append_batch([record])

    def append_batch(self, records: list[SalesRecord]) -> bool:
        """Persist new records. Returns False if the backend write failed.

        Local mode merges into the snapshot before writing and does not roll
        back on failure. Remote mode re-reads the sheet after writing.
        """
        if not records:
            return True
        if not self.backend.refetch_after_write:
            self._extend(records)

        try:
            self.backend.append_batch(list(records))
        except TransportError as exc:
            logger.error("Failed to save %d record(s): %s", len(records), exc)
            self.last_error = str(exc)
            return False

        if self.backend.refetch_after_write:
            self.refresh()
        return True

    # ------------------------------------------------------------------
    # Metadata queries
    # ------------------------------------------------------------------

    def products(self) -> list[str]:
        return sorted({r.product_name for r in self._records})

    def categories(self) -> list[str]:
        return sorted({r.category for r in self._records})

    def row_count(self) -> int:
        return len(self._records)
