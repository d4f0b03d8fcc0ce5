"""
Persistence backends — one capability interface, two implementations.

RemoteSheetBackend talks to the spreadsheet web app over HTTP.
LocalBlobBackend keeps the whole record array in a single local slot.
The process picks one at startup via make_backend() and keeps it.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import requests

from sales_station.config import (
    LOCAL_STORE_FOLDER,
    LOCAL_STORE_KEY,
    REMOTE_TIMEOUT,
    SHEET_ENDPOINT_URL,
)
from sales_station.data.normalize import records_from_payloads
from sales_station.data.schemas import SalesRecord
from sales_station.exceptions import ConfigError, TransportError

logger = logging.getLogger(__name__)


class SalesBackend(ABC):
    """Load-all / append capability shared by both storage modes."""

    mode: str = ""
    # True when the store must re-read after a write to see ground truth
    refetch_after_write: bool = False

    @abstractmethod
    def load_all(self) -> list[SalesRecord]:
        """Return every stored record. Raises TransportError on failure."""

    @abstractmethod
    def append_batch(self, records: list[SalesRecord]) -> None:
        """Persist new records. Raises TransportError on failure."""

    def append(self, record: SalesRecord) -> None:
        self.append_batch([record])


# ---------------------------------------------------------------------------
# Remote: spreadsheet web app
# ---------------------------------------------------------------------------

class RemoteSheetBackend(SalesBackend):
    """GET returns ``{status, data}``; POST takes one JSON record, fire and forget."""

    mode = "remote"
    refetch_after_write = True

    def __init__(self, url: str, timeout: float = REMOTE_TIMEOUT, session: Any = None) -> None:
        if not url:
            raise ConfigError("Remote backend needs an endpoint URL")
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def load_all(self) -> list[SalesRecord]:
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise TransportError(f"Could not reach sales sheet: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"Sales sheet returned invalid JSON: {exc}") from exc

        if not isinstance(body, dict) or body.get("status") != "success":
            status = body.get("status") if isinstance(body, dict) else None
            logger.info("Sales sheet answered status=%r, treating as no data", status)
            return []
        return records_from_payloads(body.get("data"), source="sales sheet")

    def append_batch(self, records: list[SalesRecord]) -> None:
        # The web app's reply is not meaningful; only transport failures count.
        for record in records:
            try:
                self.session.post(
                    self.url,
                    data=json.dumps(record.to_payload(), ensure_ascii=False).encode("utf-8"),
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise TransportError(f"Could not send record {record.id}: {exc}") from exc
        logger.info("Sent %d record(s) to sales sheet", len(records))


# ---------------------------------------------------------------------------
# Local: single-slot blob store
# ---------------------------------------------------------------------------

class LocalBlobStore:
    """String-keyed slots, one file per key, written atomically."""

    def __init__(self, folder: Path = LOCAL_STORE_FOLDER) -> None:
        self.folder = Path(folder)

    def _path(self, key: str) -> Path:
        return self.folder / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.folder.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.folder, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


class LocalBlobBackend(SalesBackend):
    """Whole record array serialized into one slot; appends rewrite it."""

    mode = "local"
    refetch_after_write = False

    def __init__(self, blob_store: LocalBlobStore | None = None, key: str = LOCAL_STORE_KEY) -> None:
        self.blob_store = blob_store or LocalBlobStore()
        self.key = key
        # Serializes read-modify-write appends within the process
        self._write_lock = threading.Lock()

    def load_all(self) -> list[SalesRecord]:
        try:
            return self._read_slot()
        except OSError as exc:
            raise TransportError(f"Could not read local store: {exc}") from exc

    def _read_slot(self) -> list[SalesRecord]:
        # UnicodeDecodeError is a ValueError, so undecodable bytes count as corrupt
        try:
            raw = self.blob_store.get_item(self.key)
            if raw is None:
                return []
            payloads = json.loads(raw)
        except ValueError:
            logger.warning("Local store slot %r is corrupt, starting from empty", self.key)
            return []
        return records_from_payloads(payloads, source="local store")

    def append_batch(self, records: list[SalesRecord]) -> None:
        with self._write_lock:
            try:
                current = self._read_slot()
                payload = [r.to_payload() for r in current + list(records)]
                self.blob_store.set_item(self.key, json.dumps(payload, ensure_ascii=False))
            except OSError as exc:
                raise TransportError(f"Could not write local store: {exc}") from exc
        logger.info("Stored %d record(s) locally (%d total)", len(records), len(payload))


def make_backend(url: str | None = SHEET_ENDPOINT_URL) -> SalesBackend:
    """Remote mode when a sheet URL is configured, local mode otherwise."""
    if url:
        logger.info("Using remote sales sheet at %s", url)
        return RemoteSheetBackend(url)
    logger.info("No sheet URL configured, using local store in %s", LOCAL_STORE_FOLDER)
    return LocalBlobBackend()
