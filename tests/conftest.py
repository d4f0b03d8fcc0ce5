"""Shared fixtures: record factory, in-memory and on-disk backends."""

import datetime as dt
from pathlib import Path

import pytest

from sales_station.data.backends import LocalBlobBackend, LocalBlobStore, SalesBackend
from sales_station.data.schemas import SalesRecord
from sales_station.exceptions import TransportError


class MemoryBackend(SalesBackend):
    """Backend double that keeps records in a list and can be told to fail."""

    mode = "memory"

    def __init__(
        self,
        records=None,
        refetch_after_write: bool = False,
        fail_load: bool = False,
        fail_write: bool = False,
    ) -> None:
        self.stored = list(records or [])
        self.refetch_after_write = refetch_after_write
        self.fail_load = fail_load
        self.fail_write = fail_write
        self.load_calls = 0

    def load_all(self):
        self.load_calls += 1
        if self.fail_load:
            raise TransportError("sheet unreachable")
        return list(self.stored)

    def append_batch(self, records):
        if self.fail_write:
            raise TransportError("write rejected")
        self.stored.extend(records)


def _make_record(
    date: str,
    category: str = "洗髮露",
    product: str = "強健頭皮洗髮露500ml",
    quantity: int = 1,
    amount: float = 100.0,
) -> SalesRecord:
    return SalesRecord.create(dt.date.fromisoformat(date), category, product, quantity, amount)


@pytest.fixture
def make_record():
    """Factory for records with sensible defaults."""
    return _make_record


@pytest.fixture
def sample_records() -> list[SalesRecord]:
    """A small record set spanning two months and three categories."""
    return [
        _make_record("2024-01-01", "洗髮露", "強健頭皮洗髮露500ml", 2, 900.0),
        _make_record("2024-01-03", "養髮液", "女士養髮液70ml", 1, 1200.0),
        _make_record("2024-01-08", "洗髮露", "豐盈彈韌洗髮露500ml", 3, 1350.0),
        _make_record("2024-01-08", "居家保養", "結構修護精華乳70ml", 1, 650.0),
        _make_record("2024-02-02", "養髮液", "女士養髮液70ml", 2, 2400.0),
        _make_record("2024-02-15", "洗髮露", "強健頭皮洗髮露500ml", 1, 450.0),
    ]


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def local_backend(tmp_path: Path) -> LocalBlobBackend:
    """Local backend writing into a throwaway folder."""
    return LocalBlobBackend(LocalBlobStore(tmp_path / "local_storage"))
