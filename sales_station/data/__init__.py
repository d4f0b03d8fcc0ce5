"""Sales records: schemas, normalization, persistence backends, in-memory store."""
from .schemas import SalesRecord, ViewFilter, ViewMode, DateRange, ImportResult
from .normalize import normalize_frame, normalize_rows, build_entry, parse_sale_date
