"""Domain-specific exceptions for Sales Station.

All exceptions inherit from SalesStationError so callers can catch
any of them in one place.
"""


class SalesStationError(Exception):
    """Base exception for all Sales Station errors."""

    pass


class ConfigError(SalesStationError):
    """Raised when the backend configuration is unusable."""

    pass


class EntryValidationError(SalesStationError):
    """Raised when a form submission is incomplete or out of range.

    ``problems`` lists every failed check so the form can show them all.
    """

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


class ImportBatchError(SalesStationError):
    """Raised when a whole import batch must be rejected.

    This exception is raised when:
    - Required columns are missing from the header
    - No row survives normalization
    """

    def __init__(self, message: str, missing_columns: list[str] | None = None):
        self.missing_columns = missing_columns or []
        super().__init__(message)


class TransportError(SalesStationError):
    """Raised when the remote endpoint or the local store cannot be reached.

    This exception is raised when:
    - The network request fails or times out
    - The response cannot be parsed
    - The storage medium rejects a write
    """

    pass
