"""Ingestion error taxonomy shared by the tokenizer, router, mappers, store and API."""


class IngestionError(Exception):
    """Base class for every error raised by the ingestion pipeline."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MalformedInput(IngestionError):
    """File has no data rows, cannot be read as CSV, or lacks a required header. Aborts the file."""

    def __init__(self, message: str, empty: bool = False) -> None:
        self.empty = empty
        super().__init__(message)


class UnrecognizedFormat(IngestionError):
    """Filename does not map to a known source profile. Aborts before any row is touched."""


class RowMappingError(IngestionError):
    """A single row could not be mapped. Counted and sampled; the file keeps going."""


class PersistenceError(IngestionError):
    """The storage layer rejected a read or write."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class AuthorizationError(IngestionError):
    """Caller lacks the privilege tier required for the detected format."""


class RowSkipped(Exception):
    """Raised by a mapper to skip a row with a reason; counted, never an error."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
