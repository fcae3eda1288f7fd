"""Shared row-mapping machinery: context, outcome counters and the per-row processing loop."""

import csv
import io
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from pydantic import ValidationError
from sqlalchemy.orm import Session

from rampart.models.base import Base
from rampart.schemas.records import Severity, SourceRecord
from rampart.services.csv_tokenizer import RecordSeparator, decode_text, tokenize
from rampart.services.duplicate_keys import KeyAlgorithm, duplicate_key
from rampart.services.errors import PersistenceError, RowMappingError, RowSkipped
from rampart.services.headers import BoundRow, FieldSpec, HeaderResolver
from rampart.services.parsing import normalize_severity, severity_fallback
from rampart.services.reconcile import ReconcileOutcome, ReconcileResult, reconcile
from rampart.services.store import RecordStore

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9-]")
MAX_ERROR_MESSAGE_LEN = 300


@dataclass
class MapContext:
    """Per-file settings handed to every mapper call."""

    profile: str
    report_date: datetime
    key_algorithm: KeyAlgorithm = "sha256"
    default_tenant: str = "143085"
    error_sample_size: int = 10
    progress_every: int = 100
    row_number: int = 0
    filename: str = ""


@dataclass
class MappedRow:
    key: Any
    record: SourceRecord


class ErrorSample:
    """Total error count plus the first `limit` messages."""

    def __init__(self, limit: int = 10) -> None:
        self.limit = limit
        self.count = 0
        self.messages: list[str] = []

    def add(self, message: str) -> None:
        self.count += 1
        if len(self.messages) < self.limit:
            if len(message) > MAX_ERROR_MESSAGE_LEN:
                message = message[: MAX_ERROR_MESSAGE_LEN - 3] + "..."
            self.messages.append(message)

    def summary(self) -> str | None:
        """Text for the ingestion log; None when there were no errors."""
        if not self.count:
            return None
        lines = [f"{self.count} row error(s)"]
        lines.extend(self.messages)
        if self.count > len(self.messages):
            lines.append(f"... and {self.count - len(self.messages)} more")
        return "\n".join(lines)

    def to_csv(self) -> str | None:
        """
        Sampled messages as a downloadable 'Row,Error' CSV; None when there were no errors.

        'Row 5: missing id' becomes the cells 'Row 5' and 'missing id' (split at the first ':').
        """
        if not self.messages:
            return None
        buffer = io.StringIO()
        buffer.write("Row,Error\n")
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for message in self.messages:
            row, _, error = message.partition(":")
            writer.writerow([row, error.strip()])
        return buffer.getvalue().rstrip("\n")


@dataclass
class ProcessOutcome:
    """Counters for one file."""

    total_rows: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    padded_rows: int = 0
    errors: ErrorSample = field(default_factory=ErrorSample)

    @property
    def rows_processed(self) -> int:
        return self.created + self.updated + self.unchanged

    def add_result(self, result: ReconcileResult) -> None:
        if result.outcome is ReconcileOutcome.CREATED:
            self.created += 1
        elif result.outcome is ReconcileOutcome.UPDATED:
            self.updated += 1
        else:
            self.unchanged += 1


def validation_message(exc: ValidationError) -> str:
    """First pydantic error as 'field: message' (no input echo)."""
    errors = exc.errors()
    if not errors:
        return "invalid record"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid value')}" if loc else first.get("msg", "invalid value")


def sanitize_id(value: str) -> str:
    """External ids become keys: anything outside [A-Za-z0-9-] turns into '-'."""
    return _UNSAFE_ID_CHARS.sub("-", value.strip())


class FormatProcessor:
    """Processes one uploaded file of a given profile into stored records."""

    profile: ClassVar[str] = ""

    def process(self, session: Session, content: bytes, context: MapContext) -> ProcessOutcome:
        raise NotImplementedError


class RowMapper(FormatProcessor):
    """
    Tabular CSV formats: one record per data row.

    Subclasses declare FIELDS (header synonyms + positional fallbacks), the
    model and key column they write, MEANINGFUL_FIELDS for change detection and
    implement map_row().
    """

    model: ClassVar[type[Base]]
    key_column: ClassVar[str] = "id"
    key_prefix: ClassVar[str] = ""
    FIELDS: ClassVar[Sequence[FieldSpec]] = ()
    MEANINGFUL_FIELDS: ClassVar[Sequence[str]] = ()
    # Stored value wins over a later import while both are set (e.g. first-closed timestamps).
    STICKY_FIELDS: ClassVar[Sequence[str]] = ()
    tracks_occurrences: ClassVar[bool] = False
    separator: ClassVar[RecordSeparator] = "quoted"

    def severity(self, value: str | None) -> Severity:
        return normalize_severity(value, severity_fallback(self.profile))

    def make_key(self, identity: Sequence[object], bucket: datetime | None, context: MapContext) -> str:
        return duplicate_key(self.key_prefix, identity, bucket, context.key_algorithm)

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        raise NotImplementedError

    def process(self, session: Session, content: bytes, context: MapContext) -> ProcessOutcome:
        document = tokenize(decode_text(content), self.separator)
        resolver = HeaderResolver(document.header, self.FIELDS)
        store = RecordStore(session, self.model, self.key_column)
        outcome = ProcessOutcome(
            total_rows=len(document),
            padded_rows=document.padded_rows,
            errors=ErrorSample(context.error_sample_size),
        )
        persistence_failures = 0
        last_persistence_error: PersistenceError | None = None

        for row_number, values in document.numbered_rows():
            row = resolver.bind(values)
            if row.is_blank():
                outcome.skipped += 1
                continue
            context.row_number = row_number
            try:
                mapped = self.map_row(row, context)
            except RowSkipped as e:
                outcome.skipped += 1
                logger.debug("Skipped %s row %s: %s", self.profile, row_number, e.reason)
                continue
            except ValidationError as e:
                outcome.errors.add(f"Row {row_number}: {validation_message(e)}")
                continue
            except (RowMappingError, ValueError) as e:
                outcome.errors.add(f"Row {row_number}: {e}")
                continue
            except Exception as e:
                # A bad cell costs its row, never the file.
                logger.warning("Row %s of %s could not be mapped", row_number, self.profile, exc_info=True)
                outcome.errors.add(f"Row {row_number}: {type(e).__name__}: {e}")
                continue

            try:
                result = reconcile(
                    store,
                    mapped.key,
                    mapped.record.to_values(),
                    self.MEANINGFUL_FIELDS,
                    tracks_occurrences=self.tracks_occurrences,
                    sticky_fields=self.STICKY_FIELDS,
                )
            except PersistenceError as e:
                persistence_failures += 1
                last_persistence_error = e
                logger.warning("Row %s of %s not stored: %s (%s)", row_number, self.profile, e.message, e.cause)
                outcome.errors.add(f"Row {row_number}: {e.message}")
                continue

            outcome.add_result(result)
            if outcome.rows_processed % context.progress_every == 0:
                logger.info("Processed %s %s rows...", outcome.rows_processed, self.profile)

        # Every row hit the database and every write failed: the database is the problem, not the file.
        if (
            last_persistence_error is not None
            and outcome.rows_processed == 0
            and persistence_failures == outcome.errors.count
        ):
            raise last_persistence_error
        return outcome
