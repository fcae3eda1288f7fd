"""
Ingest one uploaded file end to end and keep its audit log.

Every attempt gets an IngestionLog row created PENDING before any row is read
and finalized exactly once: SUCCESS, PARTIAL (file parsed, every row
rejected) or FAILED (file-level error, which is then re-raised).
"""

import hashlib
import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rampart.core.config import Settings, settings
from rampart.core.security import can_upload
from rampart.models.ingestion_log import (
    STATUS_FAILED,
    STATUS_PARTIAL,
    STATUS_PENDING,
    STATUS_SUCCESS,
    IngestionLog,
)
from rampart.services.errors import (
    AuthorizationError,
    IngestionError,
    MalformedInput,
    PersistenceError,
    UnrecognizedFormat,
)
from rampart.services.format_router import RoutedFile, route_filename
from rampart.services.mappers import MapContext, ProcessOutcome, get_processor

logger = logging.getLogger(__name__)

MAX_ERROR_LOG_LEN = 4000


@dataclass
class IngestionResult:
    """What one ingest_file call did."""

    ingestion_id: int
    routed: RoutedFile
    status: str
    outcome: ProcessOutcome

    @property
    def rows_processed(self) -> int:
        return self.outcome.rows_processed


@dataclass
class FailureResponse:
    """HTTP-facing classification of a file-level failure."""

    status_code: int
    error: str
    details: list[str] = field(default_factory=list)


def compute_checksum(content: bytes) -> str:
    """SHA-256 hex digest of the raw upload bytes."""
    return hashlib.sha256(content).hexdigest()


def _bounded(message: str | None) -> str | None:
    if message and len(message) > MAX_ERROR_LOG_LEN:
        return message[: MAX_ERROR_LOG_LEN - 3] + "..."
    return message


def authorize_upload(role: str, routed: RoutedFile) -> None:
    """Raise AuthorizationError unless the role may upload this format."""
    if can_upload(role, routed.profile.admin_only):
        return
    if routed.profile.admin_only:
        family = routed.profile.family or routed.profile.description
        raise AuthorizationError(f"Only admin users may import {family} files.")
    raise AuthorizationError("Your role may not upload files.")


def _finalize(
    db: Session,
    log: IngestionLog,
    status: str,
    rows_processed: int,
    error_log: str | None,
) -> None:
    """Write the final status. A failed row transaction may have left the session dirty."""
    db.rollback()
    log.status = status
    log.rows_processed = rows_processed
    log.error_log = _bounded(error_log)
    log.updated_at = datetime.now(UTC)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Database error finalizing ingestion log", cause=e) from e


def _fail(db: Session, log: IngestionLog, log_id: int, message: str) -> None:
    """Finalize as FAILED without masking the error that got us here."""
    try:
        _finalize(db, log, STATUS_FAILED, 0, message)
    except PersistenceError:
        logger.exception("Could not mark ingestion %s as FAILED", log_id)


def outcome_status(outcome: ProcessOutcome) -> str:
    if outcome.rows_processed == 0 and outcome.errors.count > 0:
        return STATUS_PARTIAL
    return STATUS_SUCCESS


def ingest_file(
    db: Session,
    filename: str,
    content: bytes,
    app_settings: Settings | None = None,
    routed: RoutedFile | None = None,
) -> IngestionResult:
    """
    Route, log and process one file.

    Row-level problems are counted and sampled into the result and the log's
    error_log; file-level problems (IngestionError and anything unexpected)
    mark the log FAILED and propagate.
    """
    app_settings = app_settings or settings
    routed = routed or route_filename(filename)
    now = datetime.now(UTC)

    log = IngestionLog(
        filename=filename,
        original_name=filename,
        file_type=routed.file_type,
        source=routed.source,
        profile=routed.profile.name,
        checksum=compute_checksum(content),
        rows_processed=0,
        report_date=routed.report_date,
        imported_date=now,
        status=STATUS_PENDING,
    )
    try:
        db.add(log)
        db.commit()
        db.refresh(log)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Database error creating ingestion log", cause=e) from e
    log_id = log.id
    logger.info(
        "Ingestion %s started: %s (profile=%s, report_date=%s, %s bytes)",
        log_id,
        filename,
        routed.profile.name,
        routed.report_date.date(),
        len(content),
    )

    context = MapContext(
        profile=routed.profile.name,
        report_date=routed.report_date,
        filename=filename,
        key_algorithm=app_settings.DUPLICATE_KEY_ALGORITHM,
        default_tenant=app_settings.DEFAULT_TENANT_ID,
        error_sample_size=app_settings.ROW_ERROR_SAMPLE_SIZE,
        progress_every=app_settings.INGEST_PROGRESS_EVERY,
    )
    processor = get_processor(routed.profile.name)
    try:
        outcome = processor.process(db, content, context)
    except IngestionError as e:
        logger.warning("Ingestion %s failed: %s", log_id, e.message)
        _fail(db, log, log_id, e.message)
        raise
    except SQLAlchemyError as e:
        logger.exception("Ingestion %s failed with a database error", log_id)
        _fail(db, log, log_id, "Database error during file processing")
        raise PersistenceError("Database error during file processing", cause=e) from e
    except Exception as e:
        logger.exception("Ingestion %s failed", log_id)
        _fail(db, log, log_id, str(e) or type(e).__name__)
        raise

    status = outcome_status(outcome)
    _finalize(db, log, status, outcome.rows_processed, outcome.errors.summary())
    logger.info(
        "Ingestion %s %s: %s processed (%s created, %s updated, %s unchanged), %s skipped, %s errors",
        log_id,
        status,
        outcome.rows_processed,
        outcome.created,
        outcome.updated,
        outcome.unchanged,
        outcome.skipped,
        outcome.errors.count,
    )
    return IngestionResult(ingestion_id=log_id, routed=routed, status=status, outcome=outcome)


def record_rejected_upload(db: Session, filename: str, content: bytes | None, reason: str) -> IngestionLog:
    """FAILED log entry for a file whose name matched no format profile."""
    extension = os.path.splitext(filename or "")[1].lstrip(".").lower() or "unknown"
    now = datetime.now(UTC)
    log = IngestionLog(
        filename=filename or "",
        original_name=filename or "",
        file_type=extension[:32],
        source="unknown",
        profile=None,
        checksum=compute_checksum(content) if content is not None else None,
        rows_processed=0,
        report_date=now,
        imported_date=now,
        status=STATUS_FAILED,
        error_log=_bounded(reason),
    )
    try:
        db.add(log)
        db.commit()
        db.refresh(log)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Database error recording rejected upload", cause=e) from e
    return log


def classify_failure(exc: Exception) -> FailureResponse:
    """Map a file-level failure to a status code and a friendly {error, details} body."""
    if isinstance(exc, MalformedInput) and exc.empty:
        return FailureResponse(
            422,
            "CSV file appears to be empty",
            [
                "Please ensure your CSV file contains data rows",
                "Check that the file is not corrupted",
            ],
        )
    if isinstance(exc, MalformedInput):
        return FailureResponse(
            422,
            "Unable to parse file content",
            [
                exc.message,
                "File may be corrupted or in an unsupported format",
                "Please verify the file opens correctly in Excel or a text editor",
            ],
        )
    if isinstance(exc, UnrecognizedFormat):
        return FailureResponse(
            400,
            "File name does not match required format",
            [
                "Files must include a date in YYYYMMDD format",
                "Examples: NETGEAR_Scorecard_Report_20241224.csv, Tenable_MONTHLY_20241224.csv",
                exc.message,
            ],
        )
    if isinstance(exc, AuthorizationError):
        return FailureResponse(403, exc.message, [])
    if isinstance(exc, PersistenceError | SQLAlchemyError):
        return FailureResponse(
            500,
            "Database error during file processing",
            [
                "This is a temporary system issue",
                "Please try uploading again in a few moments",
            ],
        )
    if isinstance(exc, IngestionError):
        return FailureResponse(500, "File processing error", [exc.message])
    return FailureResponse(
        500,
        "File processing error",
        [str(exc) or "An unexpected error occurred"],
    )
