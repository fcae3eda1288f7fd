"""Upload endpoint: accept one security export (multipart), route it by filename, ingest it."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rampart.api.v1.auth import get_current_user
from rampart.core.config import settings
from rampart.core.database import get_db
from rampart.schemas.auth import CurrentUser
from rampart.schemas.upload import UploadErrorResponse, UploadResponse
from rampart.services.errors import AuthorizationError, PersistenceError, UnrecognizedFormat
from rampart.services.format_router import route_filename
from rampart.services.ingestion import (
    authorize_upload,
    classify_failure,
    ingest_file,
    record_rejected_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_upload_file(obj: object) -> bool:
    """True if obj is an uploaded file (UploadFile or file-like with filename and read)."""
    if isinstance(obj, UploadFile):
        return True
    return (
        hasattr(obj, "read")
        and callable(getattr(obj, "read", None))
        and hasattr(obj, "filename")
    )


def _error_response(status_code: int, error: str, details: list[str]) -> JSONResponse:
    body = UploadErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _failure_response(exc: Exception) -> JSONResponse:
    failure = classify_failure(exc)
    return _error_response(failure.status_code, failure.error, failure.details)


async def _get_upload_file(request: Request) -> UploadFile:
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type != "multipart/form-data":
        raise HTTPException(
            status_code=415,
            detail="Content-Type must be multipart/form-data.",
        )
    form = await request.form()
    file = form.get("file")
    if file is None or not _is_upload_file(file):
        # Some clients send the file under another name; use first file-like part.
        file = next(
            (v for v in form.values() if _is_upload_file(v)),
            None,
        )
    if file is None or not _is_upload_file(file):
        raise HTTPException(
            status_code=422,
            detail="Multipart request must include a 'file' field.",
        )
    return file


@router.post(
    "",
    response_model=UploadResponse,
    status_code=201,
    responses={
        400: {"model": UploadErrorResponse},
        403: {"model": UploadErrorResponse},
        413: {"model": UploadErrorResponse},
        422: {"model": UploadErrorResponse},
        500: {"model": UploadErrorResponse},
    },
)
async def upload_file(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UploadResponse | JSONResponse:
    """
    Import one export file sent as `multipart/form-data` in a field named `file`.

    The filename decides the format (e.g. `Secureworks_Alerts_20250827.csv`)
    and carries the report date. Rows are reconciled against what is already
    stored, so uploading the same file twice changes nothing but last-seen
    timestamps and sighting counts.
    """
    file = await _get_upload_file(request)
    filename = (getattr(file, "filename", None) or "").strip()

    try:
        routed = route_filename(filename)
    except UnrecognizedFormat as e:
        logger.warning("Rejected upload %r: %s", filename, e.message)
        try:
            record_rejected_upload(db, filename, None, e.message)
        except PersistenceError:
            logger.exception("Could not log rejected upload %r", filename)
        return _failure_response(e)

    try:
        authorize_upload(current_user.role, routed)
    except AuthorizationError as e:
        logger.warning("User %s (%s) may not upload %s", current_user.username, current_user.role, routed.profile.name)
        return _failure_response(e)

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_FILE_BYTES:
        return _error_response(
            413,
            "File too large",
            [f"File size must not exceed {settings.MAX_UPLOAD_FILE_BYTES // (1024 * 1024)} MB."],
        )

    try:
        result = ingest_file(db, filename, content, routed=routed)
    except Exception as e:
        return _failure_response(e)

    outcome = result.outcome
    return UploadResponse(
        type=routed.source,
        profile=routed.profile.name,
        filename=filename,
        rows_processed=outcome.rows_processed,
        ingestion_id=result.ingestion_id,
        status=result.status,
        created=outcome.created,
        updated=outcome.updated,
        unchanged=outcome.unchanged,
        skipped=outcome.skipped,
        padded_rows=outcome.padded_rows,
        error_count=outcome.errors.count,
        errors=list(outcome.errors.messages),
        error_csv=outcome.errors.to_csv(),
    )
