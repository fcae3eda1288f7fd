"""Read-only listing of ingestion attempts, newest first."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rampart.api.v1.auth import get_current_user
from rampart.core.database import get_db
from rampart.models.ingestion_log import IngestionLog
from rampart.schemas.auth import CurrentUser
from rampart.schemas.ingestion_log import IngestionLogOut, IngestionLogPage

router = APIRouter()

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


@router.get("", response_model=IngestionLogPage, response_model_by_alias=True)
def list_ingestion_logs(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
    cursor: Annotated[int | None, Query(ge=1, description="Return logs with id below this value")] = None,
) -> IngestionLogPage:
    """
    Page through ingestion logs ordered by id descending (ids grow with
    imported_date). Pass nextCursor back as cursor to get the following page.
    """
    query = db.query(IngestionLog)
    if cursor is not None:
        query = query.filter(IngestionLog.id < cursor)
    rows = query.order_by(IngestionLog.id.desc()).limit(limit + 1).all()
    has_more = len(rows) > limit
    rows = rows[:limit]
    return IngestionLogPage(
        items=[IngestionLogOut.model_validate(r) for r in rows],
        next_cursor=rows[-1].id if has_more else None,
    )
