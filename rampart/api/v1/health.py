"""Health check: database connectivity and the most recent ingestion attempt."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rampart.core.config import settings
from rampart.core.database import check_db_connected, get_db
from rampart.models.ingestion_log import IngestionLog
from rampart.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health, database connectivity and the last ingestion.
    Used by load balancers and monitoring; a long-PENDING last ingestion
    usually means an import died mid-file.
    """
    response = HealthResponse(
        environment=settings.APP_ENV,
        database="disconnected",
        duplicate_key_algorithm=settings.DUPLICATE_KEY_ALGORITHM,
    )
    if not check_db_connected(db):
        return response

    response.database = "connected"
    last = db.query(IngestionLog).order_by(IngestionLog.id.desc()).first()
    if last is not None:
        response.last_ingestion_status = last.status
        response.last_ingestion_at = last.imported_date
    return response
