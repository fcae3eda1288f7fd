"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from rampart.api.v1 import router as v1_router
from rampart.core.config import settings
from rampart.services.errors import PersistenceError
from rampart.services.ingestion import classify_failure

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Rampart API",
    description="Ingests security tool exports (scanners, EDR, cloud posture, tickets, scorecards) "
    "into one normalized store with an audit log per upload.",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.exception_handler(PersistenceError)
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Database failures outside the upload flow still answer with an {error, details} body."""
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    failure = classify_failure(exc)
    return JSONResponse(
        status_code=failure.status_code,
        content={"error": "Database error", "details": failure.details},
    )


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Rampart API", "docs": "/docs", "formats": f"{settings.API_V1_PREFIX}/formats"}
