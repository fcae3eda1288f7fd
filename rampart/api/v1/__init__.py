"""API v1 routes."""

from fastapi import APIRouter

from rampart.api.v1 import auth, formats, health, ingestion_logs, upload

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(upload.router, prefix="/upload", tags=["upload"])
router.include_router(ingestion_logs.router, prefix="/ingestion-logs", tags=["ingestion"])
router.include_router(formats.router, prefix="/formats", tags=["ingestion"])
