"""Pydantic request/response schemas."""

from rampart.schemas.auth import (
    CurrentUser,
    LoginRequest,
    Role,
    TokenResponse,
    UploadPermissions,
    UsersListResponse,
)
from rampart.schemas.health import HealthResponse
from rampart.schemas.ingestion_log import FormatsResponse, IngestionLogOut, IngestionLogPage
from rampart.schemas.records import (
    CloudFindingRecord,
    FalconDetectionRecord,
    IssueStatus,
    PhishingTicketRecord,
    ScorecardIssueRecord,
    ScorecardRatingRecord,
    SecureworksAlertRecord,
    Severity,
    SourceRecord,
    ThreatAdvisoryRecord,
    TicketRecord,
    VulnerabilityRecord,
)
from rampart.schemas.upload import UploadErrorResponse, UploadResponse

__all__ = [
    "CloudFindingRecord",
    "CurrentUser",
    "FalconDetectionRecord",
    "FormatsResponse",
    "HealthResponse",
    "IngestionLogOut",
    "IngestionLogPage",
    "IssueStatus",
    "LoginRequest",
    "PhishingTicketRecord",
    "Role",
    "ScorecardIssueRecord",
    "ScorecardRatingRecord",
    "SecureworksAlertRecord",
    "Severity",
    "SourceRecord",
    "ThreatAdvisoryRecord",
    "TicketRecord",
    "TokenResponse",
    "UploadErrorResponse",
    "UploadPermissions",
    "UploadResponse",
    "UsersListResponse",
    "VulnerabilityRecord",
]
