"""SQLAlchemy ORM models."""

from rampart.models.base import Base
from rampart.models.cloud_finding import CloudFinding
from rampart.models.detection import FalconDetection, SecureworksAlert
from rampart.models.ingestion_log import IngestionLog
from rampart.models.rss_feed import RssFeed
from rampart.models.scorecard import ScorecardIssueDetail, ScorecardRating
from rampart.models.threat_advisory import ThreatAdvisory
from rampart.models.ticket import PhishingTicket, Ticket
from rampart.models.tool_metrics import ToolMetricsEmail, ToolMetricsPerimeter, ToolMetricsXdr
from rampart.models.user import User
from rampart.models.vulnerability import Vulnerability

__all__ = [
    "Base",
    "CloudFinding",
    "FalconDetection",
    "IngestionLog",
    "PhishingTicket",
    "RssFeed",
    "ScorecardIssueDetail",
    "ScorecardRating",
    "SecureworksAlert",
    "ThreatAdvisory",
    "Ticket",
    "ToolMetricsEmail",
    "ToolMetricsPerimeter",
    "ToolMetricsXdr",
    "User",
    "Vulnerability",
]
