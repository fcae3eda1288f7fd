"""Per-format processors, looked up by format profile name."""

from rampart.services.mappers.base import (
    ErrorSample,
    FormatProcessor,
    MapContext,
    MappedRow,
    ProcessOutcome,
    RowMapper,
)
from rampart.services.mappers.cloud import CloudFindingMapper
from rampart.services.mappers.falcon import FalconMapper
from rampart.services.mappers.phishing import PhishingMapper
from rampart.services.mappers.rss_feeds import RssFeedMapper
from rampart.services.mappers.scorecard import (
    ScorecardIssueMapper,
    ScorecardPdfProcessor,
    ScorecardSummaryProcessor,
)
from rampart.services.mappers.secureworks import SecureworksMapper
from rampart.services.mappers.threat_advisory import ThreatAdvisoryMapper
from rampart.services.mappers.tickets import TicketMapper
from rampart.services.mappers.tool_metrics import PerimeterMetricsProcessor, XdrMetricsProcessor
from rampart.services.mappers.vulnerability import VulnerabilityMapper

PROCESSORS: dict[str, FormatProcessor] = {
    p.profile: p
    for p in (
        VulnerabilityMapper(),
        FalconMapper(),
        SecureworksMapper(),
        CloudFindingMapper(),
        PhishingMapper(),
        ThreatAdvisoryMapper(),
        TicketMapper(),
        ScorecardSummaryProcessor(),
        ScorecardIssueMapper(),
        ScorecardPdfProcessor(),
        PerimeterMetricsProcessor(),
        XdrMetricsProcessor(),
        RssFeedMapper(),
    )
}


def get_processor(profile: str) -> FormatProcessor:
    """Processor for a format profile name; KeyError when none is registered."""
    return PROCESSORS[profile]


__all__ = [
    "PROCESSORS",
    "CloudFindingMapper",
    "ErrorSample",
    "FalconMapper",
    "FormatProcessor",
    "MapContext",
    "MappedRow",
    "PerimeterMetricsProcessor",
    "PhishingMapper",
    "ProcessOutcome",
    "RssFeedMapper",
    "RowMapper",
    "ScorecardIssueMapper",
    "ScorecardPdfProcessor",
    "ScorecardSummaryProcessor",
    "SecureworksMapper",
    "ThreatAdvisoryMapper",
    "TicketMapper",
    "VulnerabilityMapper",
    "XdrMetricsProcessor",
    "get_processor",
]
