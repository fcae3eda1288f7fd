"""Field-level parsers shared by the row mappers: dates, severities, statuses, numbers, booleans."""

import json
import logging
import math
import re
from datetime import UTC, datetime

from dateutil import parser as dateutil_parser

from rampart.schemas.records import IssueStatus, Severity

logger = logging.getLogger(__name__)

SEVERITY_LEVELS: tuple[str, ...] = ("CRITICAL", "HIGH", "MEDIUM", "LOW", "INFO")
ISSUE_STATUSES: tuple[str, ...] = ("OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED", "WONT_FIX")

# Severity aliases (case-insensitive) -> canonical level.
_SEVERITY_ALIASES: dict[str, Severity] = {
    "critical": "CRITICAL",
    "crit": "CRITICAL",
    "very high": "CRITICAL",
    "high": "HIGH",
    "medium": "MEDIUM",
    "med": "MEDIUM",
    "moderate": "MEDIUM",
    "low": "LOW",
    "info": "INFO",
    "informational": "INFO",
    "information": "INFO",
    "none": "INFO",
}

# Unrecognized or missing severities fall back per format. Generic severity
# columns default to INFO, alert-style severities to MEDIUM; the split is
# long-standing export behavior and downstream counts depend on it.
SEVERITY_FALLBACKS: dict[str, Severity] = {
    "vulnerability-csv": "INFO",
    "scorecard-issue-detail-csv": "INFO",
    "edr-falcon-csv": "MEDIUM",
    "edr-secureworks-csv": "MEDIUM",
    "cloud-findings-csv": "MEDIUM",
    "phishing-ticket-csv": "MEDIUM",
    "threat-advisory-csv": "MEDIUM",
    "generic-ticket-csv": "MEDIUM",
}

_STATUS_ALIASES: dict[str, IssueStatus] = {
    "open": "OPEN",
    "to do": "OPEN",
    "todo": "OPEN",
    "new": "OPEN",
    "active": "OPEN",
    "reopened": "OPEN",
    "backlog": "OPEN",
    "in progress": "IN_PROGRESS",
    "inprogress": "IN_PROGRESS",
    "assigned": "IN_PROGRESS",
    "working": "IN_PROGRESS",
    "under investigation": "IN_PROGRESS",
    "resolved": "RESOLVED",
    "fixed": "RESOLVED",
    "completed": "RESOLVED",
    "closed": "CLOSED",
    "done": "CLOSED",
    "suppressed": "WONT_FIX",
    "wont fix": "WONT_FIX",
    "won t fix": "WONT_FIX",
    "wontfix": "WONT_FIX",
    "rejected": "WONT_FIX",
    "invalid": "WONT_FIX",
    "false positive": "WONT_FIX",
}

_DEFAULT_STATUS: IssueStatus = "OPEN"

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_US_SLASH_DATE = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?)?$"
)
_TICKET_DATE = re.compile(
    r"^(\d{1,2})/([A-Za-z]{3})/(\d{2})\s+(\d{1,2}):(\d{2})\s*([AaPp][Mm])$"
)
_DASH_DATE = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{4})$")
_UTC_SUFFIX_DATE = re.compile(
    r"^(\d{4})/(\d{1,2})/(\d{1,2})\s+(\d{1,2}):(\d{2}):(\d{2})\s*UTC$", re.IGNORECASE
)
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _to_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _hour_24(hour: int, meridiem: str | None) -> int:
    if not meridiem:
        return hour
    meridiem = meridiem.upper()
    if meridiem == "PM" and hour < 12:
        return hour + 12
    if meridiem == "AM" and hour == 12:
        return 0
    return hour


def _parse_iso(value: str) -> datetime | None:
    if "T" not in value:
        return None
    try:
        return datetime.fromisoformat(value.replace("z", "Z"))
    except ValueError:
        return None


def _parse_us_slash(value: str) -> datetime | None:
    m = _US_SLASH_DATE.match(value)
    if not m:
        return None
    month, day, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
    hour = _hour_24(int(m.group(4) or 0), m.group(7))
    return datetime(year, month, day, hour, int(m.group(5) or 0), int(m.group(6) or 0))


def _parse_ticket_date(value: str) -> datetime | None:
    """'27/Aug/25 2:29 PM' as exported by Jira."""
    m = _TICKET_DATE.match(value)
    if not m:
        return None
    month = _MONTHS.get(m.group(2).lower())
    if month is None:
        return None
    yy = int(m.group(3))
    year = 2000 + yy if yy < 50 else 1900 + yy
    hour = _hour_24(int(m.group(4)), m.group(6))
    return datetime(year, month, int(m.group(1)), hour, int(m.group(5)))


def _parse_dash_date(value: str) -> datetime | None:
    m = _DASH_DATE.match(value)
    if not m:
        return None
    month = _MONTHS.get(m.group(2).lower())
    if month is None:
        return None
    return datetime(int(m.group(3)), month, int(m.group(1)))


def _parse_utc_suffix(value: str) -> datetime | None:
    """'2025/08/27 02:29:55 UTC' as exported by Secureworks."""
    m = _UTC_SUFFIX_DATE.match(value)
    if not m:
        return None
    return datetime(*(int(g) for g in m.groups()))


def _parse_protobuf_timestamp(value: str) -> datetime | None:
    """'{"seconds": 1724725795, "nanos": 0}' as exported by AWS Security Hub."""
    if not value.startswith("{"):
        return None
    try:
        payload = json.loads(value)
    except (TypeError, ValueError):
        return None
    if not isinstance(payload, dict) or "seconds" not in payload:
        return None
    try:
        seconds = float(payload["seconds"]) + float(payload.get("nanos") or 0) / 1e9
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _parse_fallback(value: str) -> datetime | None:
    # dateutil happily turns "5" into the 5th of this month; require something date-shaped.
    if len(value) < 6 or not any(ch.isdigit() for ch in value):
        return None
    try:
        return dateutil_parser.parse(value)
    except (ValueError, OverflowError):
        return None


_DATE_PARSERS = (
    _parse_iso,
    _parse_us_slash,
    _parse_ticket_date,
    _parse_dash_date,
    _parse_utc_suffix,
    _parse_protobuf_timestamp,
    _parse_fallback,
)


def parse_date(value: str | None) -> datetime | None:
    """
    Parse a vendor date string into a UTC-aware datetime.

    Formats are tried in priority order; the first that matches wins. A value
    that matches a pattern but is not a real calendar date is rejected rather
    than handed to the next parser. Returns None when nothing matches.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    for parser in _DATE_PARSERS:
        try:
            result = parser(text)
        except ValueError:
            logger.debug("Date %r matched %s but is not a valid date", text, parser.__name__)
            return None
        if result is None:
            continue
        try:
            return _to_utc(result)
        except (OverflowError, ValueError):
            # 0001-01-01T00:00:00+05:00 has no UTC equivalent inside datetime's range
            logger.debug("Date %r is out of range once converted to UTC", text)
            return None
    return None


def day_bucket(value: datetime | None) -> str:
    """YYYYMMDD of a datetime in UTC; empty string when None."""
    if value is None:
        return ""
    return _to_utc(value).strftime("%Y%m%d")


def normalize_severity(raw_severity: str | None, default: Severity = "INFO") -> Severity:
    """
    Map a vendor severity to the fixed enumeration.

    Unrecognized or empty values return `default`; callers pass the format's
    entry from SEVERITY_FALLBACKS.
    """
    if raw_severity and raw_severity.strip():
        normalized = raw_severity.strip().lower()
        if normalized in _SEVERITY_ALIASES:
            return _SEVERITY_ALIASES[normalized]
        # "High (7.5)", "P1 - Critical" and similar decorated values
        for word in _NON_ALNUM.split(normalized):
            if word in _SEVERITY_ALIASES:
                return _SEVERITY_ALIASES[word]
    return default


def severity_fallback(profile: str) -> Severity:
    return SEVERITY_FALLBACKS.get(profile, "INFO")


def normalize_status(raw_status: str | None) -> IssueStatus:
    """Map a vendor status vocabulary to the closed status set; unknown values are OPEN."""
    if not raw_status or not raw_status.strip():
        return _DEFAULT_STATUS
    normalized = _NON_ALNUM.sub(" ", raw_status.strip().lower()).strip()
    return _STATUS_ALIASES.get(normalized, _DEFAULT_STATUS)


def is_closed_status(raw_status: str | None) -> bool:
    """True for vendor statuses that mean the work item is finished."""
    text = (raw_status or "").lower()
    return any(word in text for word in ("closed", "resolved", "done"))


def parse_number(value: str | None, default: float | None = None) -> float | None:
    """Parse '1,234.5' / ' 42 ' style numbers; returns default on failure."""
    if value is None:
        return default
    text = re.sub(r"[\s,]", "", str(value))
    if not text:
        return default
    try:
        number = float(text)
    except ValueError:
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def parse_int(value: str | None, default: int | None = None) -> int | None:
    number = parse_number(value)
    if number is None:
        return default
    return int(number)


_TRUE_VALUES = frozenset({"true", "yes", "y", "1"})
_FALSE_VALUES = frozenset({"false", "no", "n", "0"})


def parse_bool(value: str | None, default: bool | None = None) -> bool | None:
    text = (value or "").strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return default


_FALSE_POSITIVE_MARKERS = frozenset({"false positive", "fp"})


def parse_false_positive(value: str | None) -> bool:
    """EDR disposition cells: yes/true/1 style flags or a literal 'False Positive' / 'FP'."""
    if parse_bool(value):
        return True
    return (value or "").strip().lower() in _FALSE_POSITIVE_MARKERS
