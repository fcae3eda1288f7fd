"""Filename validation and routing of an upload to exactly one format profile."""

import re
from dataclasses import dataclass
from datetime import UTC, datetime

from rampart.services.errors import UnrecognizedFormat

_EMBEDDED_DATE = re.compile(r"_(\d{8})\.")
_EMBEDDED_MONTH = re.compile(r"_(\d{6})\.csv$", re.IGNORECASE)


@dataclass(frozen=True)
class FileNamingRule:
    """One accepted filename shape and the source tag it implies."""

    source: str
    pattern: re.Pattern[str]
    description: str
    examples: tuple[str, ...]
    file_type: str
    # Exports from ticketing tools are named by hand and often carry no date.
    date_required: bool = True
    # Tool metrics reports are named by month (MMYYYY) and dated the first of that month.
    date_pattern: re.Pattern[str] = _EMBEDDED_DATE
    date_format: str = "%Y%m%d"
    date_label: str = "YYYYMMDD"


FILE_NAMING_RULES: tuple[FileNamingRule, ...] = (
    FileNamingRule(
        source="tenable",
        pattern=re.compile(r"^Tenable_.*_\d{8}\.csv$", re.IGNORECASE),
        description="Tenable vulnerability reports",
        examples=("Tenable_SCAN123_20241224.csv", "Tenable_MONTHLY_20241201.csv"),
        file_type="csv",
    ),
    FileNamingRule(
        source="falcon",
        pattern=re.compile(r"^Falcon_.*_\d{8}\.csv$", re.IGNORECASE),
        description="Falcon detection reports",
        examples=("Falcon_DETECTIONS_20241224.csv", "Falcon_ALERTS_20241201.csv"),
        file_type="csv",
    ),
    FileNamingRule(
        source="secureworks",
        pattern=re.compile(r"^Secureworks_.*_\d{8}\.csv$", re.IGNORECASE),
        description="Secureworks security alerts",
        examples=("Secureworks_ALERTS_20241224.csv", "Secureworks_DETECTIONS_20241201.csv"),
        file_type="csv",
    ),
    FileNamingRule(
        source="phishing",
        pattern=re.compile(r"^Phishing_.*_\d{8}\.csv$", re.IGNORECASE),
        description="Phishing reports from Jira",
        examples=("Phishing_MONTHLY_20241224.csv", "Phishing_INCIDENTS_20241201.csv"),
        file_type="csv",
    ),
    FileNamingRule(
        source="aws_security_hub",
        pattern=re.compile(r"^AWS_Security_Hub_.*_\d{8}\.csv$", re.IGNORECASE),
        description="AWS Security Hub compliance findings",
        examples=("AWS_Security_Hub_FINDINGS_20241224.csv", "AWS_Security_Hub_COMPLIANCE_20241201.csv"),
        file_type="csv",
    ),
    FileNamingRule(
        source="scorecard-pdf",
        pattern=re.compile(r"^NETGEAR-Scorecard-.*_\d{8}\.pdf$", re.IGNORECASE),
        description="Security Scorecard PDF reports",
        examples=("NETGEAR-Scorecard-Q4_20241224.pdf", "NETGEAR-Scorecard-MONTHLY_20241201.pdf"),
        file_type="pdf",
    ),
    FileNamingRule(
        source="scorecard-csv",
        pattern=re.compile(r"^NETGEAR_FullIssues_.*_\d{8}\.csv$", re.IGNORECASE),
        description="Security Scorecard detailed issues CSV",
        examples=("NETGEAR_FullIssues_Report_20250824.csv", "NETGEAR_FullIssues_MONTHLY_20241201.csv"),
        file_type="csv",
    ),
    FileNamingRule(
        source="scorecard-report",
        pattern=re.compile(r"^NETGEAR_Scorecard_Report_\d{8}\.csv$", re.IGNORECASE),
        description="Security Scorecard summary report CSV",
        examples=("NETGEAR_Scorecard_Report_20250824.csv", "NETGEAR_Scorecard_Report_20241201.csv"),
        file_type="csv",
    ),
    FileNamingRule(
        source="perimeter-protection",
        pattern=re.compile(r"^Perimeter_Protection_Quarter0[1-4]_(0[1-9]|1[0-2])\d{4}\.csv$", re.IGNORECASE),
        description="Perimeter protection tool metrics",
        examples=("Perimeter_Protection_Quarter01_022025.csv", "Perimeter_Protection_Quarter03_092025.csv"),
        file_type="csv",
        date_pattern=_EMBEDDED_MONTH,
        date_format="%m%Y",
        date_label="MMYYYY",
    ),
    FileNamingRule(
        source="xdr-secureworks",
        pattern=re.compile(
            r"^(XDR_Secureworks|ToolMetrics_Secureworks_Quarter0[1-4])_(0[1-9]|1[0-2])\d{4}\.csv$",
            re.IGNORECASE,
        ),
        description="Secureworks XDR monthly tool metrics",
        examples=("XDR_Secureworks_082025.csv", "ToolMetrics_Secureworks_Quarter03_092025.csv"),
        file_type="csv",
        date_pattern=_EMBEDDED_MONTH,
        date_format="%m%Y",
        date_label="MMYYYY",
    ),
    FileNamingRule(
        source="rss-feeds",
        pattern=re.compile(r"^.*rss.*\.csv$", re.IGNORECASE),
        description="RSS feed subscription lists",
        examples=("RSS_Feeds_20250831.csv", "rss_feeds.csv"),
        file_type="csv",
        date_required=False,
    ),
    FileNamingRule(
        source="threat-advisory",
        pattern=re.compile(r"^.*threat.*advisory.*\.csv$", re.IGNORECASE),
        description="Threat advisory reports",
        examples=("Threat_Advisory_20241224.csv", "threat_advisory_report.csv"),
        file_type="csv",
        date_required=False,
    ),
    FileNamingRule(
        source="open-items",
        pattern=re.compile(r"^.*openitems.*\.csv$", re.IGNORECASE),
        description="Open items reports from Jira",
        examples=("CorpSec_BiWeekly_OpenItems_20241224.csv", "OpenItems_Report.csv"),
        file_type="csv",
        date_required=False,
    ),
)


@dataclass(frozen=True)
class FormatProfile:
    """A source format: which mapper handles it and who may upload it."""

    name: str
    source: str
    file_type: str
    admin_only: bool
    description: str
    # Shown when a non-admin tries an admin-only format.
    family: str = ""


PROFILES: dict[str, FormatProfile] = {
    p.source: p
    for p in (
        FormatProfile("vulnerability-csv", "tenable", "csv", False, "Vulnerability scanner findings"),
        FormatProfile("edr-falcon-csv", "falcon", "csv", False, "Falcon EDR detections"),
        FormatProfile("edr-secureworks-csv", "secureworks", "csv", False, "Secureworks XDR alerts"),
        FormatProfile("cloud-findings-csv", "aws_security_hub", "csv", False, "AWS Security Hub control findings"),
        FormatProfile("phishing-ticket-csv", "phishing", "csv", False, "Phishing tickets exported from Jira"),
        FormatProfile("threat-advisory-csv", "threat-advisory", "csv", False, "Threat advisory tracker"),
        FormatProfile("generic-ticket-csv", "open-items", "csv", False, "Open work items exported from Jira"),
        FormatProfile("rss-feed-csv", "rss-feeds", "csv", False, "RSS feed subscriptions, one per URL"),
        FormatProfile(
            "scorecard-summary-csv", "scorecard-report", "csv", True,
            "Scorecard summary (Field,Value rows)", "SecurityScorecard",
        ),
        FormatProfile(
            "scorecard-issue-detail-csv", "scorecard-csv", "csv", True,
            "Scorecard full issue list", "SecurityScorecard",
        ),
        FormatProfile(
            "scorecard-pdf-placeholder", "scorecard-pdf", "pdf", True,
            "Scorecard PDF (stored, not parsed)", "SecurityScorecard",
        ),
        FormatProfile(
            "perimeter-metrics-csv", "perimeter-protection", "csv", True,
            "Email and perimeter counters (Category,Item,Count)", "tool metrics",
        ),
        FormatProfile(
            "xdr-metrics-csv", "xdr-secureworks", "csv", True,
            "Secureworks XDR monthly counters (Name,Count)", "tool metrics",
        ),
    )
}


@dataclass(frozen=True)
class FilenameValidation:
    rule: FileNamingRule
    extracted_date: str | None


@dataclass(frozen=True)
class RoutedFile:
    """Result of routing: the profile plus the report date taken from the filename."""

    profile: FormatProfile
    report_date: datetime
    extracted_date: str | None

    @property
    def source(self) -> str:
        return self.profile.source

    @property
    def file_type(self) -> str:
        return self.profile.file_type


def _expected_formats() -> str:
    return "; ".join(f"{rule.description}: {rule.examples[0]}" for rule in FILE_NAMING_RULES)


def _parse_embedded_date(value: str, date_format: str = "%Y%m%d") -> datetime | None:
    try:
        return datetime.strptime(value, date_format).replace(tzinfo=UTC)
    except ValueError:
        return None


def validate_filename(filename: str) -> FilenameValidation:
    """
    Match a filename against FILE_NAMING_RULES (first match wins).

    Raises UnrecognizedFormat for empty names, names matching no rule, and
    embedded dates that are not real calendar dates (20240231).
    """
    name = (filename or "").strip()
    if not name:
        raise UnrecognizedFormat("Filename cannot be empty")
    for rule in FILE_NAMING_RULES:
        if not rule.pattern.match(name):
            continue
        m = rule.date_pattern.search(name)
        extracted = m.group(1) if m else None
        if extracted and _parse_embedded_date(extracted, rule.date_format) is None:
            raise UnrecognizedFormat(
                f"Invalid date in filename: {extracted}. Expected {rule.date_label} format."
            )
        if extracted is None and rule.date_required:
            raise UnrecognizedFormat(f"Filename must embed a {rule.date_label} date: {name}")
        return FilenameValidation(rule=rule, extracted_date=extracted)
    raise UnrecognizedFormat(
        f"Filename does not match any expected pattern. Expected formats: {_expected_formats()}"
    )


def route_filename(filename: str, now: datetime | None = None) -> RoutedFile:
    """Validate the filename and select its format profile. Report date defaults to now when absent."""
    validation = validate_filename(filename)
    profile = PROFILES.get(validation.rule.source)
    if profile is None:
        raise UnrecognizedFormat(f"No format profile for source '{validation.rule.source}'")
    report_date = None
    if validation.extracted_date:
        report_date = _parse_embedded_date(validation.extracted_date, validation.rule.date_format)
    if report_date is None:
        report_date = now or datetime.now(UTC)
    return RoutedFile(profile=profile, report_date=report_date, extracted_date=validation.extracted_date)


def list_naming_rules() -> list[dict]:
    """Naming rules and their profiles, for clients that pre-validate filenames."""
    result = []
    for rule in FILE_NAMING_RULES:
        profile = PROFILES[rule.source]
        result.append({
            "source": rule.source,
            "pattern": rule.pattern.pattern,
            "description": rule.description,
            "examples": list(rule.examples),
            "fileType": rule.file_type,
            "profile": profile.name,
            "adminOnly": profile.admin_only,
            "dateRequired": rule.date_required,
            "dateFormat": rule.date_label,
        })
    return result
