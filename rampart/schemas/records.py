"""Typed records produced by the row mappers, one per source format.

Field names match the ORM columns so a record's model_dump() can be written
as-is. raw is the side channel for formats that keep the whole source row.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

Severity = Literal["CRITICAL", "HIGH", "MEDIUM", "LOW", "INFO"]
IssueStatus = Literal["OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED", "WONT_FIX"]


class SourceRecord(BaseModel):
    """Fields shared by every mapped row."""

    model_config = {"extra": "forbid"}

    report_date: datetime | None = Field(
        default=None,
        description="Report date taken from the uploaded filename.",
    )

    def to_values(self) -> dict[str, Any]:
        """Column values for the store (raw stays a plain dict)."""
        return self.model_dump()


class VulnerabilityRecord(SourceRecord):
    asset_name: str = "Unknown"
    ip_address: str | None = None
    port: str | None = None
    business_unit: str = "Unknown"
    cve_id: str | None = None
    plugin_id: str | None = None
    plugin_name: str | None = None
    severity: Severity
    cvss_score: float | None = Field(default=None, ge=0, le=10)
    status: IssueStatus = "OPEN"
    sla_date: datetime | None = None
    discovered_at: datetime | None = None
    last_observed_at: datetime | None = None
    description: str | None = None
    solution: str | None = None

    @field_validator("cvss_score", mode="before")
    @classmethod
    def drop_out_of_range_cvss(cls, v: Any) -> Any:
        # Some scanners emit 0-100 risk scores in the CVSS column.
        if isinstance(v, int | float) and not 0 <= v <= 10:
            return None
        return v


class FalconDetectionRecord(SourceRecord):
    detected_at: datetime | None = None
    last_update_at: datetime | None = None
    company: str | None = None
    severity: Severity
    objective: str | None = None
    tactic: str | None = None
    technique: str | None = None
    detect_name: str | None = None
    pattern_description: str | None = None
    status: IssueStatus = "OPEN"
    resolution: str | None = None
    hostname: str | None = None
    agent_id: str | None = None
    username: str | None = None
    product_type: str | None = None
    filename: str | None = None
    detect_description: str | None = None
    process_name: str | None = None
    command_line: str | None = None
    ioc_type: str | None = None
    ioc_value: str | None = None
    policy_name: str | None = None
    policy_type: str | None = None
    md5: str | None = None
    sha256: str | None = None
    falcon_host_link: str | None = None
    false_positive: bool = False
    raw: dict[str, Any] | None = None


class SecureworksAlertRecord(SourceRecord):
    title: str = "Unknown Alert"
    severity: Severity
    threat_score: float | None = None
    detector: str | None = None
    sensor_type: str | None = None
    domain: str | None = None
    combined_username: str | None = None
    source_ip: str | None = None
    destination_ip: str | None = None
    hostname: str | None = None
    investigations: str | None = None
    confidence: float | None = None
    mitre_attack: str | None = None
    status: IssueStatus = "OPEN"
    status_reason: str | None = None
    tenant_id: str
    description: str | None = None
    detected_at: datetime | None = None
    vendor_occurrence_count: int | None = None


class CloudFindingRecord(SourceRecord):
    title: str = ""
    control_status: str = "Unknown"
    severity: Severity
    failed_checks: int = 0
    unknown_checks: int = 0
    not_available_checks: int = 0
    passed_checks: int = 0
    related_requirements: str | None = None
    custom_parameters: str | None = None
    status: IssueStatus = "OPEN"
    description: str | None = None
    found_at: datetime | None = None
    raw: dict[str, Any] | None = None


class PhishingTicketRecord(SourceRecord):
    issue_key: str | None = None
    summary: str | None = None
    status: IssueStatus = "OPEN"
    priority: Severity
    business_unit: str = "Unknown"
    reporter: str | None = None
    assignee: str | None = None
    time_to_resolution_hours: float | None = None
    reported_at: datetime | None = None
    resolved_at: datetime | None = None


class ThreatAdvisoryRecord(SourceRecord):
    name: str = Field(..., min_length=1)
    severity: Severity
    internal_severity: Severity | None = None
    severity_text: str | None = None
    internal_severity_text: str | None = None
    impacted: bool = False
    source: str | None = None
    advisory_released_date: str | None = None
    notified_date: str | None = None
    remarks: str | None = None
    eta_for_fix: str | None = None


class TicketRecord(SourceRecord):
    issue_key: str | None = None
    issue_id: str | None = None
    issue_type: str | None = None
    title: str = ""
    description: str | None = None
    assignee: str | None = None
    reporter: str | None = None
    priority: str | None = None
    status: IssueStatus = "OPEN"
    vendor_status: str | None = None
    risk_accepted: str | None = None
    opened_at: datetime | None = None
    due_date: datetime | None = None
    closed_at: datetime | None = None


class RssFeedRecord(SourceRecord):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    active: bool = True


class ScorecardIssueRecord(SourceRecord):
    factor_name: str = ""
    issue_type_title: str = ""
    issue_type_code: str = ""
    severity: Severity
    recommendation: str | None = None
    first_seen: datetime | None = None
    last_seen: datetime | None = None
    ip_addresses: str | None = None
    hostname: str | None = None
    subdomain: str | None = None
    target: str | None = None
    ports: str | None = None
    status: str = "active"
    cve_id: str | None = None
    description: str | None = None
    time_since_published: str | None = None
    time_open_since_published: str | None = None
    cookie_name: str | None = None
    data: str | None = None
    common_name: str | None = None
    key_length: str | None = None
    using_rc4: bool | None = None
    issuer_organization_name: str | None = None
    provider: str | None = None
    detected_service: str | None = None
    product: str | None = None
    version: str | None = None
    platform: str | None = None
    browser: str | None = None
    destination_ips: str | None = None
    malware_family: str | None = None
    malware_type: str | None = None
    detection_method: str | None = None
    label: str | None = None
    initial_url: str | None = None
    final_url: str | None = None
    request_chain: str | None = None
    headers: str | None = None
    analysis: str | None = None
    percent_similar_companies: float | None = None
    average_findings: float | None = None
    score_impact: float = 0.0


class ScorecardRatingRecord(BaseModel):
    """Summary report (Field,Value rows) collapsed into one record per report date."""

    model_config = {"extra": "forbid"}

    company: str = "NETGEAR"
    generated_by: str | None = None
    overall_score: float = 0.0
    letter_grade: Literal["A", "B", "C", "D", "F"] = "F"
    threat_indicators_score: float | None = None
    network_security_score: float | None = None
    dns_health_score: float | None = None
    patching_cadence_score: float | None = None
    endpoint_security_score: float | None = None
    ip_reputation_score: float | None = None
    application_security_score: float | None = None
    cubit_score: float | None = None
    hacker_chatter_score: float | None = None
    information_leak_score: float | None = None
    social_engineering_score: float | None = None
    industry: str | None = None
    company_website: str | None = None
    findings_on_open_ports: int | None = None
    site_vulnerabilities: int | None = None
    malware_discovered: int | None = None
    leaked_information: int | None = None
    ip_addresses_scanned: int | None = None
    domain_names_scanned: int | None = None


class ToolMetricsPeriod(BaseModel):
    """Month a tool metrics report covers; stored once per period_month."""

    model_config = {"extra": "forbid"}

    period_month: datetime
    period_quarter: str = Field(..., pattern=r"^Q[1-4] \d{4}$")
    report_label: str = Field(..., pattern=r"^\d{6}$")
    raw: dict[str, Any] | None = None


class EmailMetricsRecord(ToolMetricsPeriod):
    inbound_emails: int = 0
    blocked_proofpoint: int = 0
    blocked_ms365: int = 0
    delivered_emails: int = 0


class PerimeterMetricsRecord(ToolMetricsPeriod):
    total_inbound: int | None = None
    total_blocked: int | None = None
    delivered: int | None = None


class XdrMetricsRecord(ToolMetricsPeriod):
    events: int = 0
    detections: int = 0
    triaged_events: int = 0
    investigations: int = 0
    incidents: int = 0
