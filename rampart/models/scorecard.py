"""ORM models for SecurityScorecard summary ratings and issue details."""

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text

from rampart.models.base import Base, SourceRecordMixin, TimestampMixin


class ScorecardRating(TimestampMixin, Base):
    """One summary per report date (upserted by report_date)."""

    __tablename__ = "scorecard_ratings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    report_date = Column(DateTime(timezone=True), nullable=False, unique=True, index=True)
    company = Column(String(255), nullable=False, default="NETGEAR")
    generated_by = Column(String(255), nullable=True)
    overall_score = Column(Float, nullable=False, default=0.0)
    letter_grade = Column(String(1), nullable=False, default="F")
    threat_indicators_score = Column(Float, nullable=True)
    network_security_score = Column(Float, nullable=True)
    dns_health_score = Column(Float, nullable=True)
    patching_cadence_score = Column(Float, nullable=True)
    endpoint_security_score = Column(Float, nullable=True)
    ip_reputation_score = Column(Float, nullable=True)
    application_security_score = Column(Float, nullable=True)
    cubit_score = Column(Float, nullable=True)
    hacker_chatter_score = Column(Float, nullable=True)
    information_leak_score = Column(Float, nullable=True)
    social_engineering_score = Column(Float, nullable=True)
    industry = Column(String(255), nullable=True)
    company_website = Column(String(1024), nullable=True)
    findings_on_open_ports = Column(Integer, nullable=True)
    site_vulnerabilities = Column(Integer, nullable=True)
    malware_discovered = Column(Integer, nullable=True)
    leaked_information = Column(Integer, nullable=True)
    ip_addresses_scanned = Column(Integer, nullable=True)
    domain_names_scanned = Column(Integer, nullable=True)


class ScorecardIssueDetail(SourceRecordMixin, Base):
    """One row of the scorecard full issue export, keyed by the scorecard issue id."""

    __tablename__ = "scorecard_issue_details"

    issue_id = Column(String(255), primary_key=True)
    factor_name = Column(String(255), nullable=False, default="", index=True)
    issue_type_title = Column(String(1024), nullable=False, default="")
    issue_type_code = Column(String(255), nullable=False, default="")
    severity = Column(String(16), nullable=False, index=True)
    recommendation = Column(Text, nullable=True)
    first_seen = Column(DateTime(timezone=True), nullable=True)
    last_seen = Column(DateTime(timezone=True), nullable=True)
    ip_addresses = Column(Text, nullable=True)
    hostname = Column(String(1024), nullable=True)
    subdomain = Column(String(1024), nullable=True)
    target = Column(Text, nullable=True)
    ports = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="active")
    cve_id = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    time_since_published = Column(String(255), nullable=True)
    time_open_since_published = Column(String(255), nullable=True)
    cookie_name = Column(String(1024), nullable=True)
    data = Column(Text, nullable=True)
    common_name = Column(String(1024), nullable=True)
    key_length = Column(String(64), nullable=True)
    using_rc4 = Column(Boolean, nullable=True)
    issuer_organization_name = Column(String(1024), nullable=True)
    provider = Column(String(255), nullable=True)
    detected_service = Column(String(255), nullable=True)
    product = Column(String(255), nullable=True)
    version = Column(String(255), nullable=True)
    platform = Column(String(255), nullable=True)
    browser = Column(String(255), nullable=True)
    destination_ips = Column(Text, nullable=True)
    malware_family = Column(String(255), nullable=True)
    malware_type = Column(String(255), nullable=True)
    detection_method = Column(String(255), nullable=True)
    label = Column(String(255), nullable=True)
    initial_url = Column(Text, nullable=True)
    final_url = Column(Text, nullable=True)
    request_chain = Column(Text, nullable=True)
    headers = Column(Text, nullable=True)
    analysis = Column(Text, nullable=True)
    percent_similar_companies = Column(Float, nullable=True)
    average_findings = Column(Float, nullable=True)
    score_impact = Column(Float, nullable=False, default=0.0)
