"""Initial ingestion schema: users, ingestion logs and one table per source format.

Revision ID: 20250901000000
Revises:
Create Date: 2025-09-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "20250901000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _source_columns() -> list[sa.Column]:
    return _timestamps() + [
        sa.Column("report_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _index(table: str, *columns: str, unique: bool = False) -> None:
    for column in columns:
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=unique)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="viewer"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("users", "username", unique=True)

    op.create_table(
        "ingestion_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("filename", sa.String(length=1024), nullable=False),
        sa.Column("original_name", sa.String(length=1024), nullable=False),
        sa.Column("file_type", sa.String(length=32), nullable=False),
        sa.Column("source", sa.String(length=64), nullable=False),
        sa.Column("profile", sa.String(length=64), nullable=True),
        sa.Column("checksum", sa.String(length=64), nullable=True),
        sa.Column("rows_processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("report_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("imported_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("error_log", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("ingestion_logs", "source", "checksum", "imported_date", "status")

    op.create_table(
        "vulnerabilities",
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("asset_name", sa.String(length=512), nullable=False),
        sa.Column("ip_address", sa.String(length=255), nullable=True),
        sa.Column("port", sa.String(length=64), nullable=True),
        sa.Column("business_unit", sa.String(length=255), nullable=False),
        sa.Column("cve_id", sa.String(length=255), nullable=True),
        sa.Column("plugin_id", sa.String(length=64), nullable=True),
        sa.Column("plugin_name", sa.String(length=1024), nullable=True),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("cvss_score", sa.Float(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("sla_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("discovered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_observed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("solution", sa.Text(), nullable=True),
        sa.Column("occurrence_count", sa.Integer(), nullable=False, server_default="1"),
        *_source_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("vulnerabilities", "business_unit", "cve_id", "severity", "status", "report_date")

    op.create_table(
        "detection_falcon",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("detected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_update_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("objective", sa.String(length=255), nullable=True),
        sa.Column("tactic", sa.String(length=255), nullable=True),
        sa.Column("technique", sa.String(length=255), nullable=True),
        sa.Column("detect_name", sa.String(length=1024), nullable=True),
        sa.Column("pattern_description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("resolution", sa.String(length=255), nullable=True),
        sa.Column("hostname", sa.String(length=255), nullable=True),
        sa.Column("agent_id", sa.String(length=255), nullable=True),
        sa.Column("username", sa.String(length=255), nullable=True),
        sa.Column("product_type", sa.String(length=64), nullable=True),
        sa.Column("filename", sa.String(length=1024), nullable=True),
        sa.Column("detect_description", sa.Text(), nullable=True),
        sa.Column("process_name", sa.String(length=1024), nullable=True),
        sa.Column("command_line", sa.Text(), nullable=True),
        sa.Column("ioc_type", sa.String(length=255), nullable=True),
        sa.Column("ioc_value", sa.Text(), nullable=True),
        sa.Column("policy_name", sa.String(length=255), nullable=True),
        sa.Column("policy_type", sa.String(length=255), nullable=True),
        sa.Column("md5", sa.String(length=64), nullable=True),
        sa.Column("sha256", sa.String(length=128), nullable=True),
        sa.Column("falcon_host_link", sa.Text(), nullable=True),
        sa.Column("false_positive", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("occurrence_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("raw", JSON_TYPE, nullable=True),
        *_source_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("detection_falcon", "detected_at", "severity", "hostname", "report_date")

    op.create_table(
        "detection_secureworks",
        sa.Column("alert_id", sa.String(length=128), nullable=False),
        sa.Column("title", sa.String(length=1024), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("threat_score", sa.Float(), nullable=True),
        sa.Column("detector", sa.String(length=255), nullable=True),
        sa.Column("sensor_type", sa.String(length=255), nullable=True),
        sa.Column("domain", sa.String(length=255), nullable=True),
        sa.Column("combined_username", sa.String(length=255), nullable=True),
        sa.Column("source_ip", sa.String(length=255), nullable=True),
        sa.Column("destination_ip", sa.String(length=255), nullable=True),
        sa.Column("hostname", sa.String(length=255), nullable=True),
        sa.Column("investigations", sa.Text(), nullable=True),
        sa.Column("confidence", sa.Float(), nullable=True),
        sa.Column("mitre_attack", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("status_reason", sa.Text(), nullable=True),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("detected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("false_positive", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("occurrence_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("vendor_occurrence_count", sa.Integer(), nullable=True),
        *_source_columns(),
        sa.PrimaryKeyConstraint("alert_id"),
    )
    _index("detection_secureworks", "severity", "hostname", "status", "detected_at", "report_date")

    op.create_table(
        "cloud_findings",
        sa.Column("control_id", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=1024), nullable=False),
        sa.Column("control_status", sa.String(length=64), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("failed_checks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unknown_checks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("not_available_checks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("passed_checks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("related_requirements", sa.Text(), nullable=True),
        sa.Column("custom_parameters", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("found_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("raw", JSON_TYPE, nullable=True),
        *_source_columns(),
        sa.PrimaryKeyConstraint("control_id"),
    )
    _index("cloud_findings", "severity", "report_date")

    op.create_table(
        "phishing_tickets",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("issue_key", sa.String(length=255), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=False),
        sa.Column("business_unit", sa.String(length=255), nullable=False),
        sa.Column("reporter", sa.String(length=255), nullable=True),
        sa.Column("assignee", sa.String(length=255), nullable=True),
        sa.Column("time_to_resolution_hours", sa.Float(), nullable=True),
        sa.Column("reported_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        *_source_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("phishing_tickets", "issue_key", "status", "report_date")

    op.create_table(
        "tickets",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("issue_key", sa.String(length=255), nullable=True),
        sa.Column("issue_id", sa.String(length=64), nullable=True),
        sa.Column("issue_type", sa.String(length=255), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("assignee", sa.String(length=255), nullable=True),
        sa.Column("reporter", sa.String(length=255), nullable=True),
        sa.Column("priority", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("vendor_status", sa.String(length=255), nullable=True),
        sa.Column("risk_accepted", sa.String(length=255), nullable=True),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        *_source_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("tickets", "issue_key", "status", "report_date")

    op.create_table(
        "threat_advisories",
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("internal_severity", sa.String(length=16), nullable=True),
        sa.Column("severity_text", sa.String(length=64), nullable=True),
        sa.Column("internal_severity_text", sa.String(length=64), nullable=True),
        sa.Column("impacted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("source", sa.String(length=255), nullable=True),
        sa.Column("advisory_released_date", sa.String(length=64), nullable=True),
        sa.Column("notified_date", sa.String(length=64), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("eta_for_fix", sa.String(length=255), nullable=True),
        *_source_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("threat_advisories", "report_date")

    op.create_table(
        "scorecard_ratings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("report_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("company", sa.String(length=255), nullable=False),
        sa.Column("generated_by", sa.String(length=255), nullable=True),
        sa.Column("overall_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("letter_grade", sa.String(length=1), nullable=False, server_default="F"),
        *[
            sa.Column(f"{name}_score", sa.Float(), nullable=True)
            for name in (
                "threat_indicators",
                "network_security",
                "dns_health",
                "patching_cadence",
                "endpoint_security",
                "ip_reputation",
                "application_security",
                "cubit",
                "hacker_chatter",
                "information_leak",
                "social_engineering",
            )
        ],
        sa.Column("industry", sa.String(length=255), nullable=True),
        sa.Column("company_website", sa.String(length=1024), nullable=True),
        sa.Column("findings_on_open_ports", sa.Integer(), nullable=True),
        sa.Column("site_vulnerabilities", sa.Integer(), nullable=True),
        sa.Column("malware_discovered", sa.Integer(), nullable=True),
        sa.Column("leaked_information", sa.Integer(), nullable=True),
        sa.Column("ip_addresses_scanned", sa.Integer(), nullable=True),
        sa.Column("domain_names_scanned", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("scorecard_ratings", "report_date", unique=True)

    text_columns = (
        "recommendation", "ip_addresses", "target", "ports", "description", "data",
        "destination_ips", "initial_url", "final_url", "request_chain", "headers", "analysis",
    )
    short_columns = (
        "cve_id", "time_since_published", "time_open_since_published", "provider",
        "detected_service", "product", "version", "platform", "browser", "malware_family",
        "malware_type", "detection_method", "label",
    )
    long_columns = ("hostname", "subdomain", "cookie_name", "common_name", "issuer_organization_name")
    op.create_table(
        "scorecard_issue_details",
        sa.Column("issue_id", sa.String(length=255), nullable=False),
        sa.Column("factor_name", sa.String(length=255), nullable=False),
        sa.Column("issue_type_title", sa.String(length=1024), nullable=False),
        sa.Column("issue_type_code", sa.String(length=255), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("first_seen", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("key_length", sa.String(length=64), nullable=True),
        sa.Column("using_rc4", sa.Boolean(), nullable=True),
        sa.Column("percent_similar_companies", sa.Float(), nullable=True),
        sa.Column("average_findings", sa.Float(), nullable=True),
        sa.Column("score_impact", sa.Float(), nullable=False, server_default="0"),
        *[sa.Column(name, sa.Text(), nullable=True) for name in text_columns],
        *[sa.Column(name, sa.String(length=255), nullable=True) for name in short_columns],
        *[sa.Column(name, sa.String(length=1024), nullable=True) for name in long_columns],
        *_source_columns(),
        sa.PrimaryKeyConstraint("issue_id"),
    )
    _index("scorecard_issue_details", "factor_name", "severity", "report_date")

    op.create_table(
        "rss_feeds",
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=255), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_source_columns(),
        sa.PrimaryKeyConstraint("url"),
    )
    _index("rss_feeds", "category", "report_date")

    counters = {
        "tool_metrics_email": [
            sa.Column(name, sa.Integer(), nullable=False, server_default="0")
            for name in ("inbound_emails", "blocked_proofpoint", "blocked_ms365", "delivered_emails")
        ],
        "tool_metrics_perimeter": [
            sa.Column(name, sa.Integer(), nullable=True)
            for name in ("total_inbound", "total_blocked", "delivered")
        ],
        "tool_metrics_xdr": [
            sa.Column("events", sa.BigInteger(), nullable=False, server_default="0"),
            *[
                sa.Column(name, sa.Integer(), nullable=False, server_default="0")
                for name in ("detections", "triaged_events", "investigations", "incidents")
            ],
        ],
    }
    for table, columns in counters.items():
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("period_month", sa.DateTime(timezone=True), nullable=False),
            sa.Column("period_quarter", sa.String(length=16), nullable=False),
            sa.Column("report_label", sa.String(length=6), nullable=False),
            *columns,
            sa.Column("raw", JSON_TYPE, nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )
        _index(table, "period_month", unique=True)


def downgrade() -> None:
    for table in (
        "tool_metrics_xdr",
        "tool_metrics_perimeter",
        "tool_metrics_email",
        "rss_feeds",
        "scorecard_issue_details",
        "scorecard_ratings",
        "threat_advisories",
        "tickets",
        "phishing_tickets",
        "cloud_findings",
        "detection_secureworks",
        "detection_falcon",
        "vulnerabilities",
        "ingestion_logs",
        "users",
    ):
        op.drop_table(table)
