"""ORM models for tickets exported from Jira (phishing queue and open items)."""

from sqlalchemy import Column, DateTime, Float, String, Text

from rampart.models.base import Base, SourceRecordMixin


class PhishingTicket(SourceRecordMixin, Base):
    __tablename__ = "phishing_tickets"

    id = Column(String(255), primary_key=True)
    issue_key = Column(String(255), nullable=True, index=True)
    summary = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="OPEN", index=True)
    priority = Column(String(16), nullable=False)
    business_unit = Column(String(255), nullable=False, default="Unknown")
    reporter = Column(String(255), nullable=True)
    assignee = Column(String(255), nullable=True)
    time_to_resolution_hours = Column(Float, nullable=True)
    reported_at = Column(DateTime(timezone=True), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)


class Ticket(SourceRecordMixin, Base):
    """Generic open work item; keyed by the sanitized issue key."""

    __tablename__ = "tickets"

    id = Column(String(255), primary_key=True)
    issue_key = Column(String(255), nullable=True, index=True)
    issue_id = Column(String(64), nullable=True)
    issue_type = Column(String(255), nullable=True)
    title = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=True)
    assignee = Column(String(255), nullable=True)
    reporter = Column(String(255), nullable=True)
    priority = Column(String(64), nullable=True)
    status = Column(String(16), nullable=False, default="OPEN", index=True)
    vendor_status = Column(String(255), nullable=True)
    risk_accepted = Column(String(255), nullable=True)
    opened_at = Column(DateTime(timezone=True), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)
