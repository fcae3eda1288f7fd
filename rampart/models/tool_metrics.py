"""ORM models for the monthly tool metrics reports (email, perimeter and XDR counters)."""

from sqlalchemy import BigInteger, Column, DateTime, Integer, String

from rampart.models.base import Base, JSONType, TimestampMixin


class ToolMetricsMixin(TimestampMixin):
    """One row per calendar month, upserted by period_month (first day of the month, UTC)."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    period_month = Column(DateTime(timezone=True), nullable=False, unique=True, index=True)
    period_quarter = Column(String(16), nullable=False)
    # MMYYYY as it appears in the filename.
    report_label = Column(String(6), nullable=False)
    raw = Column(JSONType, nullable=True)


class ToolMetricsEmail(ToolMetricsMixin, Base):
    __tablename__ = "tool_metrics_email"

    inbound_emails = Column(Integer, nullable=False, default=0)
    blocked_proofpoint = Column(Integer, nullable=False, default=0)
    blocked_ms365 = Column(Integer, nullable=False, default=0)
    delivered_emails = Column(Integer, nullable=False, default=0)


class ToolMetricsPerimeter(ToolMetricsMixin, Base):
    """Network rows of the perimeter report; counters are NULL when the report had none."""

    __tablename__ = "tool_metrics_perimeter"

    total_inbound = Column(Integer, nullable=True)
    total_blocked = Column(Integer, nullable=True)
    delivered = Column(Integer, nullable=True)


class ToolMetricsXdr(ToolMetricsMixin, Base):
    __tablename__ = "tool_metrics_xdr"

    # Raw event count; volumes run into the billions.
    events = Column(BigInteger, nullable=False, default=0)
    detections = Column(Integer, nullable=False, default=0)
    triaged_events = Column(Integer, nullable=False, default=0)
    investigations = Column(Integer, nullable=False, default=0)
    incidents = Column(Integer, nullable=False, default=0)
