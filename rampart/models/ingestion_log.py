"""ORM model for the per-upload audit log."""

from sqlalchemy import Column, DateTime, Integer, String, Text

from rampart.models.base import Base, TimestampMixin, utcnow

STATUS_PENDING = "PENDING"
STATUS_SUCCESS = "SUCCESS"
STATUS_FAILED = "FAILED"
STATUS_PARTIAL = "PARTIAL"
INGESTION_STATUSES = (STATUS_PENDING, STATUS_SUCCESS, STATUS_FAILED, STATUS_PARTIAL)


class IngestionLog(TimestampMixin, Base):
    """
    One row per upload attempt.

    Created PENDING before any row is read and finalized exactly once with the
    processed row count and, on failure or row errors, a bounded error summary.
    """

    __tablename__ = "ingestion_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(1024), nullable=False)
    original_name = Column(String(1024), nullable=False)
    file_type = Column(String(32), nullable=False, default="unknown")
    source = Column(String(64), nullable=False, default="unknown", index=True)
    profile = Column(String(64), nullable=True)
    checksum = Column(String(64), nullable=True, index=True)
    rows_processed = Column(Integer, nullable=False, default=0)
    report_date = Column(DateTime(timezone=True), nullable=True)
    imported_date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    status = Column(String(16), nullable=False, default=STATUS_PENDING, index=True)
    error_log = Column(Text, nullable=True)
