"""ORM model for cloud posture control findings (AWS Security Hub)."""

from sqlalchemy import Column, DateTime, Integer, String, Text

from rampart.models.base import Base, JSONType, SourceRecordMixin


class CloudFinding(SourceRecordMixin, Base):
    """One row per Security Hub control; the control id is the key."""

    __tablename__ = "cloud_findings"

    control_id = Column(String(255), primary_key=True)
    title = Column(String(1024), nullable=False, default="")
    control_status = Column(String(64), nullable=False, default="Unknown")
    severity = Column(String(16), nullable=False, index=True)
    failed_checks = Column(Integer, nullable=False, default=0)
    unknown_checks = Column(Integer, nullable=False, default=0)
    not_available_checks = Column(Integer, nullable=False, default=0)
    passed_checks = Column(Integer, nullable=False, default=0)
    related_requirements = Column(Text, nullable=True)
    custom_parameters = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="OPEN")
    description = Column(Text, nullable=True)
    found_at = Column(DateTime(timezone=True), nullable=True)
    raw = Column(JSONType, nullable=True)
