"""ORM model for the threat advisory tracker."""

from sqlalchemy import Boolean, Column, String, Text

from rampart.models.base import Base, SourceRecordMixin


class ThreatAdvisory(SourceRecordMixin, Base):
    __tablename__ = "threat_advisories"

    id = Column(String(128), primary_key=True)
    name = Column(Text, nullable=False)
    severity = Column(String(16), nullable=False)
    internal_severity = Column(String(16), nullable=True)
    # Severity cells as exported ("P1 - Critical", "Sev 2"); the columns above hold the normalized level.
    severity_text = Column(String(64), nullable=True)
    internal_severity_text = Column(String(64), nullable=True)
    impacted = Column(Boolean, nullable=False, default=False)
    source = Column(String(255), nullable=True)
    # Kept as exported; the tracker mixes date formats with free text ("TBD").
    advisory_released_date = Column(String(64), nullable=True)
    notified_date = Column(String(64), nullable=True)
    remarks = Column(Text, nullable=True)
    eta_for_fix = Column(String(255), nullable=True)
