"""ORM model for vulnerability scanner findings (Tenable exports)."""

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from rampart.models.base import Base, SourceRecordMixin


class Vulnerability(SourceRecordMixin, Base):
    """One finding per asset + CVE/plugin + business unit + discovery day."""

    __tablename__ = "vulnerabilities"

    id = Column(String(128), primary_key=True)
    asset_name = Column(String(512), nullable=False, default="Unknown")
    ip_address = Column(String(255), nullable=True)
    port = Column(String(64), nullable=True)
    business_unit = Column(String(255), nullable=False, default="Unknown", index=True)
    cve_id = Column(String(255), nullable=True, index=True)
    plugin_id = Column(String(64), nullable=True)
    plugin_name = Column(String(1024), nullable=True)
    severity = Column(String(16), nullable=False, index=True)
    cvss_score = Column(Float, nullable=True)
    status = Column(String(16), nullable=False, default="OPEN", index=True)
    sla_date = Column(DateTime(timezone=True), nullable=True)
    discovered_at = Column(DateTime(timezone=True), nullable=True)
    last_observed_at = Column(DateTime(timezone=True), nullable=True)
    description = Column(Text, nullable=True)
    solution = Column(Text, nullable=True)
    occurrence_count = Column(Integer, nullable=False, default=1)
