"""ORM models for EDR/XDR detections (Falcon and Secureworks)."""

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text

from rampart.models.base import Base, JSONType, SourceRecordMixin


class FalconDetection(SourceRecordMixin, Base):
    """
    Falcon detection keyed by the sanitized composite id, or a derived key
    when the export omits it. The full source row is kept in raw.
    """

    __tablename__ = "detection_falcon"

    id = Column(String(255), primary_key=True)
    detected_at = Column(DateTime(timezone=True), nullable=True, index=True)
    last_update_at = Column(DateTime(timezone=True), nullable=True)
    company = Column(String(255), nullable=True)
    severity = Column(String(16), nullable=False, index=True)
    objective = Column(String(255), nullable=True)
    tactic = Column(String(255), nullable=True)
    technique = Column(String(255), nullable=True)
    detect_name = Column(String(1024), nullable=True)
    pattern_description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="OPEN")
    resolution = Column(String(255), nullable=True)
    hostname = Column(String(255), nullable=True, index=True)
    agent_id = Column(String(255), nullable=True)
    username = Column(String(255), nullable=True)
    product_type = Column(String(64), nullable=True)
    filename = Column(String(1024), nullable=True)
    detect_description = Column(Text, nullable=True)
    process_name = Column(String(1024), nullable=True)
    command_line = Column(Text, nullable=True)
    ioc_type = Column(String(255), nullable=True)
    ioc_value = Column(Text, nullable=True)
    policy_name = Column(String(255), nullable=True)
    policy_type = Column(String(255), nullable=True)
    md5 = Column(String(64), nullable=True)
    sha256 = Column(String(128), nullable=True)
    falcon_host_link = Column(Text, nullable=True)
    false_positive = Column(Boolean, nullable=False, default=False)
    occurrence_count = Column(Integer, nullable=False, default=1)
    raw = Column(JSONType, nullable=True)


class SecureworksAlert(SourceRecordMixin, Base):
    """Secureworks alert keyed by a duplicate key over title, day, host, source IP, detector and tenant."""

    __tablename__ = "detection_secureworks"

    alert_id = Column(String(128), primary_key=True)
    title = Column(String(1024), nullable=False)
    severity = Column(String(16), nullable=False, index=True)
    threat_score = Column(Float, nullable=True)
    detector = Column(String(255), nullable=True)
    sensor_type = Column(String(255), nullable=True)
    domain = Column(String(255), nullable=True)
    combined_username = Column(String(255), nullable=True)
    source_ip = Column(String(255), nullable=True)
    destination_ip = Column(String(255), nullable=True)
    hostname = Column(String(255), nullable=True, index=True)
    investigations = Column(Text, nullable=True)
    confidence = Column(Float, nullable=True)
    mitre_attack = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="OPEN", index=True)
    status_reason = Column(Text, nullable=True)
    tenant_id = Column(String(64), nullable=False)
    description = Column(Text, nullable=True)
    detected_at = Column(DateTime(timezone=True), nullable=True, index=True)
    false_positive = Column(Boolean, nullable=False, default=False)
    # Sightings counted by this service; the export's own counter is kept separately.
    occurrence_count = Column(Integer, nullable=False, default=1)
    vendor_occurrence_count = Column(Integer, nullable=True)
