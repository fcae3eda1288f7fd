"""Secureworks XDR alert exports."""

from rampart.models.detection import SecureworksAlert
from rampart.schemas.records import SecureworksAlertRecord
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import MapContext, MappedRow, RowMapper
from rampart.services.parsing import day_bucket, normalize_status, parse_date, parse_int, parse_number

DEFAULT_TITLE = "Unknown Alert"


class SecureworksMapper(RowMapper):
    """
    Column order of the standard alert export:
    Created At, Title, Severity, Threat Score, Detector, Sensor Type, Domain,
    Combined Username, Source IP, Destination IP, Hostname, Investigations,
    Confidence, MITRE ATT&CK, Status, Status Reason, Tenant, Occurrence Count,
    Description.
    """

    profile = "edr-secureworks-csv"
    model = SecureworksAlert
    key_column = "alert_id"
    key_prefix = "secureworks"
    tracks_occurrences = True

    FIELDS = (
        FieldSpec("created_at", ("created at", "created", "detected at"), fallback=0),
        FieldSpec("title", ("title", "alert title"), fallback=1),
        FieldSpec("severity", ("severity",), fallback=2),
        FieldSpec("threat_score", ("threat score",), fallback=3),
        FieldSpec("detector", ("detector",), fallback=4),
        FieldSpec("sensor_type", ("sensor type",), fallback=5),
        FieldSpec("domain", ("domain",), fallback=6),
        FieldSpec("combined_username", ("combined username", "username"), fallback=7),
        FieldSpec("source_ip", ("source ip",), fallback=8),
        FieldSpec("destination_ip", ("destination ip",), fallback=9),
        FieldSpec("hostname", ("hostname", "host"), fallback=10),
        FieldSpec("investigations", ("investigations",), fallback=11),
        FieldSpec("confidence", ("confidence",), fallback=12),
        FieldSpec("mitre_attack", ("mitre att ck", "mitre attack", "mitre"), fallback=13),
        FieldSpec("status", ("status",), fallback=14),
        FieldSpec("status_reason", ("status reason",), fallback=15),
        FieldSpec("tenant_id", ("tenant", "tenant id"), fallback=16),
        FieldSpec("occurrence_count", ("occurrence count",), fallback=17),
        FieldSpec("description", ("description",), fallback=18),
    )

    MEANINGFUL_FIELDS = (
        "severity",
        "threat_score",
        "status",
        "status_reason",
        "confidence",
        "mitre_attack",
        "investigations",
        "description",
    )

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        # An unparseable Created At falls back to the report date, never "now",
        # so the derived key stays stable across re-imports.
        detected_at = parse_date(row.get("created_at")) or context.report_date
        title = row.get("title").replace('"', "").strip() or DEFAULT_TITLE
        tenant_id = row.get("tenant_id") or context.default_tenant

        record = SecureworksAlertRecord(
            title=title,
            severity=self.severity(row.get("severity")),
            threat_score=parse_number(row.get("threat_score")),
            detector=row.get_or_none("detector"),
            sensor_type=row.get_or_none("sensor_type"),
            domain=row.get_or_none("domain"),
            combined_username=row.get_or_none("combined_username"),
            source_ip=row.get_or_none("source_ip"),
            destination_ip=row.get_or_none("destination_ip"),
            hostname=row.get_or_none("hostname"),
            investigations=row.get_or_none("investigations"),
            confidence=parse_number(row.get("confidence")),
            mitre_attack=row.get_or_none("mitre_attack"),
            status=normalize_status(row.get("status")),
            status_reason=row.get_or_none("status_reason"),
            tenant_id=tenant_id,
            description=row.get_or_none("description") or title,
            detected_at=detected_at,
            vendor_occurrence_count=parse_int(row.get("occurrence_count")),
            report_date=context.report_date,
        )
        key = self.make_key(
            (
                title,
                day_bucket(detected_at),
                record.hostname,
                record.source_ip,
                record.detector,
                tenant_id,
            ),
            detected_at,
            context,
        )
        return MappedRow(key=key, record=record)
