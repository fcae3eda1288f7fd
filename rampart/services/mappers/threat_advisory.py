"""Threat advisory tracker exports."""

from rampart.models.threat_advisory import ThreatAdvisory
from rampart.schemas.records import ThreatAdvisoryRecord
from rampart.services.errors import RowMappingError
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import MapContext, MappedRow, RowMapper
from rampart.services.parsing import day_bucket, normalize_severity, parse_bool


class ThreatAdvisoryMapper(RowMapper):
    """
    Columns: advisory name, severity, internal severity, impacted (Yes/No),
    source, released date, notified date, remarks, ETA for fix.

    One record per advisory per report day: the same advisory in next week's
    tracker is a new record so the tracker history is preserved.
    """

    profile = "threat-advisory-csv"
    model = ThreatAdvisory
    key_prefix = "threat-advisory"

    FIELDS = (
        FieldSpec("name", ("threat advisory name", "advisory name", "advisory", "name"), fallback=0),
        FieldSpec("severity", ("severity",), fallback=1),
        FieldSpec("internal_severity", ("netgear severity", "internal severity"), fallback=2),
        FieldSpec("impacted", ("impacted",), fallback=3),
        FieldSpec("source", ("source",), fallback=4),
        FieldSpec("advisory_released_date", ("advisory released date", "released date", "release date"), fallback=5),
        FieldSpec("notified_date", ("notified date",), fallback=6),
        FieldSpec("remarks", ("remarks", "notes"), fallback=7),
        FieldSpec("eta_for_fix", ("eta for fix", "eta"), fallback=8),
    )

    MEANINGFUL_FIELDS = (
        "severity",
        "internal_severity",
        "severity_text",
        "internal_severity_text",
        "impacted",
        "notified_date",
        "remarks",
        "eta_for_fix",
    )

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        name = row.get("name")
        if not name:
            raise RowMappingError("missing advisory name")
        internal = row.get("internal_severity")

        record = ThreatAdvisoryRecord(
            name=name,
            severity=self.severity(row.get("severity")),
            internal_severity=normalize_severity(internal, self.severity(None)) if internal else None,
            severity_text=row.get_or_none("severity"),
            internal_severity_text=internal or None,
            impacted=parse_bool(row.get("impacted"), False),
            source=row.get_or_none("source"),
            advisory_released_date=row.get_or_none("advisory_released_date"),
            notified_date=row.get_or_none("notified_date"),
            remarks=row.get_or_none("remarks"),
            eta_for_fix=row.get_or_none("eta_for_fix"),
            report_date=context.report_date,
        )
        key = self.make_key(
            (name, record.source, record.advisory_released_date, day_bucket(context.report_date)),
            context.report_date,
            context,
        )
        return MappedRow(key=key, record=record)
