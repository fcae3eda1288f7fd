"""AWS Security Hub control findings."""

from rampart.models.cloud_finding import CloudFinding
from rampart.schemas.records import CloudFindingRecord, IssueStatus
from rampart.services.errors import RowMappingError
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import MapContext, MappedRow, RowMapper
from rampart.services.parsing import parse_date, parse_int


def control_status_to_issue_status(control_status: str) -> IssueStatus:
    """A passing control is resolved; anything else stays open."""
    if control_status.strip().upper() == "PASSED":
        return "RESOLVED"
    return "OPEN"


class CloudFindingMapper(RowMapper):
    """
    Standard column order: ID, Title, Control Status, Severity, Failed checks,
    Unknown checks, Not available checks, Passed checks, Related requirements,
    Custom parameters. The control id is the key.
    """

    profile = "cloud-findings-csv"
    model = CloudFinding
    key_column = "control_id"

    FIELDS = (
        FieldSpec("control_id", ("id", "control id", "controlid"), fallback=0),
        FieldSpec("title", ("title", "control title", "rule title"), fallback=1),
        FieldSpec("control_status", ("control status", "compliance status"), fallback=2),
        FieldSpec("severity", ("severity", "risk level", "priority"), fallback=3),
        FieldSpec("failed_checks", ("failed checks", "failed", "failures"), fallback=4),
        FieldSpec("unknown_checks", ("unknown checks", "unknown"), fallback=5),
        FieldSpec("not_available_checks", ("not available checks", "not available", "n a checks"), fallback=6),
        FieldSpec("passed_checks", ("passed checks", "passed", "success"), fallback=7),
        FieldSpec("related_requirements", ("related requirements", "compliance requirements", "requirements"), fallback=8),
        FieldSpec("custom_parameters", ("custom parameters", "parameters", "support status"), fallback=9),
        FieldSpec("description", ("description", "details", "summary")),
        FieldSpec("found_at", ("first observed at", "created at", "updated at")),
    )

    MEANINGFUL_FIELDS = (
        "control_status",
        "severity",
        "failed_checks",
        "unknown_checks",
        "not_available_checks",
        "passed_checks",
        "status",
        "custom_parameters",
    )

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        control_id = row.get("control_id")
        if not control_id:
            raise RowMappingError("missing control id")
        control_status = row.get("control_status") or "Unknown"

        record = CloudFindingRecord(
            title=row.get("title"),
            control_status=control_status,
            severity=self.severity(row.get("severity")),
            failed_checks=parse_int(row.get("failed_checks"), 0),
            unknown_checks=parse_int(row.get("unknown_checks"), 0),
            not_available_checks=parse_int(row.get("not_available_checks"), 0),
            passed_checks=parse_int(row.get("passed_checks"), 0),
            related_requirements=row.get_or_none("related_requirements"),
            custom_parameters=row.get_or_none("custom_parameters") or "UNKNOWN",
            status=control_status_to_issue_status(control_status),
            description=row.get_or_none("description"),
            found_at=parse_date(row.get("found_at")),
            raw=row.as_raw(),
            report_date=context.report_date,
        )
        return MappedRow(key=control_id, record=record)
