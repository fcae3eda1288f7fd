"""Phishing tickets exported from the Jira phishing queue."""

from rampart.models.ticket import PhishingTicket
from rampart.schemas.records import PhishingTicketRecord
from rampart.services.errors import RowMappingError
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import MapContext, MappedRow, RowMapper, sanitize_id
from rampart.services.parsing import day_bucket, normalize_status, parse_date, parse_number


class PhishingMapper(RowMapper):
    profile = "phishing-ticket-csv"
    model = PhishingTicket
    key_prefix = "phishing"

    FIELDS = (
        FieldSpec("issue_key", ("issue key", "key", "issue id", "issue_id")),
        FieldSpec("summary", ("summary", "description")),
        FieldSpec("status", ("status",)),
        FieldSpec("priority", ("priority",)),
        FieldSpec("business_unit", ("bu", "business unit", "custom field business unit")),
        FieldSpec("reporter", ("reporter",)),
        FieldSpec("assignee", ("assignee",)),
        FieldSpec("time_to_resolution", ("time to resolution", "resolution time hours")),
        FieldSpec("reported_at", ("reported", "created", "reported at")),
        FieldSpec("resolved_at", ("resolved", "resolved at")),
    )

    MEANINGFUL_FIELDS = (
        "summary",
        "status",
        "priority",
        "business_unit",
        "assignee",
        "time_to_resolution_hours",
        "resolved_at",
    )

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        issue_key = row.get("issue_key")
        summary = row.get_or_none("summary")
        if not issue_key and not summary:
            raise RowMappingError("missing issue key and summary")
        reported_at = parse_date(row.get("reported_at"))

        record = PhishingTicketRecord(
            issue_key=issue_key or None,
            summary=summary,
            status=normalize_status(row.get("status")),
            priority=self.severity(row.get("priority")),
            business_unit=row.get("business_unit") or "Unknown",
            reporter=row.get_or_none("reporter"),
            assignee=row.get_or_none("assignee"),
            time_to_resolution_hours=parse_number(row.get("time_to_resolution")),
            reported_at=reported_at,
            resolved_at=parse_date(row.get("resolved_at")),
            report_date=context.report_date,
        )
        if issue_key:
            key = sanitize_id(issue_key)
        else:
            key = self.make_key(
                (summary, record.reporter, day_bucket(reported_at)),
                reported_at or context.report_date,
                context,
            )
        return MappedRow(key=key, record=record)
