"""Generic open work items exported from Jira."""

from rampart.models.ticket import Ticket
from rampart.schemas.records import TicketRecord
from rampart.services.errors import RowMappingError
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import MapContext, MappedRow, RowMapper, sanitize_id
from rampart.services.parsing import day_bucket, is_closed_status, normalize_status, parse_date


class TicketMapper(RowMapper):
    """
    Jira "Open Items" export: Issue Type, Issue key, Issue id, Summary, Created,
    Custom field (Risk Accepted), Assignee, Assignee Id, Reporter, Reporter Id,
    Priority, Status, Due date.
    """

    profile = "generic-ticket-csv"
    model = Ticket
    key_prefix = "ticket"

    FIELDS = (
        FieldSpec("issue_type", ("issue type",), fallback=0),
        FieldSpec("issue_key", ("issue key", "key"), fallback=1),
        FieldSpec("issue_id", ("issue id",), fallback=2),
        FieldSpec("summary", ("summary", "title"), fallback=3),
        FieldSpec("created", ("created", "created at"), fallback=4),
        FieldSpec("risk_accepted", ("custom field risk accepted", "risk accepted"), fallback=5),
        FieldSpec("assignee", ("assignee",), fallback=6),
        FieldSpec("reporter", ("reporter",), fallback=8),
        FieldSpec("priority", ("priority",), fallback=10),
        FieldSpec("status", ("status",), fallback=11),
        FieldSpec("due_date", ("due date", "due"), fallback=12),
    )

    MEANINGFUL_FIELDS = (
        "title",
        "status",
        "vendor_status",
        "assignee",
        "priority",
        "due_date",
        "risk_accepted",
    )
    STICKY_FIELDS = ("closed_at",)

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        issue_key = row.get("issue_key")
        summary = row.get("summary")
        if not issue_key and not summary:
            raise RowMappingError("missing issue key and summary")
        vendor_status = row.get("status") or "Open"
        opened_at = parse_date(row.get("created"))

        record = TicketRecord(
            issue_key=issue_key or None,
            issue_id=row.get_or_none("issue_id"),
            issue_type=row.get_or_none("issue_type"),
            title=summary or issue_key,
            description=summary or None,
            assignee=row.get_or_none("assignee"),
            reporter=row.get_or_none("reporter"),
            priority=row.get_or_none("priority"),
            status=normalize_status(vendor_status),
            vendor_status=vendor_status,
            risk_accepted=row.get_or_none("risk_accepted"),
            opened_at=opened_at,
            due_date=parse_date(row.get("due_date")),
            # The export has no resolution timestamp; the report it first shows up closed in is the best bound.
            closed_at=context.report_date if is_closed_status(vendor_status) else None,
            report_date=context.report_date,
        )
        if issue_key:
            key = sanitize_id(issue_key)
        else:
            key = self.make_key(
                (summary, record.reporter, day_bucket(opened_at)),
                opened_at or context.report_date,
                context,
            )
        return MappedRow(key=key, record=record)
