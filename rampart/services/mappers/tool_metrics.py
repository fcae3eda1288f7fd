"""Monthly tool metrics reports: perimeter protection (email + network) and Secureworks XDR counters."""

import logging
import re
from datetime import datetime

from sqlalchemy.orm import Session

from rampart.models.base import Base, utcnow
from rampart.models.tool_metrics import ToolMetricsEmail, ToolMetricsPerimeter, ToolMetricsXdr
from rampart.schemas.records import (
    EmailMetricsRecord,
    PerimeterMetricsRecord,
    ToolMetricsPeriod,
    XdrMetricsRecord,
)
from rampart.services.csv_tokenizer import decode_text, parse_row, split_records
from rampart.services.errors import MalformedInput
from rampart.services.headers import normalize_header
from rampart.services.mappers.base import ErrorSample, FormatProcessor, MapContext, ProcessOutcome
from rampart.services.parsing import parse_number
from rampart.services.store import RecordStore

logger = logging.getLogger(__name__)

_QUARTER_IN_NAME = re.compile(r"Quarter(0[1-4])_", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"[0-9][0-9,. ]*")


def period_quarter(filename: str, period_month: datetime) -> str:
    """'Q3 2025': the QuarterXX in the filename when present, else the calendar quarter of the month."""
    m = _QUARTER_IN_NAME.search(filename or "")
    quarter = int(m.group(1)) if m else (period_month.month - 1) // 3 + 1
    return f"Q{quarter} {period_month.year}"


def parse_count(value: str | None) -> float:
    """First number in a cell, ignoring separators and trailing units ('1,234 events' -> 1234)."""
    m = _LEADING_NUMBER.search(value or "")
    if not m:
        return 0.0
    return parse_number(m.group(0), 0.0)


def read_table(text: str) -> tuple[dict[str, int], list[list[str]]]:
    """First position of each (normalized) header name, and the data rows of a small report CSV."""
    records = split_records(text, "lines")
    if len(records) < 2:
        raise MalformedInput("CSV must have header and at least one row", empty=True)
    positions: dict[str, int] = {}
    for i, name in enumerate(parse_row(records[0])):
        positions.setdefault(normalize_header(name), i)
    return positions, [parse_row(record) for record in records[1:]]


def _cell(row: list[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


class MonthlyMetricsProcessor(FormatProcessor):
    """Base for reports that collapse into one row per calendar month, upserted by period_month."""

    def period(self, context: MapContext) -> dict:
        month = context.report_date.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return {
            "period_month": month,
            "period_quarter": period_quarter(context.filename, month),
            "report_label": month.strftime("%m%Y"),
            "raw": {"filename": context.filename},
        }

    def store(self, session: Session, model: type[Base], record: ToolMetricsPeriod, outcome: ProcessOutcome) -> None:
        values = record.model_dump()
        _, created = RecordStore(session, model, "period_month").upsert(
            record.period_month, {**values, "updated_at": utcnow()}, values
        )
        if created:
            outcome.created += 1
        else:
            outcome.updated += 1


class PerimeterMetricsProcessor(MonthlyMetricsProcessor):
    """
    Category,Item,Count rows. Email rows feed the email counters, network rows
    the perimeter counters; anything else is skipped. Counts of repeated items add up.
    """

    profile = "perimeter-metrics-csv"

    def parse(self, text: str, period: dict) -> tuple[EmailMetricsRecord, PerimeterMetricsRecord, int]:
        positions, rows = read_table(text)
        category_at = positions.get("category")
        item_at = positions.get("item")
        count_at = positions.get("count")
        # Some exports drop the first two header names but keep Count third.
        if (category_at is None or item_at is None) and count_at == 2:
            category_at, item_at = 0, 1
        if category_at is None or item_at is None or count_at is None:
            raise MalformedInput("CSV must contain headers: Category, Item, Count")

        email = {"inbound_emails": 0, "blocked_proofpoint": 0, "blocked_ms365": 0, "delivered_emails": 0}
        allowed = blocked = 0
        skipped = 0
        for row in rows:
            category = _cell(row, category_at).lower()
            item = _cell(row, item_at).lower()
            count = int(parse_number(_cell(row, count_at), 0.0))
            if category == "email":
                if "total inbound" in item:
                    email["inbound_emails"] += count
                elif "blocked" in item and "proofpoint" in item:
                    email["blocked_proofpoint"] += count
                elif "blocked" in item and ("o365" in item or "ms365" in item):
                    email["blocked_ms365"] += count
                elif "total delivered" in item:
                    email["delivered_emails"] += count
                else:
                    skipped += 1
            elif category.startswith("network"):
                if "total inbound allowed" in item:
                    allowed += count
                elif "total blocked" in item:
                    blocked += count
                else:
                    skipped += 1
            else:
                skipped += 1

        perimeter = PerimeterMetricsRecord(
            **period,
            total_inbound=(allowed + blocked) or None,
            total_blocked=blocked or None,
            delivered=allowed or None,
        )
        return EmailMetricsRecord(**period, **email), perimeter, skipped

    def process(self, session: Session, content: bytes, context: MapContext) -> ProcessOutcome:
        text = decode_text(content)
        email, perimeter, skipped = self.parse(text, self.period(context))
        outcome = ProcessOutcome(
            total_rows=len(split_records(text, "lines")) - 1,
            skipped=skipped,
            errors=ErrorSample(context.error_sample_size),
        )
        try:
            self.store(session, ToolMetricsEmail, email, outcome)
            self.store(session, ToolMetricsPerimeter, perimeter, outcome)
            session.commit()
        except Exception:
            session.rollback()
            raise
        logger.info(
            "Perimeter metrics for %s (%s): %s inbound emails, %s perimeter blocks",
            email.report_label,
            email.period_quarter,
            email.inbound_emails,
            perimeter.total_blocked,
        )
        return outcome


# Report row name -> record field
_XDR_COUNTERS: dict[str, str] = {
    "events": "events",
    "detections": "detections",
    "triaged events": "triaged_events",
    "investigations": "investigations",
    "incidents": "incidents",
}


class XdrMetricsProcessor(MonthlyMetricsProcessor):
    """Name,Count rows; the five known counters are kept, other names are skipped."""

    profile = "xdr-metrics-csv"

    def parse(self, text: str, period: dict) -> tuple[XdrMetricsRecord, int]:
        positions, rows = read_table(text)
        name_at = positions.get("name")
        count_at = positions.get("count")
        if name_at is None or count_at is None:
            raise MalformedInput("CSV must contain headers: Name,Count")

        counters: dict[str, int] = {}
        skipped = 0
        for row in rows:
            field_name = _XDR_COUNTERS.get(" ".join(_cell(row, name_at).lower().split()))
            if field_name is None:
                skipped += 1
                continue
            # Last row wins when a counter repeats.
            counters[field_name] = round(parse_count(_cell(row, count_at)))
        return XdrMetricsRecord(**period, **counters), skipped

    def process(self, session: Session, content: bytes, context: MapContext) -> ProcessOutcome:
        text = decode_text(content)
        record, skipped = self.parse(text, self.period(context))
        outcome = ProcessOutcome(
            total_rows=len(split_records(text, "lines")) - 1,
            skipped=skipped,
            errors=ErrorSample(context.error_sample_size),
        )
        try:
            self.store(session, ToolMetricsXdr, record, outcome)
            session.commit()
        except Exception:
            session.rollback()
            raise
        logger.info(
            "XDR metrics for %s (%s): %s events, %s incidents",
            record.report_label,
            record.period_quarter,
            record.events,
            record.incidents,
        )
        return outcome
