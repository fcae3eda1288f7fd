"""SecurityScorecard exports: full issue list, Field,Value summary report and the PDF placeholder."""

import logging

from sqlalchemy.orm import Session

from rampart.models.base import utcnow
from rampart.models.scorecard import ScorecardIssueDetail, ScorecardRating
from rampart.schemas.records import ScorecardIssueRecord, ScorecardRatingRecord
from rampart.services.csv_tokenizer import decode_text, parse_row, split_records
from rampart.services.errors import MalformedInput, RowMappingError
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import (
    ErrorSample,
    FormatProcessor,
    MapContext,
    MappedRow,
    ProcessOutcome,
    RowMapper,
)
from rampart.services.parsing import parse_bool, parse_date, parse_int, parse_number
from rampart.services.store import RecordStore

logger = logging.getLogger(__name__)


class ScorecardIssueMapper(RowMapper):
    """
    Full issue export. Header names drift between exports, so every field has
    synonyms plus the column position of the standard export layout. Quoted fields
    often span lines (request chains, headers).
    """

    profile = "scorecard-issue-detail-csv"
    model = ScorecardIssueDetail
    key_column = "issue_id"

    FIELDS = (
        FieldSpec("issue_id", ("issue id", "id"), fallback=0),
        FieldSpec("factor_name", ("factor name", "factor", "category"), fallback=1),
        FieldSpec("issue_type_title", ("issue type title", "title", "issue title"), fallback=2),
        FieldSpec("issue_type_code", ("issue type code", "code"), fallback=3),
        FieldSpec("severity", ("severity", "issue type severity"), fallback=4),
        FieldSpec("recommendation", ("issue recommendation", "recommendation"), fallback=5),
        FieldSpec("first_seen", ("first seen",), fallback=6),
        FieldSpec("last_seen", ("last seen",), fallback=7),
        FieldSpec("ip_addresses", ("ip addresses", "ip address", "ip"), fallback=8),
        FieldSpec("hostname", ("hostname",), fallback=9),
        FieldSpec("subdomain", ("subdomain",), fallback=10),
        FieldSpec("target", ("target", "url"), fallback=11),
        FieldSpec("ports", ("ports", "port"), fallback=12),
        FieldSpec("status", ("status", "issue status"), fallback=13),
        FieldSpec("cve_id", ("cve id", "cve"), fallback=14),
        FieldSpec("description", ("description", "issue description"), fallback=15),
        FieldSpec("time_since_published", ("time since published",), fallback=16),
        FieldSpec("time_open_since_published", ("time open since published",), fallback=17),
        FieldSpec("cookie_name", ("cookie name",), fallback=18),
        FieldSpec("data", ("data",), fallback=19),
        FieldSpec("common_name", ("common name",), fallback=20),
        FieldSpec("key_length", ("key length",), fallback=21),
        FieldSpec("using_rc4", ("using rc4",), fallback=22),
        FieldSpec("issuer_organization_name", ("issuer organization name",), fallback=23),
        FieldSpec("provider", ("provider",), fallback=24),
        FieldSpec("detected_service", ("detected service",), fallback=25),
        FieldSpec("product", ("product",), fallback=26),
        FieldSpec("version", ("version",), fallback=27),
        FieldSpec("platform", ("platform",), fallback=28),
        FieldSpec("browser", ("browser",), fallback=29),
        FieldSpec("destination_ips", ("destination ips", "destination ip"), fallback=30),
        FieldSpec("malware_family", ("malware family",), fallback=31),
        FieldSpec("malware_type", ("malware type",), fallback=32),
        FieldSpec("detection_method", ("detection method",), fallback=33),
        FieldSpec("label", ("label",), fallback=34),
        FieldSpec("initial_url", ("initial url",), fallback=35),
        FieldSpec("final_url", ("final url",), fallback=36),
        FieldSpec("request_chain", ("request chain",), fallback=37),
        FieldSpec("headers", ("headers",), fallback=38),
        FieldSpec("analysis", ("analysis",), fallback=39),
        FieldSpec("percent_similar_companies", ("percent similar companies",), fallback=40),
        FieldSpec("average_findings", ("average findings",), fallback=41),
        FieldSpec("score_impact", ("issue type score impact", "score impact", "impact score"), fallback=42),
    )

    MEANINGFUL_FIELDS = (
        "severity",
        "status",
        "last_seen",
        "score_impact",
        "description",
        "recommendation",
        "target",
        "ports",
    )

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        issue_id = row.get("issue_id")
        if not issue_id:
            raise RowMappingError("missing issue id")

        text = {name: row.get_or_none(name) for name in (
            "recommendation", "ip_addresses", "hostname", "subdomain", "target", "ports",
            "cve_id", "description", "time_since_published", "time_open_since_published",
            "cookie_name", "data", "common_name", "key_length", "issuer_organization_name",
            "provider", "detected_service", "product", "version", "platform", "browser",
            "destination_ips", "malware_family", "malware_type", "detection_method", "label",
            "initial_url", "final_url", "request_chain", "headers", "analysis",
        )}
        record = ScorecardIssueRecord(
            factor_name=row.get("factor_name"),
            issue_type_title=row.get("issue_type_title"),
            issue_type_code=row.get("issue_type_code"),
            severity=self.severity(row.get("severity")),
            first_seen=parse_date(row.get("first_seen")),
            last_seen=parse_date(row.get("last_seen")),
            status=row.get("status").lower() or "active",
            using_rc4=parse_bool(row.get("using_rc4")),
            percent_similar_companies=parse_number(row.get("percent_similar_companies")),
            average_findings=parse_number(row.get("average_findings")),
            score_impact=parse_number(row.get("score_impact"), 0.0),
            report_date=context.report_date,
            **text,
        )
        return MappedRow(key=issue_id, record=record)


# Summary report label -> (record field, kind)
_SUMMARY_FIELDS: dict[str, tuple[str, str]] = {
    "company": ("company", "text"),
    "generated by": ("generated_by", "text"),
    "threat indicators score": ("threat_indicators_score", "float"),
    "network security score": ("network_security_score", "float"),
    "dns health score": ("dns_health_score", "float"),
    "patching cadence score": ("patching_cadence_score", "float"),
    "endpoint security score": ("endpoint_security_score", "float"),
    "ip reputation score": ("ip_reputation_score", "float"),
    "application security score": ("application_security_score", "float"),
    "cubit score": ("cubit_score", "float"),
    "hacker chatter score": ("hacker_chatter_score", "float"),
    "information leak score": ("information_leak_score", "float"),
    "social engineering score": ("social_engineering_score", "float"),
    "industry": ("industry", "text"),
    "company website": ("company_website", "text"),
    "findings on open ports": ("findings_on_open_ports", "int"),
    "site vulnerabilities": ("site_vulnerabilities", "int"),
    "malware discovered": ("malware_discovered", "int"),
    "leaked information": ("leaked_information", "int"),
    "number of ip address scanned": ("ip_addresses_scanned", "int"),
    "number of domain names scanned": ("domain_names_scanned", "int"),
}

CATEGORY_SCORE_FIELDS: tuple[str, ...] = tuple(
    name for name, _ in _SUMMARY_FIELDS.values() if name.endswith("_score")
)


def letter_grade(score: float) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def overall_score(values: dict) -> float:
    """Plain average of the category scores present in the report (0 when none are)."""
    scores = [values[name] for name in CATEGORY_SCORE_FIELDS if values.get(name) is not None]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


class ScorecardSummaryProcessor(FormatProcessor):
    """
    Field,Value report collapsed into one ScorecardRating per report date.
    Unknown labels (including the 'Field,Value' header) are ignored.
    """

    profile = "scorecard-summary-csv"

    def parse(self, text: str) -> ScorecardRatingRecord:
        records = split_records(text, "lines")
        if len(records) < 2:
            raise MalformedInput(
                "Scorecard CSV file is empty: expected Field,Value rows.",
                empty=True,
            )
        values: dict = {}
        for record in records:
            parts = parse_row(record)
            if len(parts) < 2:
                continue
            label = " ".join(parts[0].lower().split())
            spec = _SUMMARY_FIELDS.get(label)
            if spec is None:
                continue
            name, kind = spec
            raw = parts[1]
            if kind == "float":
                values[name] = parse_number(raw)
            elif kind == "int":
                values[name] = parse_int(raw)
            elif raw:
                values[name] = raw
        if not values:
            raise MalformedInput("Unable to parse scorecard summary: no recognized Field,Value rows")

        values["overall_score"] = overall_score(values)
        values["letter_grade"] = letter_grade(values["overall_score"])
        return ScorecardRatingRecord(**values)

    def process(self, session: Session, content: bytes, context: MapContext) -> ProcessOutcome:
        rating = self.parse(decode_text(content))
        store = RecordStore(session, ScorecardRating, "report_date")
        values = rating.model_dump()
        try:
            _, created = store.upsert(context.report_date, {**values, "updated_at": utcnow()}, values)
            store.commit()
        except Exception:
            store.rollback()
            raise
        logger.info(
            "Scorecard summary for %s: overall %.1f (%s)",
            context.report_date.date(),
            rating.overall_score,
            rating.letter_grade,
        )
        outcome = ProcessOutcome(total_rows=1, errors=ErrorSample(context.error_sample_size))
        if created:
            outcome.created = 1
        else:
            outcome.updated = 1
        return outcome


class ScorecardPdfProcessor(FormatProcessor):
    """PDF reports are accepted and logged but not parsed; scores come from the summary CSV."""

    profile = "scorecard-pdf-placeholder"

    def process(self, session: Session, content: bytes, context: MapContext) -> ProcessOutcome:
        if not content.startswith(b"%PDF"):
            raise MalformedInput("Unable to parse file content: not a PDF document")
        logger.warning(
            "Scorecard PDF for %s accepted without parsing (%s bytes)",
            context.report_date.date(),
            len(content),
        )
        return ProcessOutcome(errors=ErrorSample(context.error_sample_size))
