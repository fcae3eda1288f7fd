"""Falcon EDR detection exports."""

import re

from rampart.models.detection import FalconDetection
from rampart.schemas.records import FalconDetectionRecord
from rampart.services.errors import RowMappingError
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import MapContext, MappedRow, RowMapper, sanitize_id
from rampart.services.parsing import normalize_status, parse_date, parse_false_positive

# Labels inside the free-text DetectDetails column, one "Label: value" per line.
_DETAIL_PATTERNS = {
    "detect_description": re.compile(r"Description: ([^\n]+)"),
    "process_name": re.compile(r"Process: ([^\n]+)"),
    "command_line": re.compile(r"Command Line: ([^\n]+)"),
    "ioc_type": re.compile(r"IOC Type: ([^\n]+)"),
    "ioc_value": re.compile(r"IOC Value: ([^\n]+)"),
    "policy_name": re.compile(r"Policy: ([^\n]+)"),
    "policy_type": re.compile(r"Policy Type: ([^\n]+)"),
}

# Characters of the pattern description that take part in the derived key.
_PATTERN_KEY_CHARS = 50


def extract_detail(detect_details: str | None, name: str) -> str | None:
    """Pull one labelled value out of DetectDetails; None when the label is absent."""
    if not detect_details:
        return None
    match = _DETAIL_PATTERNS[name].search(detect_details)
    return match.group(1).strip() if match else None


class FalconMapper(RowMapper):
    """
    Keyed by the export's CompositeId when present. Older exports without it
    get a derived key over detect date, hostname, pattern description and
    technique. The full row is kept in raw.
    """

    profile = "edr-falcon-csv"
    model = FalconDetection
    key_prefix = "falcon"
    tracks_occurrences = True

    FIELDS = (
        FieldSpec("detected_at", ("detectdate utc readable", "detect date", "timestamp", "detected"), fallback=1),
        FieldSpec("last_update_at", ("lastupdate utc readable", "last update"), fallback=3),
        FieldSpec("company", ("company", "cid"), fallback=4),
        FieldSpec("severity", ("severityname", "severity"), fallback=5),
        FieldSpec("objective", ("objective",), fallback=6),
        FieldSpec("tactic", ("tactic",), fallback=7),
        FieldSpec("technique", ("technique",), fallback=8),
        FieldSpec("detect_name", ("name", "detect name"), fallback=9),
        FieldSpec("pattern_description", ("patterndispositiondescription", "pattern disposition description"), fallback=10),
        FieldSpec("status", ("status",), fallback=11),
        FieldSpec("resolution", ("resolution",), fallback=12),
        FieldSpec("hostname", ("hostname", "computername", "computer name", "host"), fallback=13),
        FieldSpec("agent_id", ("aid", "agent id"), fallback=14),
        FieldSpec("username", ("username", "user name", "user"), fallback=15),
        FieldSpec("product_type", ("producttype", "product type"), fallback=16),
        FieldSpec("filename", ("filename", "file name"), fallback=19),
        FieldSpec("detect_details", ("detectdetails", "detect details"), fallback=20),
        FieldSpec("md5", ("md5string", "md5"), fallback=21),
        FieldSpec("sha256", ("sha256string", "sha256"), fallback=22),
        FieldSpec("composite_id", ("compositeid", "composite id", "detection id", "event id"), fallback=23),
        FieldSpec("falcon_host_link", ("falconhostlink", "falcon host link"), fallback=24),
        FieldSpec("false_positive", ("false positive", "fp", "disposition")),
        # Newer exports split DetectDetails into dedicated columns.
        FieldSpec("detect_description", ("detect description", "description")),
        FieldSpec("process_name", ("process name", "processname")),
        FieldSpec("command_line", ("command line", "commandline")),
        FieldSpec("ioc_type", ("ioc type", "ioctype")),
        FieldSpec("ioc_value", ("ioc value", "iocvalue")),
        FieldSpec("policy_name", ("policy name", "policyname")),
        FieldSpec("policy_type", ("policy type", "policytype")),
    )

    MEANINGFUL_FIELDS = (
        "severity",
        "status",
        "resolution",
        "tactic",
        "technique",
        "pattern_description",
        "detect_description",
        "false_positive",
    )

    def _detail(self, row: BoundRow, name: str) -> str | None:
        return row.get_or_none(name) or extract_detail(row.get("detect_details"), name)

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        composite_id = row.get("composite_id")
        detected_at = parse_date(row.get("detected_at"))
        hostname = row.get_or_none("hostname")
        if not composite_id and detected_at is None and not hostname:
            raise RowMappingError("missing CompositeId, detect date and hostname")

        record = FalconDetectionRecord(
            detected_at=detected_at,
            last_update_at=parse_date(row.get("last_update_at")),
            company=row.get_or_none("company"),
            severity=self.severity(row.get("severity")),
            objective=row.get_or_none("objective"),
            tactic=row.get_or_none("tactic"),
            technique=row.get_or_none("technique"),
            detect_name=row.get_or_none("detect_name"),
            pattern_description=row.get_or_none("pattern_description"),
            status=normalize_status(row.get("status")),
            resolution=row.get_or_none("resolution"),
            hostname=hostname,
            agent_id=row.get_or_none("agent_id"),
            username=row.get_or_none("username"),
            product_type=row.get_or_none("product_type"),
            filename=row.get_or_none("filename"),
            detect_description=self._detail(row, "detect_description"),
            process_name=self._detail(row, "process_name"),
            command_line=self._detail(row, "command_line"),
            ioc_type=self._detail(row, "ioc_type"),
            ioc_value=self._detail(row, "ioc_value"),
            policy_name=self._detail(row, "policy_name"),
            policy_type=self._detail(row, "policy_type"),
            md5=row.get_or_none("md5"),
            sha256=row.get_or_none("sha256"),
            falcon_host_link=row.get_or_none("falcon_host_link"),
            false_positive=parse_false_positive(row.get("false_positive")),
            raw=row.as_raw(),
            report_date=context.report_date,
        )

        if composite_id:
            key = sanitize_id(composite_id)
        else:
            key = self.make_key(
                (
                    detected_at,
                    hostname,
                    (record.pattern_description or "")[:_PATTERN_KEY_CHARS],
                    record.technique,
                ),
                detected_at or context.report_date,
                context,
            )
        return MappedRow(key=key, record=record)
