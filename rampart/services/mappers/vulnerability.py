"""Vulnerability scanner exports (Tenable and the generic Asset/BU/CVE layout)."""

from rampart.models.vulnerability import Vulnerability
from rampart.schemas.records import VulnerabilityRecord
from rampart.services.errors import RowMappingError
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import MapContext, MappedRow, RowMapper
from rampart.services.parsing import normalize_status, parse_date, parse_number


class VulnerabilityMapper(RowMapper):
    profile = "vulnerability-csv"
    model = Vulnerability
    key_prefix = "vuln"
    tracks_occurrences = True

    FIELDS = (
        FieldSpec("asset_name", ("asset", "asset name", "dns name", "hostname", "host", "netbios name")),
        FieldSpec("ip_address", ("ip address", "ip", "host ip")),
        FieldSpec("port", ("port",)),
        FieldSpec("business_unit", ("bu", "business unit", "repository")),
        FieldSpec("cve_id", ("cve", "cve id", "cves")),
        FieldSpec("plugin_id", ("plugin", "plugin id")),
        FieldSpec("plugin_name", ("plugin name", "name", "title")),
        FieldSpec("severity", ("severity", "risk", "risk factor")),
        FieldSpec("cvss_score", ("cvss v3 base score", "cvss v3 score", "cvss score", "cvss", "cvss v2 base score")),
        FieldSpec("status", ("status", "state", "vuln state")),
        FieldSpec("sla_date", ("sla date", "due date")),
        FieldSpec("discovered_at", ("discovered", "first discovered", "first seen", "discovered at")),
        FieldSpec("last_observed_at", ("last observed", "last seen")),
        FieldSpec("description", ("description", "synopsis")),
        FieldSpec("solution", ("solution", "remediation")),
    )

    MEANINGFUL_FIELDS = (
        "severity",
        "status",
        "cvss_score",
        "sla_date",
        "description",
        "solution",
        "plugin_name",
    )

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        asset_name = row.get("asset_name")
        ip_address = row.get_or_none("ip_address")
        if not asset_name and not ip_address:
            raise RowMappingError("missing asset name and IP address")
        cve_id = row.get_or_none("cve_id")
        plugin_id = row.get_or_none("plugin_id")
        if not cve_id and not plugin_id:
            raise RowMappingError("missing CVE and plugin id")

        discovered_at = parse_date(row.get("discovered_at"))
        record = VulnerabilityRecord(
            asset_name=asset_name or ip_address,
            ip_address=ip_address,
            port=row.get_or_none("port"),
            business_unit=row.get("business_unit") or "Unknown",
            cve_id=cve_id,
            plugin_id=plugin_id,
            plugin_name=row.get_or_none("plugin_name"),
            severity=self.severity(row.get("severity")),
            cvss_score=parse_number(row.get("cvss_score")),
            status=normalize_status(row.get("status")),
            sla_date=parse_date(row.get("sla_date")),
            discovered_at=discovered_at,
            last_observed_at=parse_date(row.get("last_observed_at")),
            description=row.get_or_none("description"),
            solution=row.get_or_none("solution"),
            report_date=context.report_date,
        )
        key = self.make_key(
            (record.asset_name, cve_id or plugin_id, record.business_unit),
            discovered_at or context.report_date,
            context,
        )
        return MappedRow(key=key, record=record)
