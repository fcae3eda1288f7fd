"""End-to-end ingestion tests: routing, logging, reconciliation and failure handling on SQLite."""

import unittest
from datetime import UTC, datetime
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from db_support import csv_bytes, make_session
from rampart.models import (
    CloudFinding,
    FalconDetection,
    IngestionLog,
    ScorecardRating,
    SecureworksAlert,
    Ticket,
    Vulnerability,
)
from rampart.services.errors import AuthorizationError, MalformedInput, PersistenceError, UnrecognizedFormat
from rampart.services.format_router import route_filename
from rampart.services.ingestion import (
    authorize_upload,
    classify_failure,
    ingest_file,
    record_rejected_upload,
)
from rampart.services.mappers.secureworks import SecureworksMapper

SECUREWORKS_HEADER = (
    "Created At,Title,Severity,Threat Score,Detector,Sensor Type,Domain,Combined Username,"
    "Source IP,Destination IP,Hostname,Investigations,Confidence,MITRE ATT&CK,Status,"
    "Status Reason,Tenant,Occurrence Count,Description"
)
SECUREWORKS_ROW = "2025/08/27 02:29:55 UTC,Test Alert,MEDIUM,5,AV,SENSOR,,user,,,,,0,0.7,,OPEN,,143085,1,desc"

VULN_HEADER = "Asset,IP Address,BU,CVE,Severity,CVSS,Status,Description,Solution,Discovered"


def vuln_row(i: int, severity: str = "High", description: str = "Outdated package") -> str:
    return f"host-{i},10.0.0.{i},IT,CVE-2025-{1000 + i},{severity},7.5,Open,{description},Upgrade,2025-08-20T00:00:00Z"


class IngestionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()

    def tearDown(self) -> None:
        self.db.close()

    def last_log(self) -> IngestionLog:
        return self.db.query(IngestionLog).order_by(IngestionLog.id.desc()).first()


class TestSecureworksConcreteScenario(IngestionTestCase):
    FILENAME = "Secureworks_Alerts_20250827.csv"

    def test_single_row_is_stored(self) -> None:
        result = ingest_file(self.db, self.FILENAME, csv_bytes(SECUREWORKS_HEADER, SECUREWORKS_ROW))
        self.assertEqual(result.status, "SUCCESS")
        self.assertEqual(result.rows_processed, 1)
        self.assertEqual(result.outcome.created, 1)

        alerts = self.db.query(SecureworksAlert).all()
        self.assertEqual(len(alerts), 1)
        alert = alerts[0]
        self.assertEqual(alert.severity, "MEDIUM")
        self.assertEqual(alert.status, "OPEN")
        self.assertEqual(alert.detected_at.replace(tzinfo=UTC), datetime(2025, 8, 27, 2, 29, 55, tzinfo=UTC))
        self.assertEqual(alert.tenant_id, "143085")
        self.assertEqual(alert.occurrence_count, 1)

        log = self.db.get(IngestionLog, result.ingestion_id)
        self.assertEqual(log.status, "SUCCESS")
        self.assertEqual(log.source, "secureworks")
        self.assertEqual(log.profile, "edr-secureworks-csv")
        self.assertEqual(log.rows_processed, 1)
        self.assertEqual(len(log.checksum), 64)
        self.assertIsNone(log.error_log)

    def test_key_stable_across_reimport(self) -> None:
        content = csv_bytes(SECUREWORKS_HEADER, SECUREWORKS_ROW)
        ingest_file(self.db, self.FILENAME, content)
        first_key = self.db.query(SecureworksAlert.alert_id).scalar()
        second = ingest_file(self.db, self.FILENAME, content)
        self.assertEqual(second.outcome.unchanged, 1)
        self.assertEqual(self.db.query(SecureworksAlert).count(), 1)
        alert = self.db.query(SecureworksAlert).one()
        self.assertEqual(alert.alert_id, first_key)
        self.assertEqual(alert.occurrence_count, 2)


class TestIdempotentReimport(IngestionTestCase):
    FILENAME = "Tenable_MONTHLY_20250827.csv"

    def test_reimport_creates_nothing_new(self) -> None:
        content = csv_bytes(VULN_HEADER, *(vuln_row(i) for i in range(1, 6)))
        first = ingest_file(self.db, self.FILENAME, content)
        self.assertEqual(first.outcome.created, 5)

        second = ingest_file(self.db, self.FILENAME, content)
        self.assertEqual(second.outcome.created, 0)
        self.assertEqual(second.outcome.updated, 0)
        self.assertEqual(second.outcome.unchanged, 5)
        self.assertEqual(second.rows_processed, 5)
        self.assertEqual(self.db.query(Vulnerability).count(), 5)
        self.assertEqual(self.db.query(IngestionLog).count(), 2)

    def test_noop_keeps_fields_and_counts_sighting(self) -> None:
        ingest_file(self.db, self.FILENAME, csv_bytes(VULN_HEADER, vuln_row(1)))
        # Simulate an analyst note on a column the export never sends.
        row = self.db.query(Vulnerability).one()
        row.port = "443"
        first_updated_at = row.updated_at
        self.db.commit()

        ingest_file(self.db, self.FILENAME, csv_bytes(VULN_HEADER, vuln_row(1)))
        row = self.db.query(Vulnerability).one()
        self.assertEqual(row.port, "443")
        self.assertEqual(row.occurrence_count, 2)
        self.assertEqual(row.updated_at, first_updated_at)

    def test_meaningful_change_updates(self) -> None:
        ingest_file(self.db, self.FILENAME, csv_bytes(VULN_HEADER, vuln_row(1)))
        result = ingest_file(self.db, self.FILENAME, csv_bytes(VULN_HEADER, vuln_row(1, severity="Critical")))
        self.assertEqual(result.outcome.updated, 1)
        self.assertEqual(self.db.query(Vulnerability).one().severity, "CRITICAL")


class TestPartialFailure(IngestionTestCase):
    def test_ten_good_rows_and_one_bad(self) -> None:
        rows = [vuln_row(i) for i in range(1, 11)]
        # no asset, no IP: unmappable
        rows.insert(4, ",,IT,CVE-2025-9999,High,7.5,Open,x,y,2025-08-20T00:00:00Z")
        result = ingest_file(self.db, "Tenable_MONTHLY_20250827.csv", csv_bytes(VULN_HEADER, *rows))

        self.assertEqual(result.status, "SUCCESS")
        self.assertEqual(result.rows_processed, 10)
        self.assertEqual(result.outcome.errors.count, 1)
        self.assertEqual(len(result.outcome.errors.messages), 1)
        self.assertTrue(result.outcome.errors.messages[0].startswith("Row 5:"))

        log = self.last_log()
        self.assertEqual(log.status, "SUCCESS")
        self.assertEqual(log.rows_processed, 10)
        self.assertIn("1 row error(s)", log.error_log)

    def test_out_of_range_date_falls_back_to_report_date(self) -> None:
        rows = [SECUREWORKS_ROW.replace("Test Alert", f"Alert {name}") for name in ("A", "B", "C")]
        rows.insert(1, SECUREWORKS_ROW.replace("2025/08/27 02:29:55 UTC", "0001-01-01T00:00:00+05:00"))
        result = ingest_file(self.db, "Secureworks_Alerts_20250827.csv", csv_bytes(SECUREWORKS_HEADER, *rows))

        self.assertEqual(result.status, "SUCCESS")
        self.assertEqual(result.rows_processed, 4)
        self.assertEqual(result.outcome.errors.count, 0)
        odd = self.db.query(SecureworksAlert).filter(SecureworksAlert.title == "Test Alert").one()
        self.assertEqual(odd.detected_at.replace(tzinfo=UTC), datetime(2025, 8, 27, tzinfo=UTC))

    def test_unexpected_error_costs_only_its_row(self) -> None:
        original = SecureworksMapper.map_row

        def fails_on_third_row(mapper, row, context):
            if context.row_number == 3:
                raise OverflowError("date value out of range")
            return original(mapper, row, context)

        rows = [SECUREWORKS_ROW.replace("Test Alert", f"Alert {name}") for name in ("A", "B", "C", "D")]
        with patch.object(SecureworksMapper, "map_row", autospec=True, side_effect=fails_on_third_row):
            result = ingest_file(self.db, "Secureworks_Alerts_20250827.csv", csv_bytes(SECUREWORKS_HEADER, *rows))

        self.assertEqual(result.status, "SUCCESS")
        self.assertEqual(result.rows_processed, 3)
        self.assertEqual(result.outcome.errors.messages, ["Row 3: OverflowError: date value out of range"])
        self.assertEqual(self.db.query(SecureworksAlert).count(), 3)
        log = self.last_log()
        self.assertEqual(log.status, "SUCCESS")
        self.assertEqual(log.rows_processed, 3)

    def test_every_row_rejected_is_partial(self) -> None:
        rows = [",,IT,CVE-1,High,,Open,,,", ",,IT,CVE-2,High,,Open,,,"]
        result = ingest_file(self.db, "Tenable_MONTHLY_20250827.csv", csv_bytes(VULN_HEADER, *rows))
        self.assertEqual(result.status, "PARTIAL")
        self.assertEqual(result.rows_processed, 0)
        self.assertEqual(self.last_log().status, "PARTIAL")

    def test_blank_rows_are_skipped(self) -> None:
        result = ingest_file(
            self.db, "Tenable_MONTHLY_20250827.csv", csv_bytes(VULN_HEADER, vuln_row(1), ",,,,,,,,,")
        )
        self.assertEqual(result.rows_processed, 1)
        self.assertEqual(result.outcome.skipped, 1)
        self.assertEqual(result.outcome.errors.count, 0)


class TestShortRowsAndQuoting(IngestionTestCase):
    def test_short_row_is_padded_and_stored(self) -> None:
        header = "ID,Title,Control Status,Severity,Failed checks,Unknown checks,Not available checks,Passed checks,Related requirements,Custom parameters"
        content = csv_bytes(header, "IAM.1,Root MFA,FAILED,HIGH", 'S3.8,"Block, public access",PASSED,LOW,0,0,0,4,"CIS ""2.1""",{"a": 1, "b": 2}')
        result = ingest_file(self.db, "AWS_Security_Hub_FINDINGS_20250827.csv", content)

        self.assertEqual(result.rows_processed, 2)
        self.assertEqual(result.outcome.padded_rows, 1)
        short = self.db.get(CloudFinding, "IAM.1")
        self.assertEqual(short.failed_checks, 0)
        self.assertEqual(short.custom_parameters, "UNKNOWN")
        quoted = self.db.get(CloudFinding, "S3.8")
        self.assertEqual(quoted.title, "Block, public access")
        self.assertEqual(quoted.related_requirements, 'CIS "2.1"')
        self.assertEqual(quoted.custom_parameters, '{"a": 1, "b": 2}')
        self.assertEqual(quoted.status, "RESOLVED")

    def test_multiline_quoted_field(self) -> None:
        header = "Issue key,Summary,Status,Due date"
        content = csv_bytes(header, 'SEC-1,"Rotate keys\nfor prod",To Do,', "SEC-2,Patch VPN,Done,")
        result = ingest_file(self.db, "OpenItems_Report_20250827.csv", content)
        self.assertEqual(result.rows_processed, 2)
        self.assertEqual(self.db.get(Ticket, "SEC-1").title, "Rotate keys\nfor prod")
        self.assertEqual(self.db.get(Ticket, "SEC-2").status, "CLOSED")


class TestTicketClosedAt(IngestionTestCase):
    HEADER = (
        "Issue Type,Issue key,Issue id,Summary,Created,Custom field (Risk Accepted),"
        "Assignee,Assignee Id,Reporter,Reporter Id,Priority,Status,Due date"
    )

    def row(self, assignee: str, status: str) -> str:
        return f"Task,SEC-7,10007,Rotate keys,01/Aug/25 9:00 AM,,{assignee},a1,bob,b1,High,{status},"

    def closed_at(self) -> datetime | None:
        self.db.expire_all()
        value = self.db.get(Ticket, "SEC-7").closed_at
        return value.replace(tzinfo=UTC) if value is not None else None

    def test_first_closed_report_date_survives_later_changes(self) -> None:
        ingest_file(self.db, "OpenItems_Report_20250801.csv", csv_bytes(self.HEADER, self.row("alice", "Done")))
        self.assertEqual(self.closed_at(), datetime(2025, 8, 1, tzinfo=UTC))

        result = ingest_file(
            self.db, "OpenItems_Report_20250815.csv", csv_bytes(self.HEADER, self.row("carol", "Done"))
        )
        self.assertEqual(result.outcome.updated, 1)
        self.assertEqual(self.db.get(Ticket, "SEC-7").assignee, "carol")
        self.assertEqual(self.closed_at(), datetime(2025, 8, 1, tzinfo=UTC))

    def test_reopened_ticket_clears_closed_at(self) -> None:
        ingest_file(self.db, "OpenItems_Report_20250801.csv", csv_bytes(self.HEADER, self.row("alice", "Done")))
        ingest_file(self.db, "OpenItems_Report_20250815.csv", csv_bytes(self.HEADER, self.row("alice", "Reopened")))
        self.assertIsNone(self.closed_at())
        self.assertEqual(self.db.get(Ticket, "SEC-7").status, "OPEN")


class TestFalconFalsePositive(IngestionTestCase):
    HEADER = "CompositeId,DetectDate_UTC_readable,Hostname,SeverityName,Status,False Positive"

    def test_flag_is_stored_and_updated(self) -> None:
        ingest_file(
            self.db,
            "Falcon_DETECTIONS_20250827.csv",
            csv_bytes(self.HEADER, "ldt:abc:1,2025-08-27 02:29:55,host-1,High,New,"),
        )
        detection = self.db.get(FalconDetection, "ldt-abc-1")
        self.assertFalse(detection.false_positive)

        result = ingest_file(
            self.db,
            "Falcon_DETECTIONS_20250828.csv",
            csv_bytes(self.HEADER, "ldt:abc:1,2025-08-27 02:29:55,host-1,High,New,true"),
        )
        self.assertEqual(result.outcome.updated, 1)
        self.db.expire_all()
        detection = self.db.get(FalconDetection, "ldt-abc-1")
        self.assertTrue(detection.false_positive)
        self.assertEqual(detection.raw["False Positive"], "true")


class TestSeverityFallback(IngestionTestCase):
    def test_unknown_severity_per_format(self) -> None:
        ingest_file(self.db, "Tenable_MONTHLY_20250827.csv", csv_bytes(VULN_HEADER, vuln_row(1, severity="zzz")))
        self.assertEqual(self.db.query(Vulnerability).one().severity, "INFO")

        row = SECUREWORKS_ROW.replace(",MEDIUM,", ",zzz,")
        ingest_file(self.db, "Secureworks_Alerts_20250827.csv", csv_bytes(SECUREWORKS_HEADER, row))
        self.assertEqual(self.db.query(SecureworksAlert).one().severity, "MEDIUM")


class TestFileLevelFailures(IngestionTestCase):
    def test_empty_file_marks_log_failed(self) -> None:
        with self.assertRaises(MalformedInput) as ctx:
            ingest_file(self.db, "Tenable_MONTHLY_20250827.csv", csv_bytes(VULN_HEADER))
        self.assertTrue(ctx.exception.empty)
        log = self.last_log()
        self.assertEqual(log.status, "FAILED")
        self.assertEqual(log.rows_processed, 0)
        self.assertIn("empty", log.error_log)

    def test_binary_file_marks_log_failed(self) -> None:
        with self.assertRaises(MalformedInput):
            ingest_file(self.db, "Falcon_DETECTIONS_20250827.csv", b"\x00\x01\x02garbage")
        self.assertEqual(self.last_log().status, "FAILED")

    def test_unrecognized_filename_raises_before_logging(self) -> None:
        with self.assertRaises(UnrecognizedFormat):
            ingest_file(self.db, "random.csv", b"a,b\n1,2\n")
        self.assertEqual(self.db.query(IngestionLog).count(), 0)

    def test_database_down_for_every_row(self) -> None:
        content = csv_bytes(VULN_HEADER, vuln_row(1), vuln_row(2))
        error = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with patch("rampart.services.store.RecordStore.create", side_effect=PersistenceError("Database error", cause=error)):
            with self.assertRaises(PersistenceError):
                ingest_file(self.db, "Tenable_MONTHLY_20250827.csv", content)
        log = self.last_log()
        self.assertEqual(log.status, "FAILED")
        self.assertEqual(self.db.query(Vulnerability).count(), 0)

    def test_rejected_upload_log(self) -> None:
        log = record_rejected_upload(self.db, "notes.txt", b"hello", "Filename does not match")
        self.assertEqual(log.status, "FAILED")
        self.assertEqual(log.source, "unknown")
        self.assertEqual(log.file_type, "txt")


class TestScorecardIngestion(IngestionTestCase):
    FILENAME = "NETGEAR_Scorecard_Report_20250824.csv"

    def test_summary_upserted_per_report_date(self) -> None:
        first = ingest_file(self.db, self.FILENAME, csv_bytes("Field,Value", "Network Security Score,80"))
        self.assertEqual(first.outcome.created, 1)
        second = ingest_file(self.db, self.FILENAME, csv_bytes("Field,Value", "Network Security Score,60"))
        self.assertEqual(second.outcome.updated, 1)
        rating = self.db.query(ScorecardRating).one()
        self.assertEqual(rating.overall_score, 60.0)
        self.assertEqual(rating.letter_grade, "D")

    def test_pdf_placeholder_succeeds_with_no_rows(self) -> None:
        result = ingest_file(self.db, "NETGEAR-Scorecard-Q4_20241224.pdf", b"%PDF-1.7\n%binary-ish")
        self.assertEqual(result.status, "SUCCESS")
        self.assertEqual(result.rows_processed, 0)


class TestAuthorizeUpload(unittest.TestCase):
    def test_tiers(self) -> None:
        tenable = route_filename("Tenable_MONTHLY_20250827.csv")
        scorecard = route_filename("NETGEAR_Scorecard_Report_20250824.csv")
        authorize_upload("admin", scorecard)
        authorize_upload("analyst", tenable)
        with self.assertRaises(AuthorizationError):
            authorize_upload("analyst", scorecard)
        with self.assertRaises(AuthorizationError):
            authorize_upload("viewer", tenable)


class TestClassifyFailure(unittest.TestCase):
    def test_categories(self) -> None:
        self.assertEqual(classify_failure(MalformedInput("x", empty=True)).error, "CSV file appears to be empty")
        self.assertEqual(classify_failure(MalformedInput("x")).status_code, 422)
        self.assertEqual(classify_failure(MalformedInput("x")).error, "Unable to parse file content")
        self.assertEqual(classify_failure(UnrecognizedFormat("x")).status_code, 400)
        self.assertEqual(classify_failure(AuthorizationError("nope")).status_code, 403)
        db = classify_failure(PersistenceError("x"))
        self.assertEqual((db.status_code, db.error), (500, "Database error during file processing"))
        generic = classify_failure(RuntimeError("boom"))
        self.assertEqual((generic.status_code, generic.error), (500, "File processing error"))


if __name__ == "__main__":
    unittest.main()
