"""Unit tests for filename validation and format routing."""

import unittest
from datetime import UTC, datetime

from rampart.services.errors import UnrecognizedFormat
from rampart.services.format_router import (
    FILE_NAMING_RULES,
    PROFILES,
    list_naming_rules,
    route_filename,
    validate_filename,
)


class TestRouteFilename(unittest.TestCase):
    def test_secureworks_with_date(self) -> None:
        routed = route_filename("Secureworks_Alerts_20250827.csv")
        self.assertEqual(routed.profile.name, "edr-secureworks-csv")
        self.assertEqual(routed.source, "secureworks")
        self.assertEqual(routed.file_type, "csv")
        self.assertEqual(routed.report_date, datetime(2025, 8, 27, tzinfo=UTC))
        self.assertEqual(routed.extracted_date, "20250827")
        self.assertFalse(routed.profile.admin_only)

    def test_case_insensitive(self) -> None:
        routed = route_filename("tenable_monthly_20241224.CSV")
        self.assertEqual(routed.profile.name, "vulnerability-csv")

    def test_scorecard_profiles_are_admin_only(self) -> None:
        summary = route_filename("NETGEAR_Scorecard_Report_20250824.csv")
        issues = route_filename("NETGEAR_FullIssues_Report_20250824.csv")
        pdf = route_filename("NETGEAR-Scorecard-Q4_20241224.pdf")
        self.assertEqual(summary.profile.name, "scorecard-summary-csv")
        self.assertEqual(issues.profile.name, "scorecard-issue-detail-csv")
        self.assertEqual(pdf.profile.name, "scorecard-pdf-placeholder")
        self.assertEqual(pdf.file_type, "pdf")
        self.assertTrue(all(r.profile.admin_only for r in (summary, issues, pdf)))

    def test_undated_ticket_exports_use_now(self) -> None:
        now = datetime(2025, 9, 1, 12, 0, tzinfo=UTC)
        advisory = route_filename("threat_advisory_report.csv", now=now)
        items = route_filename("OpenItems_Report.csv", now=now)
        self.assertEqual(advisory.profile.name, "threat-advisory-csv")
        self.assertEqual(items.profile.name, "generic-ticket-csv")
        self.assertEqual(advisory.report_date, now)
        self.assertIsNone(items.extracted_date)

    def test_dated_open_items(self) -> None:
        routed = route_filename("CorpSec_BiWeekly_OpenItems_20241224.csv")
        self.assertEqual(routed.report_date, datetime(2024, 12, 24, tzinfo=UTC))

    def test_tool_metrics_are_dated_by_month(self) -> None:
        perimeter = route_filename("Perimeter_Protection_Quarter01_022025.csv")
        self.assertEqual(perimeter.profile.name, "perimeter-metrics-csv")
        self.assertEqual(perimeter.report_date, datetime(2025, 2, 1, tzinfo=UTC))
        self.assertEqual(perimeter.extracted_date, "022025")
        self.assertTrue(perimeter.profile.admin_only)

        for name in ("XDR_Secureworks_082025.csv", "ToolMetrics_Secureworks_Quarter03_092025.csv"):
            routed = route_filename(name)
            self.assertEqual(routed.profile.name, "xdr-metrics-csv", name)
            self.assertEqual(routed.report_date.day, 1)
        self.assertEqual(route_filename("XDR_Secureworks_082025.csv").report_date, datetime(2025, 8, 1, tzinfo=UTC))

    def test_rss_feed_list(self) -> None:
        now = datetime(2025, 9, 1, 12, 0, tzinfo=UTC)
        routed = route_filename("rss_feeds.csv", now=now)
        self.assertEqual(routed.profile.name, "rss-feed-csv")
        self.assertFalse(routed.profile.admin_only)
        self.assertEqual(routed.report_date, now)

    def test_every_rule_has_a_profile(self) -> None:
        for rule in FILE_NAMING_RULES:
            self.assertIn(rule.source, PROFILES)
            for example in rule.examples:
                self.assertEqual(route_filename(example).source, rule.source, example)


class TestRejectedFilenames(unittest.TestCase):
    def test_empty(self) -> None:
        with self.assertRaises(UnrecognizedFormat):
            validate_filename("  ")

    def test_unknown_pattern(self) -> None:
        with self.assertRaises(UnrecognizedFormat) as ctx:
            route_filename("random_export.csv")
        self.assertIn("Expected formats", ctx.exception.message)

    def test_missing_required_date(self) -> None:
        with self.assertRaises(UnrecognizedFormat):
            route_filename("Tenable_scan.csv")

    def test_impossible_calendar_date(self) -> None:
        with self.assertRaises(UnrecognizedFormat) as ctx:
            route_filename("Tenable_SCAN_20240231.csv")
        self.assertIn("Invalid date in filename: 20240231", ctx.exception.message)

    def test_impossible_date_on_optional_rule(self) -> None:
        with self.assertRaises(UnrecognizedFormat):
            route_filename("Threat_Advisory_20241340.csv")

    def test_tool_metrics_month_out_of_range(self) -> None:
        for name in ("XDR_Secureworks_132025.csv", "Perimeter_Protection_Quarter05_022025.csv",
                     "XDR_Secureworks_20250827.csv"):
            with self.assertRaises(UnrecognizedFormat, msg=name):
                route_filename(name)

    def test_wrong_extension(self) -> None:
        with self.assertRaises(UnrecognizedFormat):
            route_filename("Falcon_DETECTIONS_20241224.xlsx")


class TestListNamingRules(unittest.TestCase):
    def test_shape(self) -> None:
        rules = list_naming_rules()
        self.assertEqual(len(rules), len(FILE_NAMING_RULES))
        first = rules[0]
        self.assertEqual(first["source"], "tenable")
        self.assertEqual(first["profile"], "vulnerability-csv")
        self.assertEqual(
            set(first),
            {
                "source", "pattern", "description", "examples", "fileType", "profile", "adminOnly",
                "dateRequired", "dateFormat",
            },
        )
        by_source = {r["source"]: r for r in rules}
        self.assertFalse(by_source["open-items"]["dateRequired"])
        self.assertTrue(by_source["scorecard-report"]["adminOnly"])
        self.assertEqual(by_source["xdr-secureworks"]["dateFormat"], "MMYYYY")


if __name__ == "__main__":
    unittest.main()
