"""Unit tests for field parsers: dates, severities, statuses, numbers."""

import unittest
from datetime import UTC, datetime, timedelta, timezone

from rampart.services.parsing import (
    day_bucket,
    is_closed_status,
    normalize_severity,
    normalize_status,
    parse_bool,
    parse_date,
    parse_false_positive,
    parse_int,
    parse_number,
    severity_fallback,
)


class TestParseDate(unittest.TestCase):
    def test_utc_suffix(self) -> None:
        self.assertEqual(
            parse_date("2025/08/27 02:29:55 UTC"),
            datetime(2025, 8, 27, 2, 29, 55, tzinfo=UTC),
        )

    def test_iso(self) -> None:
        self.assertEqual(
            parse_date("2025-08-27T02:29:55Z"),
            datetime(2025, 8, 27, 2, 29, 55, tzinfo=UTC),
        )

    def test_iso_with_offset_is_converted(self) -> None:
        self.assertEqual(
            parse_date("2025-08-27T04:29:55+02:00"),
            datetime(2025, 8, 27, 2, 29, 55, tzinfo=UTC),
        )

    def test_us_slash_with_meridiem(self) -> None:
        self.assertEqual(parse_date("08/27/2025 2:29 PM"), datetime(2025, 8, 27, 14, 29, tzinfo=UTC))
        self.assertEqual(parse_date("8/27/2025"), datetime(2025, 8, 27, tzinfo=UTC))
        self.assertEqual(parse_date("08/27/2025 12:05 AM"), datetime(2025, 8, 27, 0, 5, tzinfo=UTC))

    def test_ticket_date(self) -> None:
        self.assertEqual(parse_date("27/Aug/25 2:29 PM"), datetime(2025, 8, 27, 14, 29, tzinfo=UTC))
        self.assertEqual(parse_date("01/Jan/99 9:00 AM"), datetime(1999, 1, 1, 9, 0, tzinfo=UTC))

    def test_dash_date(self) -> None:
        self.assertEqual(parse_date("27-Aug-2025"), datetime(2025, 8, 27, tzinfo=UTC))

    def test_protobuf_timestamp(self) -> None:
        self.assertEqual(
            parse_date('{"seconds": 1756261795, "nanos": 0}'),
            datetime(2025, 8, 27, 2, 29, 55, tzinfo=UTC),
        )

    def test_plain_date_via_fallback(self) -> None:
        self.assertEqual(parse_date("2025-08-27"), datetime(2025, 8, 27, tzinfo=UTC))

    def test_matched_but_impossible_date_is_none(self) -> None:
        self.assertIsNone(parse_date("13/45/2025"))

    def test_out_of_range_after_utc_conversion_is_none(self) -> None:
        self.assertIsNone(parse_date("0001-01-01T00:00:00+05:00"))
        self.assertIsNone(parse_date("9999-12-31T23:59:59-05:00"))

    def test_garbage(self) -> None:
        for value in (None, "", "   ", "TBD", "5", "not a date"):
            self.assertIsNone(parse_date(value), value)

    def test_result_is_always_aware(self) -> None:
        self.assertIsNotNone(parse_date("Aug 27 2025 10:00").tzinfo)


class TestDayBucket(unittest.TestCase):
    def test_bucket_is_utc_day(self) -> None:
        late = datetime(2025, 8, 27, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        self.assertEqual(day_bucket(late), "20250828")
        self.assertEqual(day_bucket(None), "")


class TestSeverity(unittest.TestCase):
    def test_known_levels(self) -> None:
        self.assertEqual(normalize_severity("Critical"), "CRITICAL")
        self.assertEqual(normalize_severity(" med "), "MEDIUM")
        self.assertEqual(normalize_severity("Informational"), "INFO")

    def test_decorated_values(self) -> None:
        self.assertEqual(normalize_severity("High (7.5)"), "HIGH")
        self.assertEqual(normalize_severity("P1 - Critical"), "CRITICAL")

    def test_unknown_uses_default(self) -> None:
        self.assertEqual(normalize_severity("zzz"), "INFO")
        self.assertEqual(normalize_severity("zzz", "MEDIUM"), "MEDIUM")
        self.assertEqual(normalize_severity(None, "MEDIUM"), "MEDIUM")

    def test_fallback_table(self) -> None:
        self.assertEqual(severity_fallback("vulnerability-csv"), "INFO")
        self.assertEqual(severity_fallback("edr-secureworks-csv"), "MEDIUM")
        self.assertEqual(severity_fallback("edr-falcon-csv"), "MEDIUM")
        self.assertEqual(severity_fallback("no-such-profile"), "INFO")


class TestStatus(unittest.TestCase):
    def test_aliases(self) -> None:
        self.assertEqual(normalize_status("In Progress"), "IN_PROGRESS")
        self.assertEqual(normalize_status("Won't Fix"), "WONT_FIX")
        self.assertEqual(normalize_status("Done"), "CLOSED")
        self.assertEqual(normalize_status("fixed"), "RESOLVED")

    def test_unknown_is_open(self) -> None:
        self.assertEqual(normalize_status("weird"), "OPEN")
        self.assertEqual(normalize_status(None), "OPEN")
        self.assertEqual(normalize_status(""), "OPEN")

    def test_closed_detection(self) -> None:
        self.assertTrue(is_closed_status("Resolved"))
        self.assertTrue(is_closed_status("Closed - duplicate"))
        self.assertFalse(is_closed_status("Open"))
        self.assertFalse(is_closed_status(None))


class TestScalars(unittest.TestCase):
    def test_numbers(self) -> None:
        self.assertEqual(parse_number("1,234.5"), 1234.5)
        self.assertEqual(parse_number(" 42 "), 42.0)
        self.assertIsNone(parse_number("abc"))
        self.assertEqual(parse_number("", 0.0), 0.0)
        self.assertIsNone(parse_number("nan"))
        self.assertEqual(parse_int("3.0"), 3)
        self.assertEqual(parse_int(None, 0), 0)

    def test_bools(self) -> None:
        self.assertTrue(parse_bool("Yes"))
        self.assertFalse(parse_bool("no"))
        self.assertIsNone(parse_bool("maybe"))
        self.assertFalse(parse_bool("", False))

    def test_false_positive_flags(self) -> None:
        for value in ("true", "1", "Y", "False Positive", "fp"):
            self.assertTrue(parse_false_positive(value), value)
        for value in ("false", "", None, "True Positive", "maybe"):
            self.assertFalse(parse_false_positive(value), value)


if __name__ == "__main__":
    unittest.main()
