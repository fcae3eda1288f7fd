"""Unit tests for duplicate key derivation."""

import unittest
from datetime import UTC, datetime

from rampart.services.duplicate_keys import (
    duplicate_key,
    hash_identity,
    legacy32_hash,
    normalize_identity,
    to_base36,
)

DAY = datetime(2025, 8, 27, 2, 29, 55, tzinfo=UTC)


class TestBase36(unittest.TestCase):
    def test_digits(self) -> None:
        self.assertEqual(to_base36(0), "0")
        self.assertEqual(to_base36(35), "z")
        self.assertEqual(to_base36(36), "10")

    def test_negative_rejected(self) -> None:
        with self.assertRaises(ValueError):
            to_base36(-1)


class TestLegacy32Hash(unittest.TestCase):
    def test_known_values(self) -> None:
        self.assertEqual(legacy32_hash(""), 0)
        self.assertEqual(legacy32_hash("a"), 97)
        self.assertEqual(legacy32_hash("ab"), 97 * 31 + 98)
        self.assertEqual(legacy32_hash("hello"), 99162322)

    def test_wraps_to_signed_32_bit(self) -> None:
        self.assertEqual(legacy32_hash("polygenelubricants"), -(2**31))

    def test_legacy_key(self) -> None:
        self.assertEqual(duplicate_key("x", ["a"], None, "legacy32"), "x-2p")


class TestDuplicateKey(unittest.TestCase):
    def test_shape(self) -> None:
        key = duplicate_key("secureworks", ["Test Alert", "host-1"], DAY)
        prefix, hashed, day = key.split("-")
        self.assertEqual(prefix, "secureworks")
        self.assertTrue(hashed.isalnum())
        self.assertEqual(day, "20250827")

    def test_stable_and_case_insensitive(self) -> None:
        a = duplicate_key("secureworks", ["Test Alert", " HOST-1 "], DAY)
        b = duplicate_key("secureworks", ["test alert", "host-1"], DAY)
        self.assertEqual(a, b)

    def test_identity_fields_matter(self) -> None:
        a = duplicate_key("secureworks", ["Test Alert", "host-1"], DAY)
        b = duplicate_key("secureworks", ["Test Alert", "host-2"], DAY)
        self.assertNotEqual(a, b)

    def test_day_bucket_matters(self) -> None:
        next_day = datetime(2025, 8, 28, tzinfo=UTC)
        self.assertNotEqual(
            duplicate_key("vuln", ["a"], DAY),
            duplicate_key("vuln", ["a"], next_day),
        )

    def test_no_bucket_omits_suffix(self) -> None:
        self.assertEqual(duplicate_key("p", ["x"], None).count("-"), 1)

    def test_algorithms_differ(self) -> None:
        self.assertNotEqual(hash_identity("test", "sha256"), hash_identity("test", "legacy32"))

    def test_unknown_algorithm(self) -> None:
        with self.assertRaises(ValueError):
            hash_identity("x", "md5")  # type: ignore[arg-type]


class TestNormalizeIdentity(unittest.TestCase):
    def test_empties_dropped(self) -> None:
        self.assertEqual(normalize_identity(["  Test ", None, "", "HOST"]), "test|host")

    def test_datetimes_use_isoformat(self) -> None:
        self.assertEqual(normalize_identity([DAY]), "2025-08-27t02:29:55+00:00")


if __name__ == "__main__":
    unittest.main()
