"""Tests for the create / update / no-op reconciliation against SQLite."""

import threading
import time
import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from db_support import make_session
from rampart.models import Vulnerability
from rampart.services.errors import PersistenceError
from rampart.services.reconcile import (
    KeyedLocks,
    ReconcileOutcome,
    diff_meaningful,
    reconcile,
    values_differ,
)
from rampart.services.store import RecordStore

MEANINGFUL = ("severity", "status", "cvss_score", "description")
T0 = datetime(2025, 8, 27, 12, 0, tzinfo=UTC)


def _values(**overrides) -> dict:
    values = {
        "asset_name": "web-01",
        "business_unit": "IT",
        "cve_id": "CVE-2024-0001",
        "severity": "HIGH",
        "status": "OPEN",
        "cvss_score": 7.5,
        "description": "Outdated OpenSSL",
        "solution": "Upgrade",
        "report_date": T0,
    }
    values.update(overrides)
    return values


class TestValuesDiffer(unittest.TestCase):
    def test_numbers_within_epsilon(self) -> None:
        self.assertFalse(values_differ(7.5, 7.505))
        self.assertTrue(values_differ(7.5, 7.6))
        self.assertFalse(values_differ(3, 3.0))

    def test_none_and_empty_are_equal(self) -> None:
        self.assertFalse(values_differ(None, ""))
        self.assertFalse(values_differ("  x ", "x"))
        self.assertTrue(values_differ(None, "x"))

    def test_naive_datetime_is_utc(self) -> None:
        self.assertFalse(values_differ(T0.replace(tzinfo=None), T0))
        self.assertTrue(values_differ(T0, T0 + timedelta(seconds=1)))

    def test_bools(self) -> None:
        self.assertTrue(values_differ(True, False))
        self.assertFalse(values_differ(False, False))

    def test_diff_lists_changed_fields_only(self) -> None:
        record = MagicMock(severity="HIGH", status="OPEN", cvss_score=7.5, description="a")
        changes = diff_meaningful(record, _values(description="b"), MEANINGFUL)
        self.assertEqual(len(changes), 1)
        self.assertTrue(changes[0].startswith("description:"))


class TestKeyedLocks(unittest.TestCase):
    def test_entries_are_released(self) -> None:
        locks = KeyedLocks()
        with locks.hold("a"):
            with locks.hold("b"):
                self.assertEqual(len(locks), 2)
        self.assertEqual(len(locks), 0)

    def test_same_key_is_serialized(self) -> None:
        locks = KeyedLocks()
        inside = []
        overlap = []

        def worker() -> None:
            with locks.hold("k"):
                inside.append(1)
                if len(inside) > 1:
                    overlap.append(True)
                time.sleep(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(overlap, [])
        self.assertEqual(len(locks), 0)


class TestReconcile(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.store = RecordStore(self.db, Vulnerability, "id")

    def tearDown(self) -> None:
        self.db.close()

    def test_create_then_unchanged_then_update(self) -> None:
        created = reconcile(self.store, "vuln-1", _values(), MEANINGFUL, tracks_occurrences=True, now=T0)
        self.assertEqual(created.outcome, ReconcileOutcome.CREATED)

        later = T0 + timedelta(days=1)
        same = reconcile(
            self.store, "vuln-1", _values(solution="ignored"), MEANINGFUL, tracks_occurrences=True, now=later
        )
        self.assertEqual(same.outcome, ReconcileOutcome.UNCHANGED)
        row = self.db.get(Vulnerability, "vuln-1")
        self.assertEqual(row.occurrence_count, 2)
        # non-meaningful field untouched on a no-op
        self.assertEqual(row.solution, "Upgrade")
        self.assertEqual(row.last_seen_at.replace(tzinfo=UTC), later)
        self.assertEqual(row.updated_at.replace(tzinfo=UTC), T0)

        changed = reconcile(
            self.store, "vuln-1", _values(severity="CRITICAL"), MEANINGFUL, tracks_occurrences=True, now=later
        )
        self.assertEqual(changed.outcome, ReconcileOutcome.UPDATED)
        self.assertEqual(len(changed.changes), 1)
        row = self.db.get(Vulnerability, "vuln-1")
        self.assertEqual(row.severity, "CRITICAL")
        self.assertEqual(row.occurrence_count, 3)
        self.assertEqual(self.db.query(Vulnerability).count(), 1)

    def test_occurrence_count_not_touched_when_untracked(self) -> None:
        reconcile(self.store, "vuln-2", _values(), MEANINGFUL, now=T0)
        reconcile(self.store, "vuln-2", _values(), MEANINGFUL, now=T0)
        self.assertEqual(self.db.get(Vulnerability, "vuln-2").occurrence_count, 1)

    def test_sticky_field_keeps_stored_value_on_update(self) -> None:
        reconcile(self.store, "vuln-4", _values(), MEANINGFUL, now=T0, sticky_fields=("solution",))
        reconcile(
            self.store,
            "vuln-4",
            _values(severity="CRITICAL", solution="Patch"),
            MEANINGFUL,
            now=T0,
            sticky_fields=("solution",),
        )
        row = self.db.get(Vulnerability, "vuln-4")
        self.assertEqual(row.severity, "CRITICAL")
        self.assertEqual(row.solution, "Upgrade")

        reconcile(
            self.store,
            "vuln-4",
            _values(severity="LOW", solution=None),
            MEANINGFUL,
            now=T0,
            sticky_fields=("solution",),
        )
        self.assertIsNone(self.db.get(Vulnerability, "vuln-4").solution)

    def test_storage_failure_is_rolled_back(self) -> None:
        session = MagicMock()
        session.query.side_effect = OperationalError("SELECT", {}, Exception("down"))
        store = RecordStore(session, Vulnerability, "id")
        with self.assertRaises(PersistenceError):
            reconcile(store, "vuln-3", _values(), MEANINGFUL)
        session.rollback.assert_called_once()


if __name__ == "__main__":
    unittest.main()
