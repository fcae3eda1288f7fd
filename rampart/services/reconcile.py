"""Insert / update / no-op decision for one keyed record."""

import logging
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from rampart.services.store import RecordStore

logger = logging.getLogger(__name__)

# Numeric fields closer than this are treated as equal (float noise in exports).
NUMERIC_EPSILON = 0.01


class ReconcileOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass
class ReconcileResult:
    outcome: ReconcileOutcome
    key: Any
    changes: list[str] = field(default_factory=list)


class KeyedLocks:
    """
    Per-key mutexes, created on demand and dropped when no longer held.

    Serializes the find-then-write for one key inside this process; separate
    processes still rely on the key column's uniqueness constraint.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Any, list] = {}  # key -> [lock, holders]

    @contextmanager
    def hold(self, key: Any) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
        lock = entry[0]
        try:
            with lock:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


_record_locks = KeyedLocks()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def values_differ(old: Any, new: Any) -> bool:
    """
    Compare one stored value with one incoming value.

    Numbers differ only beyond NUMERIC_EPSILON, booleans by value, datetimes as
    UTC instants. Everything else compares as trimmed text, so None and ""
    are both "absent" and never a change between each other.
    """
    if _is_number(old) and _is_number(new):
        return abs(float(old) - float(new)) > NUMERIC_EPSILON
    if isinstance(old, bool) and isinstance(new, bool):
        return old != new
    if isinstance(old, datetime) and isinstance(new, datetime):
        return _as_utc(old) != _as_utc(new)
    return _as_text(old) != _as_text(new)


def diff_meaningful(record: Any, values: dict[str, Any], meaningful_fields: Sequence[str]) -> list[str]:
    """Human-readable list of meaningful fields whose value changed."""
    changes = []
    for name in meaningful_fields:
        if name not in values:
            continue
        old = getattr(record, name, None)
        new = values[name]
        if values_differ(old, new):
            changes.append(f"{name}: {_as_text(old)!r} -> {_as_text(new)!r}")
    return changes


def reconcile(
    store: RecordStore,
    key: Any,
    values: dict[str, Any],
    meaningful_fields: Sequence[str],
    tracks_occurrences: bool = False,
    now: datetime | None = None,
    sticky_fields: Sequence[str] = (),
) -> ReconcileResult:
    """
    Create the record for key, update it when a meaningful field changed, or
    only refresh last_seen_at (and occurrence_count) when nothing did.

    sticky_fields keep their stored value on update as long as both the stored
    and the incoming value are set; an incoming None still clears them.

    Commits on success; rolls back and re-raises PersistenceError on failure.
    """
    now = now or datetime.now(UTC)
    with _record_locks.hold((store.name, key)):
        try:
            existing = store.find_unique(key)
            if existing is None:
                create_values = {**values, "created_at": now, "updated_at": now, "last_seen_at": now}
                if tracks_occurrences:
                    create_values["occurrence_count"] = 1
                store.create(key, create_values)
                result = ReconcileResult(ReconcileOutcome.CREATED, key)
            else:
                changes = diff_meaningful(existing, values, meaningful_fields)
                touch: dict[str, Any] = {"last_seen_at": now}
                if tracks_occurrences:
                    touch["occurrence_count"] = (existing.occurrence_count or 1) + 1
                if changes:
                    kept = {
                        name
                        for name in sticky_fields
                        if values.get(name) is not None and getattr(existing, name, None) is not None
                    }
                    update_values = {k: v for k, v in values.items() if k not in kept}
                    store.update(existing, {**update_values, **touch, "updated_at": now})
                    result = ReconcileResult(ReconcileOutcome.UPDATED, key, changes)
                else:
                    store.update(existing, touch)
                    result = ReconcileResult(ReconcileOutcome.UNCHANGED, key)
            store.commit()
        except Exception:
            store.rollback()
            raise

    if result.outcome is ReconcileOutcome.UPDATED:
        logger.debug("Updated %s %s: %s", store.name, key, ", ".join(result.changes))
    elif result.outcome is ReconcileOutcome.UNCHANGED:
        logger.debug("No changes for %s %s; refreshed last_seen_at", store.name, key)
    return result
