"""Deterministic duplicate keys derived from a narrow set of identity fields."""

import hashlib
from collections.abc import Iterable
from datetime import datetime
from typing import Literal

from rampart.services.parsing import day_bucket

KeyAlgorithm = Literal["sha256", "legacy32"]

IDENTITY_SEPARATOR = "|"
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def legacy32_hash(text: str) -> int:
    """
    Rolling h*31 + c over UTF-16 code units, folded to a signed 32-bit integer.

    Matches the keys already stored from earlier imports, so it stays selectable
    for databases populated before the sha256 default.
    """
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + code_unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def sha256_hash(text: str) -> int:
    """First 64 bits of SHA-256 as an unsigned integer."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def normalize_identity(values: Iterable[object]) -> str:
    """Case-fold and trim each identity value, drop empties, join with '|'."""
    parts = []
    for value in values:
        if value is None:
            continue
        if isinstance(value, datetime):
            text = value.isoformat()
        else:
            text = str(value)
        text = text.strip().casefold()
        if text:
            parts.append(text)
    return IDENTITY_SEPARATOR.join(parts)


def hash_identity(identity: str, algorithm: KeyAlgorithm = "sha256") -> str:
    if algorithm == "legacy32":
        return to_base36(abs(legacy32_hash(identity)))
    if algorithm == "sha256":
        return to_base36(sha256_hash(identity))
    raise ValueError(f"Unknown duplicate key algorithm: {algorithm}")


def duplicate_key(
    prefix: str,
    identity: Iterable[object],
    bucket: datetime | None,
    algorithm: KeyAlgorithm = "sha256",
) -> str:
    """
    Build '<prefix>-<hash36>-<YYYYMMDD>'.

    The day bucket is part of the key so the same event seen on different days
    stays distinct; with no bucket date the suffix is omitted.
    """
    hashed = hash_identity(normalize_identity(identity), algorithm)
    suffix = day_bucket(bucket)
    if suffix:
        return f"{prefix}-{hashed}-{suffix}"
    return f"{prefix}-{hashed}"
