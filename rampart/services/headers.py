"""Resolve canonical field names to column indexes from a CSV header row."""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from rampart.services.errors import MalformedInput

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_header(name: str) -> str:
    """Lower-case and collapse every non-alphanumeric run to one space ('IP_Addresses' -> 'ip addresses')."""
    return _NON_ALNUM.sub(" ", (name or "").lower()).strip()


@dataclass(frozen=True)
class FieldSpec:
    """
    One row of a per-format field table.

    synonyms are tried in order against the header; fallback is the column index
    used for legacy exports whose header does not name the field.
    """

    name: str
    synonyms: tuple[str, ...]
    fallback: int | None = None
    required: bool = False


class HeaderResolver:
    """
    Canonical field name -> column index for one header row.

    Built once per file; use bind() to read values from each data row.
    """

    def __init__(self, header: Sequence[str], specs: Sequence[FieldSpec]) -> None:
        self.header = list(header)
        self._positions: dict[str, int] = {}
        for i, name in enumerate(self.header):
            # First occurrence wins when an export repeats a header name.
            self._positions.setdefault(normalize_header(name), i)

        self.indexes: dict[str, int | None] = {}
        self.matched: dict[str, bool] = {}
        missing: list[str] = []
        for spec in specs:
            idx = self._find(spec.synonyms)
            self.matched[spec.name] = idx is not None
            if idx is None:
                idx = spec.fallback
            if idx is None and spec.required:
                missing.append(spec.synonyms[0] if spec.synonyms else spec.name)
            self.indexes[spec.name] = idx
        if missing:
            raise MalformedInput(
                f"CSV header is missing required column(s): {', '.join(missing)}"
            )

    def _find(self, synonyms: Sequence[str]) -> int | None:
        for candidate in synonyms:
            idx = self._positions.get(normalize_header(candidate))
            if idx is not None:
                return idx
        return None

    def index_of(self, field_name: str) -> int | None:
        """Resolved column index for a canonical field, or None when unresolved."""
        return self.indexes.get(field_name)

    def bind(self, values: Sequence[str]) -> "BoundRow":
        """Wrap one tokenized data row for lookups by canonical field name."""
        return BoundRow(self, values)


class BoundRow:
    """A data row viewed through a HeaderResolver."""

    __slots__ = ("_resolver", "values")

    def __init__(self, resolver: HeaderResolver, values: Sequence[str]) -> None:
        self._resolver = resolver
        self.values = list(values)

    def get(self, field_name: str) -> str:
        """Trimmed value for a canonical field; empty string when unresolved or out of range."""
        idx = self._resolver.index_of(field_name)
        if idx is None or idx < 0 or idx >= len(self.values):
            return ""
        return (self.values[idx] or "").strip()

    def get_or_none(self, field_name: str) -> str | None:
        value = self.get(field_name)
        return value or None

    def is_blank(self) -> bool:
        return not any((v or "").strip() for v in self.values)

    def as_raw(self) -> dict[str, str | None]:
        """Header -> value map of the whole row; extra values beyond the header get positional names."""
        header = self._resolver.header
        raw: dict[str, str | None] = {}
        for i, value in enumerate(self.values):
            name = header[i] if i < len(header) and header[i] else f"column_{i}"
            raw[name] = value if value != "" else None
        return raw
