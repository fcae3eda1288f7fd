"""Quote-aware CSV tokenizer for loosely specified security-tool exports.

The exporters we ingest do not agree on a dialect. Quotes inside quoted fields
arrive either backslash-escaped (``\\"``) or doubled (``""``), quoted fields may
span lines, and some columns carry JSON fragments whose commas must not split
the field. The tokenizer is therefore hand-rolled instead of using ``csv``.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

from rampart.services.errors import MalformedInput

logger = logging.getLogger(__name__)

RecordSeparator = Literal["quoted", "lines"]

_QUOTE = '"'
_ESCAPE = "\\"
_BOM = "\ufeff"


def _is_toggle_quote(text: str, i: int) -> bool:
    """A quote toggles quote state unless the immediately prior character is a backslash."""
    return text[i] == _QUOTE and (i == 0 or text[i - 1] != _ESCAPE)


def split_records(text: str, separator: RecordSeparator = "quoted") -> list[str]:
    """
    Split raw file text into logical records.

    With the ``quoted`` policy a newline inside a quoted field does not end the
    record; ``lines`` splits on physical lines. Blank records are dropped.
    """
    if separator == "lines":
        return [line for line in text.splitlines() if line.strip()]

    records: list[str] = []
    current: list[str] = []
    in_quotes = False
    for i, ch in enumerate(text):
        if _is_toggle_quote(text, i):
            in_quotes = not in_quotes
        if ch in "\r\n" and not in_quotes:
            if current:
                record = "".join(current)
                if record.strip():
                    records.append(record)
                current = []
            continue
        current.append(ch)
    if current:
        record = "".join(current)
        if record.strip():
            records.append(record)
    return records


def _clean_field(raw: str) -> str:
    """Trim, strip one layer of surrounding quotes and unescape embedded quotes."""
    value = raw.strip()
    if len(value) >= 2 and value[0] == _QUOTE and value[-1] == _QUOTE:
        inner = value[1:-1]
        return inner.replace('\\"', '"').replace('""', '"')
    # Unbalanced leftovers from truncated exports.
    if value.startswith(_QUOTE):
        value = value[1:]
    if value.endswith(_QUOTE) and not value.endswith('\\"'):
        value = value[:-1]
    return value


def parse_row(line: str) -> list[str]:
    """
    Split one logical record into fields.

    Commas split fields only outside quotes and outside ``[]``/``{}`` nesting.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    bracket_depth = 0
    brace_depth = 0
    for i, ch in enumerate(line):
        if _is_toggle_quote(line, i):
            in_quotes = not in_quotes
        elif not in_quotes:
            if ch == "[":
                bracket_depth += 1
            elif ch == "]":
                bracket_depth = max(0, bracket_depth - 1)
            elif ch == "{":
                brace_depth += 1
            elif ch == "}":
                brace_depth = max(0, brace_depth - 1)
            elif ch == "," and bracket_depth == 0 and brace_depth == 0:
                fields.append(_clean_field("".join(current)))
                current = []
                continue
        current.append(ch)
    fields.append(_clean_field("".join(current)))
    return fields


@dataclass
class CsvDocument:
    """A tokenized file: header row plus data rows padded to the header width."""

    header: list[str]
    rows: list[list[str]]
    padded_rows: int = 0
    # 1-based row numbers (header excluded) of the padded rows, for diagnostics.
    padded_row_numbers: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def numbered_rows(self) -> Iterator[tuple[int, list[str]]]:
        """Yield (row_number, values) with row numbers starting at 1 for the first data row."""
        for i, values in enumerate(self.rows, start=1):
            yield i, values


def decode_text(content: bytes) -> str:
    """
    Decode uploaded bytes as UTF-8 (BOM tolerated), falling back to cp1252 for
    spreadsheet exports. Binary content raises MalformedInput.
    """
    if b"\x00" in content:
        raise MalformedInput("Unable to parse file content: file is binary, not CSV text")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass
    try:
        text = content.decode("cp1252")
    except UnicodeDecodeError as e:
        raise MalformedInput(f"Unable to parse file content: not UTF-8 or cp1252 text ({e.reason})") from e
    logger.warning("File is not UTF-8; decoded as cp1252")
    return text


def tokenize(text: str, separator: RecordSeparator = "quoted") -> CsvDocument:
    """
    Tokenize a whole file eagerly into a CsvDocument.

    Raises MalformedInput when there is no header plus at least one data row.
    Rows shorter than the header are right-padded with empty strings.
    """
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    records = split_records(text, separator)
    if len(records) < 2:
        raise MalformedInput(
            "CSV file is empty: it must contain at least a header row and one data row.",
            empty=True,
        )

    header = parse_row(records[0])
    width = len(header)
    rows: list[list[str]] = []
    padded_numbers: list[int] = []
    for row_number, record in enumerate(records[1:], start=1):
        values = parse_row(record)
        if len(values) < width:
            values.extend([""] * (width - len(values)))
            padded_numbers.append(row_number)
        rows.append(values)

    if padded_numbers:
        logger.warning(
            "Padded %s rows with fewer columns than the header (first: row %s)",
            len(padded_numbers),
            padded_numbers[0],
        )
    return CsvDocument(
        header=header,
        rows=rows,
        padded_rows=len(padded_numbers),
        padded_row_numbers=padded_numbers,
    )
