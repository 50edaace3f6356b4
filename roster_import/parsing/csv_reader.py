from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from ..models.raw_record import RawRecord

"""CSV reader for roster imports.

Line 1 is the header, every following non-blank line is a data row. Quoting
follows RFC 4180 within a line (doubled quotes escape a quote); quoted
newlines are not supported since the input is split on newlines first.

Malformed rows are repaired (padded / truncated to the header width) rather
than rejected. A row that still cannot be turned into a record is skipped and
reported through `on_skip`; only a missing header/data section is fatal.
"""

__all__ = [
    "CsvFormatError",
    "normalize_header",
    "split_csv_line",
    "parse_csv",
    "read_csv_file",
]

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_KEY_CHARS_RE = re.compile(r"[^a-z0-9_]")

SkipCallback = Callable[[int, Exception], None]


class CsvFormatError(Exception):
    """Raised when the CSV lacks a header row or any data row."""


def normalize_header(label: str) -> str:
    """Turn a column label into a field key: `Phone Number` -> `phone_number`."""
    key = _WHITESPACE_RE.sub("_", label.lower())
    return _INVALID_KEY_CHARS_RE.sub("", key)


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line on commas outside quotes; fields are trimmed."""
    result: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                # escaped quote inside a quoted field
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            result.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    result.append("".join(current).strip())
    return result


def _build_record(headers: list[str], line: str, row_number: int) -> RawRecord:
    values = split_csv_line(line)
    if len(values) != len(headers):
        logger.warning(
            "row %d has %d columns but expected %d; adjusting",
            row_number,
            len(values),
            len(headers),
        )
        if len(values) < len(headers):
            values.extend([""] * (len(headers) - len(values)))
        else:
            del values[len(headers):]

    data: dict[str, str] = {}
    for header, value in zip(headers, values, strict=True):
        if value and value.strip():
            data[normalize_header(header)] = value
    return RawRecord(row_number=row_number, data=data)


def parse_csv(csv_text: str, on_skip: SkipCallback | None = None) -> list[RawRecord]:
    """Parse CSV text into RawRecords in input order.

    Parameters
    ----------
    csv_text: whole file contents
    on_skip: called with (row_number, exception) for every row that had to be
        dropped; such rows are logged and never abort the parse

    Raises
    ------
    CsvFormatError: fewer than two non-blank lines (no header or no data)
    """
    lines = [line for line in csv_text.split("\n") if line.strip()]
    if len(lines) < 2:
        raise CsvFormatError("CSV must have at least a header row and one data row")

    headers = split_csv_line(lines[0])
    logger.debug("csv headers=%s", headers)

    records: list[RawRecord] = []
    for line_index, line in enumerate(lines[1:], start=2):
        row_number = len(records) + 2
        try:
            record = _build_record(headers, line.strip(), row_number)
        except Exception as e:
            logger.warning("error parsing row %d: %s", line_index, e)
            if on_skip is not None:
                on_skip(line_index, e)
            continue
        records.append(record)
    return records


def read_csv_file(path: Path, on_skip: SkipCallback | None = None) -> list[RawRecord]:
    """Read and parse a UTF-8 CSV file (a leading BOM is ignored)."""
    text = path.read_text(encoding="utf-8-sig")
    return parse_csv(text, on_skip=on_skip)
