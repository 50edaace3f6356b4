from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .import_result import ErrorKind, ImportErrorRecord

"""ErrorRecord model for the JSON Lines error log.

One ErrorRecord per rejected or skipped row, plus file-level entries with
row=-1 (CSV could not be parsed at all). The key set is fixed; consumers of
the log rely on it.
"""

__all__ = [
    "ErrorRecord",
    "ERROR_TYPES",
]

ERROR_TYPES = {
    "FORMAT_ERROR",
    "ROW_SKIPPED",
    "VALIDATION_ERROR",
    "DUPLICATE_ERROR",
    "STORE_ERROR",
}

_KIND_TO_TYPE = {
    ErrorKind.VALIDATION: "VALIDATION_ERROR",
    ErrorKind.DUPLICATE: "DUPLICATE_ERROR",
    ErrorKind.STORE: "STORE_ERROR",
}


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: CSV filename being processed
        row: Row number as reported to the user. -1 for file-level errors,
            0 for store failures that affect the whole batch
        email: Email of the row when known
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable reason
    """
    timestamp: str
    file: str
    row: int
    email: str | None
    error_type: str
    message: str

    @staticmethod
    def create(
        file: str, row: int, error_type: str, message: str, email: str | None = None
    ) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            email=email,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_import_error(file: str, error: ImportErrorRecord) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            row=error.row,
            error_type=_KIND_TO_TYPE[error.kind],
            message=error.error,
            email=error.email,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
