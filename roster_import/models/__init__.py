"""Domain models for the roster CSV import pipeline."""

from .error_record import ErrorRecord
from .import_result import ErrorKind, ImportedUser, ImportErrorRecord, ImportResult
from .processing_result import FileStat, FileStatus, RunResult
from .raw_record import RawRecord
from .user_record import (
    CANONICAL_FIELDS,
    OPTIONAL_FIELDS,
    REQUIRED_SHAPE_FIELDS,
    CanonicalUserRecord,
    FieldMapping,
)

__all__ = [
    # Pipeline records
    "RawRecord",
    "FieldMapping",
    "CanonicalUserRecord",
    "CANONICAL_FIELDS",
    "OPTIONAL_FIELDS",
    "REQUIRED_SHAPE_FIELDS",
    # Results
    "ErrorKind",
    "ImportErrorRecord",
    "ImportedUser",
    "ImportResult",
    "ErrorRecord",
    # Run level
    "FileStatus",
    "FileStat",
    "RunResult",
]
