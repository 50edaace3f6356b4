from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Run-level result models for the roster import CLI.

These aggregate per-file ImportResults into the numbers shown on the SUMMARY
line and used for the exit code.
"""


class FileStatus(Enum):
    """Outcome of one CSV file.

    - SUCCESS: every row imported
    - PARTIAL: some rows imported, some rejected
    - FAILED: nothing imported (format error, all rows rejected, store failure)
    """
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    status: FileStatus
    total_rows: int  # rows handed to the importer
    imported_rows: int
    failed_rows: int
    skipped_rows: int  # rows dropped by the parser
    elapsed_seconds: float
    error: str | None = None  # file-level failure reason


@dataclass(frozen=True)
class RunResult:
    """Aggregated results for one CLI run."""
    success_files: int
    partial_files: int
    failed_files: int
    total_rows: int
    imported_rows: int
    failed_rows: int
    skipped_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float  # imported_rows / elapsed
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.partial_files + self.failed_files
