from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import ImportConfig
from ..logging.error_log import ErrorLogBuffer
from ..mapping.field_mapper import map_fields
from ..models.error_record import ErrorRecord
from ..models.import_result import ImportResult
from ..models.processing_result import FileStat, FileStatus, RunResult
from ..models.user_record import FieldMapping
from ..parsing.csv_reader import CsvFormatError, read_csv_file
from ..store.base import DataStore
from .importer import import_users
from .progress import ProgressTracker
from .validator import ValidationOutcome, validate_users

"""Run orchestration: CSV files -> parse -> map -> import.

Files are processed one after another. A file that cannot be read or has no
header/data section fails on its own; the remaining files still run. All
rejected/skipped rows go to the error log, which is flushed once per run.
"""

__all__ = [
    "ProcessingError",
    "FileOutcome",
    "scan_csv_files",
    "process_file",
    "process_all",
    "preview_file",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal error that prevents the run from starting."""


@dataclass
class FileOutcome:
    """Result of one file: the importer result (None on a file-level failure)."""
    stat: FileStat
    result: ImportResult | None = None
    skipped_rows: list[int] = field(default_factory=list)


def scan_csv_files(directory: Path) -> list[Path]:
    """List *.csv files in `directory` (non-recursive, sorted by name).

    Raises:
        ProcessingError: directory missing, not a directory, or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"path is not a directory: {directory}")
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
    except OSError as e:
        raise ProcessingError(f"error reading directory {directory}: {e}") from e


def _file_status(result: ImportResult) -> FileStatus:
    if result.successful_imports == 0:
        return FileStatus.FAILED
    if result.failed_imports > 0:
        return FileStatus.PARTIAL
    return FileStatus.SUCCESS


async def process_file(
    path: Path,
    config: ImportConfig,
    store: DataStore,
    error_log: ErrorLogBuffer,
) -> FileOutcome:
    """Import one CSV file; never raises for data or store problems."""
    start = datetime.now(UTC)
    skipped: list[int] = []

    def on_skip(row_number: int, exc: Exception) -> None:
        skipped.append(row_number)
        error_log.append(ErrorRecord.create(path.name, row_number, "ROW_SKIPPED", str(exc)))

    try:
        records = read_csv_file(path, on_skip=on_skip)
    except (CsvFormatError, OSError, UnicodeDecodeError) as e:
        logger.error("file=%s cannot be imported: %s", path.name, e)
        error_log.append(ErrorRecord.create(path.name, -1, "FORMAT_ERROR", str(e)))
        elapsed = (datetime.now(UTC) - start).total_seconds()
        stat = FileStat(
            file_name=path.name,
            status=FileStatus.FAILED,
            total_rows=0,
            imported_rows=0,
            failed_rows=0,
            skipped_rows=len(skipped),
            elapsed_seconds=elapsed,
            error=str(e),
        )
        return FileOutcome(stat=stat, result=None, skipped_rows=skipped)

    users = map_fields(records, config.field_mappings)
    result = await import_users(
        users,
        store,
        key=config.store.key,
        persist_interest_fields=config.persist_interest_fields,
    )
    error_log.extend([ErrorRecord.from_import_error(path.name, e) for e in result.errors])

    elapsed = (datetime.now(UTC) - start).total_seconds()
    status = _file_status(result)
    logger.info(
        "file=%s status=%s rows=%d imported=%d failed=%d skipped_rows=%d",
        path.name,
        status.value,
        result.total_rows,
        result.successful_imports,
        result.failed_imports,
        len(skipped),
    )
    for err in result.errors:
        logger.debug("file=%s row=%d email=%s error=%s", path.name, err.row, err.email, err.error)

    stat = FileStat(
        file_name=path.name,
        status=status,
        total_rows=result.total_rows,
        imported_rows=result.successful_imports,
        failed_rows=result.failed_imports,
        skipped_rows=len(skipped),
        elapsed_seconds=elapsed,
    )
    return FileOutcome(stat=stat, result=result, skipped_rows=skipped)


async def process_all(
    paths: list[Path],
    config: ImportConfig,
    store: DataStore,
    *,
    error_log: ErrorLogBuffer | None = None,
) -> tuple[RunResult, list[FileOutcome]]:
    """Process every file and aggregate the run result.

    Args:
        paths: CSV files in processing order
        config: loaded configuration (mappings, store key, interest flag)
        store: store shared by all files of the run
        error_log: buffer for rejected rows; created from config when omitted

    Returns:
        (RunResult, per-file outcomes in input order)
    """
    start_time = datetime.now(UTC)
    if error_log is None:
        error_log = ErrorLogBuffer(config.error_log_dir)

    outcomes: list[FileOutcome] = []
    counts = {status: 0 for status in FileStatus}
    total_rows = imported = failed = skipped = 0

    with ProgressTracker(len(paths), description="Importing files") as progress:
        for path in paths:
            progress.start_file(path)
            outcome = await process_file(path, config, store, error_log)
            outcomes.append(outcome)

            stat = outcome.stat
            counts[stat.status] += 1
            total_rows += stat.total_rows
            imported += stat.imported_rows
            failed += stat.failed_rows
            skipped += stat.skipped_rows

            progress.finish_file(stat)

    try:
        log_path = error_log.flush()
    except OSError as e:
        # keep the run result when the log cannot be written
        logger.warning("failed writing error log: %s", e)
        log_path = None
    if log_path is not None:
        logger.info("error log written to %s", log_path)

    end_time = datetime.now(UTC)
    elapsed = (end_time - start_time).total_seconds()
    throughput = imported / elapsed if elapsed > 0 else 0.0

    run = RunResult(
        success_files=counts[FileStatus.SUCCESS],
        partial_files=counts[FileStatus.PARTIAL],
        failed_files=counts[FileStatus.FAILED],
        total_rows=total_rows,
        imported_rows=imported,
        failed_rows=failed,
        skipped_rows=skipped,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed,
        throughput_rows_per_sec=throughput,
        file_stats=[o.stat for o in outcomes],
    )
    return run, outcomes


def preview_file(path: Path, mappings: list[FieldMapping] | None = None) -> ValidationOutcome:
    """Dry run: parse, map and validate a file without touching a store.

    Raises:
        CsvFormatError: the file has no header/data section
    """
    records = read_csv_file(path)
    return validate_users(map_fields(records, mappings))
