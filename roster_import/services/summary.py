from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering for the roster import CLI."""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Format:
    SUMMARY files={n}/{n} success={s} partial={p} failed={f} rows={total}
    imported={ok} rejected={bad} skipped_rows={k} elapsed_sec={e} throughput_rps={t}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2025, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     success_files=1, partial_files=0, failed_files=0, total_rows=10,
        ...     imported_rows=10, failed_rows=0, skipped_rows=0, start_time=start,
        ...     end_time=end, elapsed_seconds=2.0, throughput_rows_per_sec=5.0,
        ... )
        >>> render_summary_line(result)  # doctest: +ELLIPSIS
        'SUMMARY files=1/1 success=1 partial=0 failed=0 rows=10 imported=10 ...'
    """
    n = result.total_files
    return (
        f"SUMMARY files={n}/{n} "
        f"success={result.success_files} "
        f"partial={result.partial_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"imported={result.imported_rows} "
        f"rejected={result.failed_rows} "
        f"skipped_rows={result.skipped_rows} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )
