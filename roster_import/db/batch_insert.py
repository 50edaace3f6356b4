from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

"""Batched INSERT helper built on psycopg2.extras.execute_values.

Identifiers are expected to be validated by the caller. With returning=True
the created rows are fetched and returned as dicts keyed by column name
(cursor.description order).
"""

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "batch_insert",
]


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing data for a single batch insert."""
    batch_size: int
    elapsed_seconds: float
    start_time: float
    end_time: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    returned_rows: list[dict[str, Any]] | None = None


def _rows_as_dicts(cursor: Any, fetched: list[Sequence[Any]]) -> list[dict[str, Any]]:
    description = getattr(cursor, "description", None)
    if not description:
        raise BatchInsertError("RETURNING rows have no column description")
    names = [d[0] for d in description]
    return [dict(zip(names, row, strict=False)) for row in fetched]


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    returning: bool = False,
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Perform a batched INSERT.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table (validated identifier)
    columns: insert columns, same order as each row
    rows: row value sequences
    returning: append `RETURNING *` and fetch the created rows
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics after the statement ran (not called
        for an empty batch)
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_rows=[] if returning else None)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    sql = f'INSERT INTO "{table}" ({cols_sql}) VALUES %s'
    if returning:
        sql += " RETURNING *"

    start_time = time.time()
    try:
        # fetch=True collects RETURNING rows across pages
        fetched = execute_values(cursor, sql, rows_list, page_size=page_size, fetch=returning)
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    returned = None
    if returning:
        returned = _rows_as_dicts(cursor, fetched or [])

    return InsertResult(inserted_rows=len(rows_list), returned_rows=returned)
