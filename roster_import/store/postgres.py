from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

import psycopg2

from ..config.loader import DatabaseConfig
from ..db.batch_insert import BatchInsertError, BatchMetrics, batch_insert
from .base import LIST_COLUMNS, StoreError, check_identifier

"""User store writing directly to PostgreSQL through psycopg2.

Each call runs in a worker thread with its own transaction: lookups are
read-only, inserts commit on success and roll back on failure.
"""

__all__ = [
    "PostgresUserStore",
    "resolve_dsn",
]

logger = logging.getLogger(__name__)


def resolve_dsn(db_cfg: DatabaseConfig | None) -> str:
    """Resolve connection parameters; environment wins over config.

    1. DATABASE_URL / PGDSN, then the configured dsn
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE, falling back to
       the configured host/port/user/password/database
    """
    db_cfg = db_cfg or DatabaseConfig(None, None, None, None, None, None)
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


class PostgresUserStore:
    def __init__(self, dsn: str, *, table: str = "users", page_size: int = 1000) -> None:
        self.dsn = dsn
        self.table = check_identifier(table)
        self.page_size = page_size
        self._conn: Any = None

    def _connection(self) -> Any:
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(self.dsn)
            except psycopg2.Error as e:
                raise StoreError(f"database connection failed: {e}") from e
            self._conn.autocommit = False
        return self._conn

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None

    # Public API -----------------------------------------------------------------

    async def find_by_key(self, key: str, values: Sequence[str]) -> list[dict[str, Any]]:
        if not values:
            return []
        return await asyncio.to_thread(self._select_in, check_identifier(key), list(values))

    async def insert_batch(self, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        return await asyncio.to_thread(self._insert, [dict(r) for r in rows])

    async def list_users(self, *, order_by: str = "created_at", desc: bool = True) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._list, check_identifier(order_by), desc)

    # Internal helpers -----------------------------------------------------------

    def _select_in(self, key: str, values: list[str]) -> list[dict[str, Any]]:
        conn = self._connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f'SELECT * FROM "{self.table}" WHERE "{key}" = ANY(%s)', (values,))
                names = [d[0] for d in cur.description]
                found = [dict(zip(names, r, strict=False)) for r in cur.fetchall()]
            conn.rollback()  # read only; end the transaction
        except psycopg2.Error as e:
            conn.rollback()
            raise StoreError(f"Failed to check existing users: {e}") from e
        return found

    def _list(self, order_by: str, desc: bool) -> list[dict[str, Any]]:
        columns = ", ".join(f'"{c}"' for c in LIST_COLUMNS)
        direction = "DESC" if desc else "ASC"
        conn = self._connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f'SELECT {columns} FROM "{self.table}" ORDER BY "{order_by}" {direction}')
                rows = [dict(zip(LIST_COLUMNS, r, strict=False)) for r in cur.fetchall()]
            conn.rollback()
        except psycopg2.Error as e:
            conn.rollback()
            raise StoreError(f"Failed to fetch users: {e}") from e
        return rows

    def _insert(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        columns = [check_identifier(c) for c in rows[0].keys()]
        values = [[row.get(c) for c in columns] for row in rows]

        def on_metrics(m: BatchMetrics) -> None:
            logger.debug(
                "table=%s batch_size=%d elapsed=%.3fs", self.table, m.batch_size, m.elapsed_seconds
            )

        conn = self._connection()
        try:
            with conn.cursor() as cur:
                result = batch_insert(
                    cur,
                    table=self.table,
                    columns=columns,
                    rows=values,
                    returning=True,
                    page_size=self.page_size,
                    metrics_callback=on_metrics,
                )
            conn.commit()
        except (BatchInsertError, psycopg2.Error) as e:
            # covers a failed commit as well as the insert itself
            conn.rollback()
            raise StoreError(f"Failed to insert users: {e}") from e
        return result.returned_rows or []
