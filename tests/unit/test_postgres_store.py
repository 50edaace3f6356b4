from __future__ import annotations
from unittest.mock import MagicMock

import psycopg2
import pytest

from roster_import.config.loader import DatabaseConfig
from roster_import.db.batch_insert import InsertResult
from roster_import.store import postgres as mod
from roster_import.store.base import StoreError
from roster_import.store.postgres import PostgresUserStore, resolve_dsn


@pytest.fixture()
def clean_pg_env(monkeypatch):
    for name in ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE"):
        monkeypatch.delenv(name, raising=False)


def _conn_with_cursor(cursor: MagicMock) -> MagicMock:
    conn = MagicMock()
    conn.closed = 0
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


def test_resolve_dsn_prefers_database_url(clean_pg_env, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u@h/db")
    cfg = DatabaseConfig("cfg-host", 5433, "cfg", None, "cfgdb", "dbname=from_cfg")
    assert resolve_dsn(cfg) == "postgresql://u@h/db"


def test_resolve_dsn_from_config_parts(clean_pg_env):
    cfg = DatabaseConfig("db.local", 5433, "app", "secret", "roster", None)
    assert resolve_dsn(cfg) == "host=db.local port=5433 user=app dbname=roster password=secret"


def test_resolve_dsn_env_parts_override_config(clean_pg_env, monkeypatch):
    monkeypatch.setenv("PGHOST", "envhost")
    cfg = DatabaseConfig("db.local", None, None, None, None, None)
    assert resolve_dsn(cfg) == "host=envhost port=5432 user=postgres dbname=postgres"


@pytest.mark.asyncio
async def test_find_by_key_selects_with_any(monkeypatch):
    cursor = MagicMock()
    cursor.description = [("id",), ("email",)]
    cursor.fetchall.return_value = [(1, "a@x.io")]
    conn = _conn_with_cursor(cursor)
    monkeypatch.setattr(mod.psycopg2, "connect", lambda dsn: conn)

    rows = await PostgresUserStore("dbname=x").find_by_key("email", ["a@x.io"])
    assert rows == [{"id": 1, "email": "a@x.io"}]
    sql, params = cursor.execute.call_args[0]
    assert sql == 'SELECT * FROM "users" WHERE "email" = ANY(%s)'
    assert params == (["a@x.io"],)
    conn.rollback.assert_called_once()


@pytest.mark.asyncio
async def test_insert_batch_commits(monkeypatch):
    cursor = MagicMock()
    conn = _conn_with_cursor(cursor)
    monkeypatch.setattr(mod.psycopg2, "connect", lambda dsn: conn)
    captured = {}

    def fake_batch_insert(cur, table, columns, rows, returning, page_size, metrics_callback):
        captured.update(table=table, columns=columns, rows=rows, returning=returning)
        return InsertResult(inserted_rows=1, returned_rows=[{"id": 9, "email": "a@x.io"}])

    monkeypatch.setattr(mod, "batch_insert", fake_batch_insert)
    created = await PostgresUserStore("dbname=x").insert_batch([{"email": "a@x.io", "name": "A"}])

    assert created == [{"id": 9, "email": "a@x.io"}]
    assert captured == {"table": "users", "columns": ["email", "name"], "rows": [["a@x.io", "A"]], "returning": True}
    conn.commit.assert_called_once()


@pytest.mark.asyncio
async def test_insert_batch_failure_rolls_back(monkeypatch):
    conn = _conn_with_cursor(MagicMock())
    monkeypatch.setattr(mod.psycopg2, "connect", lambda dsn: conn)

    def failing(*a, **kw):
        raise mod.BatchInsertError("duplicate key")

    monkeypatch.setattr(mod, "batch_insert", failing)
    with pytest.raises(StoreError) as e:
        await PostgresUserStore("dbname=x").insert_batch([{"email": "a@x.io"}])
    assert str(e.value) == "Failed to insert users: duplicate key"
    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()


@pytest.mark.asyncio
async def test_connection_failure_becomes_store_error(monkeypatch):
    def refuse(dsn):
        raise psycopg2.OperationalError("could not connect")

    monkeypatch.setattr(mod.psycopg2, "connect", refuse)
    with pytest.raises(StoreError) as e:
        await PostgresUserStore("dbname=x").find_by_key("email", ["a@x.io"])
    assert "could not connect" in str(e.value)


def test_close_is_idempotent(monkeypatch):
    conn = _conn_with_cursor(MagicMock())
    store = PostgresUserStore("dbname=x")
    store._conn = conn
    store.close()
    store.close()
    conn.close.assert_called_once()


@pytest.mark.asyncio
async def test_commit_failure_rolls_back(monkeypatch):
    conn = _conn_with_cursor(MagicMock())
    conn.commit.side_effect = psycopg2.OperationalError("server closed the connection")
    monkeypatch.setattr(mod.psycopg2, "connect", lambda dsn: conn)
    monkeypatch.setattr(mod, "batch_insert", lambda *a, **kw: InsertResult(inserted_rows=1, returned_rows=[]))

    with pytest.raises(StoreError) as e:
        await PostgresUserStore("dbname=x").insert_batch([{"email": "a@x.io"}])
    assert str(e.value) == "Failed to insert users: server closed the connection"
    conn.rollback.assert_called_once()


@pytest.mark.asyncio
async def test_list_users_orders_newest_first(monkeypatch):
    cursor = MagicMock()
    cursor.fetchall.return_value = [(2, "b@x.io", "B", "Two", "2025-02-01"), (1, "a@x.io", "A", "One", "2025-01-01")]
    conn = _conn_with_cursor(cursor)
    monkeypatch.setattr(mod.psycopg2, "connect", lambda dsn: conn)

    rows = await PostgresUserStore("dbname=x").list_users()
    assert [r["id"] for r in rows] == [2, 1]
    assert rows[0] == {"id": 2, "email": "b@x.io", "first_name": "B", "last_name": "Two", "created_at": "2025-02-01"}
    [sql] = cursor.execute.call_args[0]
    assert sql == (
        'SELECT "id", "email", "first_name", "last_name", "created_at" FROM "users" ORDER BY "created_at" DESC'
    )


@pytest.mark.asyncio
async def test_list_users_rejects_bad_order_column():
    with pytest.raises(StoreError):
        await PostgresUserStore("dbname=x").list_users(order_by="created_at; drop")
