from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import requests

from .base import LIST_COLUMNS, StoreError, check_identifier

"""User store backed by a PostgREST-style HTTP interface (/rest/v1/<table>).

Requests are blocking (requests.Session) and run in a worker thread so the
importer can await them. Any transport error or non-2xx response becomes a
StoreError.
"""

__all__ = [
    "RestUserStore",
]

logger = logging.getLogger(__name__)


def _quote(value: str) -> str:
    return '"' + value.replace('"', '\\"') + '"'


class RestUserStore:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "users",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise StoreError("REST store url is not configured")
        if not api_key:
            raise StoreError("REST store api key is not configured")
        self.base_url = base_url.rstrip("/")
        self.table = check_identifier(table)
        self.timeout = timeout
        self.session = session or requests.Session()
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

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

    def close(self) -> None:
        self.session.close()

    # Internal helpers -----------------------------------------------------------

    def _select_in(self, key: str, values: list[str]) -> list[dict[str, Any]]:
        params = {
            "select": key,
            key: f"in.({','.join(_quote(v) for v in values)})",
        }
        try:
            response = self.session.get(
                self.table_url, headers=self._headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise StoreError(f"Failed to check existing users: {e}") from e
        if not response.ok:
            raise StoreError(
                f"Failed to check existing users: {response.status_code} {response.reason} - {response.text}"
            )
        data = response.json()
        logger.debug("lookup %s in %d values -> %d rows", key, len(values), len(data))
        return data

    def _insert(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        headers = {**self._headers, "Prefer": "return=representation"}
        try:
            response = self.session.post(
                self.table_url, headers=headers, json=rows, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise StoreError(f"Failed to insert users: {e}") from e
        if not response.ok:
            raise StoreError(
                f"Failed to insert users: {response.status_code} {response.reason} - {response.text}"
            )
        created = response.json()
        logger.debug("inserted %d rows into %s", len(created), self.table)
        return created

    def _list(self, order_by: str, desc: bool) -> list[dict[str, Any]]:
        params = {
            "select": ",".join(LIST_COLUMNS),
            "order": f"{order_by}.{'desc' if desc else 'asc'}",
        }
        try:
            response = self.session.get(
                self.table_url, headers=self._headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise StoreError(f"Failed to fetch users: {e}") from e
        if not response.ok:
            raise StoreError(
                f"Failed to fetch users: {response.status_code} {response.reason} - {response.text}"
            )
        return response.json()
