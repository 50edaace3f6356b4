from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from .base import LIST_COLUMNS, StoreError

"""In-process user store.

Behaves like a table with a unique identity key: a batch containing a key that
already exists (in the table or earlier in the same batch) is rejected as a
whole, the way a unique constraint would reject the INSERT.
"""

__all__ = [
    "MemoryUserStore",
]


class MemoryUserStore:
    def __init__(
        self, rows: Sequence[Mapping[str, Any]] | None = None, *, unique_key: str = "email"
    ) -> None:
        self.unique_key = unique_key
        self.rows: list[dict[str, Any]] = [dict(r) for r in rows or []]
        self.lookups = 0
        self.inserts = 0

    async def find_by_key(self, key: str, values: Sequence[str]) -> list[dict[str, Any]]:
        self.lookups += 1
        wanted = set(values)
        if not wanted:
            return []
        return [dict(r) for r in self.rows if r.get(key) in wanted]

    async def insert_batch(self, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        self.inserts += 1
        seen = {r.get(self.unique_key) for r in self.rows}
        created: list[dict[str, Any]] = []
        now = datetime.now(UTC).isoformat()
        for row in rows:
            key_value = row.get(self.unique_key)
            if key_value in seen:
                raise StoreError(
                    f'duplicate key value violates unique constraint "{self.unique_key}": {key_value}'
                )
            seen.add(key_value)
            stored = dict(row)
            stored.setdefault("id", str(uuid.uuid4()))
            stored.setdefault("created_at", now)
            stored.setdefault("updated_at", stored["created_at"])
            created.append(stored)
        self.rows.extend(created)
        return [dict(r) for r in created]

    async def list_users(self, *, order_by: str = "created_at", desc: bool = True) -> list[dict[str, Any]]:
        ordered = sorted(self.rows, key=lambda r: str(r.get(order_by) or ""), reverse=desc)
        return [{c: r.get(c) for c in LIST_COLUMNS} for r in ordered]

    def close(self) -> None:
        pass
