from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

"""Store capability used by the importer.

The importer only needs a batched lookup by identity key and a batched insert
that returns the created rows; `list_users` backs the imported-users listing.
Implementations live next to this module.
"""

__all__ = [
    "DataStore",
    "LIST_COLUMNS",
    "StoreError",
    "check_identifier",
]

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")

# columns returned by list_users
LIST_COLUMNS: tuple[str, ...] = ("id", "email", "first_name", "last_name", "created_at")


class StoreError(Exception):
    """Raised by a DataStore when a store call fails."""


@runtime_checkable
class DataStore(Protocol):
    async def find_by_key(self, key: str, values: Sequence[str]) -> list[dict[str, Any]]:
        """Return stored rows whose `key` column is one of `values`."""
        ...

    async def insert_batch(self, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Insert all rows in one call and return them as created by the store."""
        ...

    async def list_users(self, *, order_by: str = "created_at", desc: bool = True) -> list[dict[str, Any]]:
        """Return stored users (LIST_COLUMNS only), sorted by `order_by`."""
        ...

    def close(self) -> None:
        """Release connections; the store is not used afterwards."""
        ...


def check_identifier(name: str) -> str:
    """Only alphanumeric characters and underscores are allowed in table/column names."""
    if not _IDENTIFIER_RE.match(name):
        raise StoreError(f"invalid identifier: {name!r}")
    return name
