from __future__ import annotations

from ..config.loader import StoreConfig
from .base import DataStore, StoreError
from .memory import MemoryUserStore
from .postgres import PostgresUserStore, resolve_dsn
from .rest import RestUserStore

__all__ = [
    "build_store",
]


def build_store(cfg: StoreConfig) -> DataStore:
    """Instantiate the configured store backend."""
    if cfg.backend == "memory":
        return MemoryUserStore(unique_key=cfg.key)
    if cfg.backend == "rest":
        rest = cfg.rest
        if rest is None:
            raise StoreError("REST store selected but no rest settings given")
        return RestUserStore(
            rest.url or "", rest.api_key or "", table=cfg.table, timeout=rest.timeout
        )
    if cfg.backend == "postgres":
        return PostgresUserStore(resolve_dsn(cfg.database), table=cfg.table)
    raise StoreError(f"unknown store backend: {cfg.backend}")
