from .base import DataStore, StoreError
from .memory import MemoryUserStore

__all__ = [
    "DataStore",
    "StoreError",
    "MemoryUserStore",
]
