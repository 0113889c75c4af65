"""Persistence layer for SyncKaro."""

from synckaro.db.repositories import Repositories
from synckaro.db.store import KeyValueStore

__all__ = ["KeyValueStore", "Repositories"]
