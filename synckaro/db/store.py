"""SQLite-backed key-value store for SyncKaro."""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "syncKaro_"
AUTH_KEY = "auth"


class KeyValueStore:
    """Namespaced key-value store persisted in a single SQLite table.

    Every value is stored as one JSON document and replaced wholesale on
    write. There is no partial update and no cross-process locking: callers
    read a whole collection, transform it, and write it back.

    If the database cannot be opened the store marks itself unavailable and
    every operation becomes a no-op returning ``None``.
    """

    TABLE = "kv"

    def __init__(self, db_path: Path, namespace: str = DEFAULT_NAMESPACE):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
            namespace: Prefix applied to every key.
        """
        self.db_path = Path(db_path)
        self.namespace = namespace
        self.available = True
        try:
            self._ensure_db_dir()
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            logger.warning("Storage unavailable at %s: %s", self.db_path, exc)
            self.available = False

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Create the key-value table on first run."""
        conn = self._get_connection()
        try:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.TABLE} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    # ==================== Generic operations ====================

    def get(self, key: str) -> Optional[Any]:
        """Get a stored value.

        Args:
            key: Un-prefixed key.

        Returns:
            The decoded JSON value, or None if missing.
        """
        if not self.available:
            return None
        conn = self._get_connection()
        try:
            row = conn.execute(
                f"SELECT value FROM {self.TABLE} WHERE key = ?",
                (self._key(key),),
            ).fetchone()
            if row is None:
                return None
            return json.loads(row["value"])
        finally:
            conn.close()

    def set(self, key: str, value: Any) -> None:
        """Store a value, replacing whatever was there.

        Args:
            key: Un-prefixed key.
            value: JSON-serialisable value.

        Raises:
            TypeError: If the value cannot be serialised.
        """
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, Any]) -> None:
        """Store several values in one transaction.

        Args:
            values: Mapping of un-prefixed keys to JSON-serialisable values.
        """
        if not self.available:
            return
        # Serialise everything first so a bad value leaves the store untouched
        encoded = [(self._key(k), json.dumps(v)) for k, v in values.items()]
        updated_at = datetime.now(timezone.utc).isoformat()
        conn = self._get_connection()
        try:
            conn.executemany(
                f"""
                INSERT OR REPLACE INTO {self.TABLE} (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                [(k, v, updated_at) for k, v in encoded],
            )
            conn.commit()
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        """Remove a key if present.

        Args:
            key: Un-prefixed key.
        """
        if not self.available:
            return
        conn = self._get_connection()
        try:
            conn.execute(f"DELETE FROM {self.TABLE} WHERE key = ?", (self._key(key),))
            conn.commit()
        finally:
            conn.close()

    def keys(self) -> list[str]:
        """Get all un-prefixed keys stored under this namespace."""
        if not self.available:
            return []
        conn = self._get_connection()
        try:
            rows = conn.execute(f"SELECT key FROM {self.TABLE} ORDER BY key").fetchall()
            prefix_len = len(self.namespace)
            return [
                row["key"][prefix_len:]
                for row in rows
                if row["key"].startswith(self.namespace)
            ]
        finally:
            conn.close()

    def clear(self) -> None:
        """Remove every key under this namespace, leaving other namespaces intact."""
        for key in self.keys():
            self.remove(key)

    # ==================== Auth ====================

    def set_auth(self, data: dict) -> None:
        """Persist the signed-in user's auth data."""
        self.set(AUTH_KEY, data)

    def get_auth(self) -> Optional[dict]:
        """Get the stored auth data, if any."""
        return self.get(AUTH_KEY)

    def clear_auth(self) -> None:
        """Forget the signed-in user."""
        self.remove(AUTH_KEY)
