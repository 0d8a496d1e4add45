"""
Key-value persistence for notification state.

Uses SQLite for lightweight persistence of serialized documents.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when reading from or writing to the key-value store fails."""
    pass


class KeyValueStore(ABC):
    """Base class for string key-value stores."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            Stored value, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a value, replacing any previous one."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass


class MemoryKeyValueStore(KeyValueStore):
    """In-process store, used for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None


class SQLiteKeyValueStore(KeyValueStore):
    """
    SQLite-based key-value store.

    Each key maps to one row; writes replace the whole value.
    """

    def __init__(self, db_path: str = "~/.local/share/poam-alerts/notifications.db"):
        """
        Initialize key-value store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = str(Path(db_path).expanduser())

        # Ensure directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        # Initialize database
        self._init_db()

        logger.info(f"Initialized SQLiteKeyValueStore at {self.db_path}")

    def _init_db(self) -> None:
        """Create database schema if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def get(self, key: str) -> Optional[str]:
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM kv WHERE key = ?",
                    (key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read key {key}: {e}") from e

        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO kv (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                """, (key, value, datetime.now().isoformat()))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write key {key}: {e}") from e

        logger.debug(f"Wrote {len(value)} bytes to key {key}")

    def delete(self, key: str) -> bool:
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete key {key}: {e}") from e

        return cursor.rowcount > 0
