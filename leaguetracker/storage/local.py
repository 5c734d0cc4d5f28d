"""
Local key-value persistence.

Each tracker process keeps its own copy of the league state so it can start
and keep working without the remote store. Values are opaque strings; the
caller owns serialization.
"""

import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional


class LocalStore(ABC):
    """Minimal synchronous string key-value store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is missing."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass

    def close(self) -> None:
        """Release resources held by the store."""
        pass


class MemoryLocalStore(LocalStore):
    """Process-local store; state is lost on restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SQLiteLocalStore(LocalStore):
    """
    Key-value store backed by a single SQLite table.

    Thread-safe with one shared connection and a lock.
    """

    def __init__(self, db_path: str = "data/local_state.db"):
        """
        Create the store.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False, timeout=30.0)
            self._conn.execute('''
                CREATE TABLE IF NOT EXISTS local_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            self._conn.commit()
        return self._conn

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            row = self._get_connection().execute(
                "SELECT value FROM local_state WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            conn = self._get_connection()
            conn.execute(
                "INSERT OR REPLACE INTO local_state (key, value, updated_at) "
                "VALUES (?, ?, CURRENT_TIMESTAMP)",
                (key, value)
            )
            conn.commit()

    def remove_item(self, key: str) -> None:
        with self._lock:
            conn = self._get_connection()
            conn.execute("DELETE FROM local_state WHERE key = ?", (key,))
            conn.commit()

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
