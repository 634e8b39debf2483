"""On-device key/value persistence."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

PROBE_KEY = "__test_storage__"


class StorageUnavailable(Exception):
    """The persistence backend cannot be written to."""


class CorruptRecord(Exception):
    """A stored value could not be decoded."""


class Backend(Protocol):
    """Raw string storage used by PersistentStore."""

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SQLiteBackend:
    """Single-table SQLite key/value file."""

    def __init__(self, db_path: str = "data/wellbeing.db"):
        """Initialize database."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create the kv table if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()
        logger.info(f"Database initialized at {self.db_path}")

    def read(self, key: str) -> Optional[str]:
        """Get raw value by key."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def write(self, key: str, value: str):
        """Insert or replace a raw value."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, value)
            )
            conn.commit()

    def delete(self, key: str):
        """Delete a key if present."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()


class MemoryBackend:
    """Dict-backed storage, lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, value: str):
        self.data[key] = value

    def delete(self, key: str):
        self.data.pop(key, None)


class PersistentStore:
    """
    JSON key/value store over a backend.

    Availability is probed once on construction. When the probe fails every
    operation becomes a no-op and callers keep their state in memory only.
    """

    def __init__(self, backend: Optional[Backend]):
        """
        Initialize store.

        Args:
            backend: Raw storage, or None to run volatile from the start
        """
        self.backend = backend
        self.available = False

        try:
            self._probe()
            self.available = True
        except StorageUnavailable as e:
            logger.warning(f"Storage unavailable, running in volatile mode: {e}")

    def _probe(self):
        """Write and delete a throwaway key."""
        if self.backend is None:
            raise StorageUnavailable("no backend configured")

        try:
            self.backend.write(PROBE_KEY, PROBE_KEY)
            self.backend.delete(PROBE_KEY)
        except Exception as e:
            raise StorageUnavailable(str(e)) from e

    def get(self, key: str) -> Optional[Any]:
        """
        Load and decode a value.

        Returns:
            Decoded value, or None when absent, unreadable or corrupt.
            A read failure switches the store to volatile mode so nothing
            unread is overwritten later in the session.
        """
        if not self.available:
            return None

        try:
            raw = self.backend.read(key)
        except Exception as e:
            logger.error(f"Failed to read {key}, switching to volatile mode: {e}")
            self.available = False
            return None

        if raw is None:
            return None

        try:
            return self._decode(key, raw)
        except CorruptRecord as e:
            logger.error(f"Error parsing {key} from storage, removing it: {e}")
            self.remove(key)
            return None

    def _decode(self, key: str, raw: str) -> Any:
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise CorruptRecord(f"{key}: {e}") from e

    def set(self, key: str, value: Any):
        """Encode and save a value."""
        if not self.available:
            return

        try:
            self.backend.write(key, json.dumps(value, ensure_ascii=False))
            logger.debug(f"Saved {key}")
        except Exception as e:
            logger.error(f"Failed to save {key}: {e}")

    def remove(self, key: str):
        """Delete a key."""
        if not self.available:
            return

        try:
            self.backend.delete(key)
            logger.debug(f"Removed {key}")
        except Exception as e:
            logger.error(f"Failed to remove {key}: {e}")
