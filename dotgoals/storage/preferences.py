"""Key-value preferences stored beside the goals table."""

import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Small string key-value table for UI state such as the selected goal."""

    def __init__(self, db_path: str = "data/goals.db"):
        """Initialize store."""
        self.db_path = Path(db_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a short-lived connection, creating the table on first use."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            with conn:
                yield conn

    def get(self, key: str) -> Optional[str]:
        """Get a preference value, or None if unset."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM preferences WHERE key = ?", (key,)
                ).fetchone()
        except (sqlite3.Error, OSError) as e:
            raise StorageReadError(f"Cannot read preference {key!r}") from e

        return row[0] if row else None

    def set(self, key: str, value: str):
        """Store a preference value, replacing any previous one."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO preferences (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
        except (sqlite3.Error, OSError) as e:
            raise StorageWriteError(f"Cannot write preference {key!r}") from e

        logger.debug(f"Preference {key} = {value}")
