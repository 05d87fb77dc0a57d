"""SQLite storage for goals."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotgoals.goals.models import Goal, GoalType, PercentageGoal, TimeframeGoal

from .errors import StorageInitError, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)


class GoalDatabase:
    """
    SQLite table of goals.

    One connection is opened by `initialize()` and held until `close()`.
    Callers serialize access; the connection may be used from a worker
    thread.
    """

    def __init__(self, db_path: str = "data/goals.db"):
        """Initialize database."""
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    def initialize(self):
        """Open the database and create tables if they don't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            if self._conn is None:
                self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
                self._conn.row_factory = sqlite3.Row

            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS goals (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    progress INTEGER,
                    start_date TEXT,
                    end_date TEXT
                )
            """)
            self._migrate()
            self._conn.commit()
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Error initializing database at {self.db_path}: {e}")
            self.close()
            raise StorageInitError(f"Cannot open goal database at {self.db_path}") from e

        logger.info(f"Database initialized at {self.db_path}")

    def _migrate(self):
        """Add columns missing from databases created by older versions."""
        columns = {row["name"] for row in self._conn.execute("PRAGMA table_info(goals)")}

        for column in ("start_date", "end_date"):
            if column not in columns:
                logger.info(f"Adding {column} column to goals table")
                self._conn.execute(f"ALTER TABLE goals ADD COLUMN {column} TEXT")

        # Early versions stored the end date in a camelCase column
        if "endDate" in columns and "end_date" not in columns:
            self._conn.execute("UPDATE goals SET end_date = endDate")

    def close(self):
        """Close the connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug(f"Closed database at {self.db_path}")

    def get_all(self) -> list[Goal]:
        """Get all goals in insertion order."""
        if self._conn is None:
            raise StorageReadError("Database not initialized")

        try:
            rows = self._conn.execute("SELECT * FROM goals ORDER BY id").fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error getting goals: {e}")
            raise StorageReadError("Cannot read goals") from e

        goals = []
        for row in rows:
            goal = self._row_to_goal(row)
            if goal is not None:
                goals.append(goal)

        logger.debug(f"Loaded {len(goals)} goals")
        return goals

    def save(self, goal: Goal) -> Goal:
        """
        Insert or update a goal.

        Args:
            goal: Goal to store; updated in place when it has an id

        Returns:
            The goal, carrying its database id
        """
        if self._conn is None:
            raise StorageWriteError("Database not initialized")

        values = self._goal_to_row(goal)

        try:
            if goal.id is not None:
                cursor = self._conn.execute(
                    """
                    UPDATE goals
                    SET name = ?, type = ?, progress = ?, start_date = ?, end_date = ?
                    WHERE id = ?
                    """,
                    (*values, goal.id),
                )
                self._conn.commit()

                if cursor.rowcount == 0:
                    logger.warning(f"Update matched no stored goal with id {goal.id}")
                else:
                    logger.info(f"Updated goal: {goal.name} ({goal.id})")
                return goal

            cursor = self._conn.execute(
                """
                INSERT INTO goals (name, type, progress, start_date, end_date)
                VALUES (?, ?, ?, ?, ?)
                """,
                values,
            )
            self._conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error saving goal {goal.name!r}: {e}")
            self._rollback()
            raise StorageWriteError(f"Cannot save goal {goal.name!r}") from e

        saved = goal.model_copy(update={"id": cursor.lastrowid})
        logger.info(f"Created goal: {saved.name} ({saved.id})")
        return saved

    def delete(self, goal_id: int):
        """Delete goal by id. Unknown ids are ignored."""
        if self._conn is None:
            raise StorageWriteError("Database not initialized")

        try:
            cursor = self._conn.execute("DELETE FROM goals WHERE id = ?", (goal_id,))
            self._conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error deleting goal {goal_id}: {e}")
            self._rollback()
            raise StorageWriteError(f"Cannot delete goal {goal_id}") from e

        if cursor.rowcount:
            logger.info(f"Deleted goal {goal_id}")
        else:
            logger.debug(f"No goal with id {goal_id} to delete")

    def _rollback(self):
        try:
            self._conn.rollback()
        except sqlite3.Error as e:
            logger.warning(f"Rollback failed: {e}")

    def _goal_to_row(self, goal: Goal) -> tuple:
        """Flatten a goal into (name, type, progress, start_date, end_date)."""
        if isinstance(goal, TimeframeGoal):
            return (
                goal.name,
                GoalType.TIMEFRAME.value,
                None,
                goal.start_date.isoformat() if goal.start_date else None,
                goal.end_date.isoformat() if goal.end_date else None,
            )

        return (goal.name, GoalType.PERCENTAGE.value, goal.progress, None, None)

    def _row_to_goal(self, row: sqlite3.Row) -> Optional[Goal]:
        """
        Build a goal from a row.

        Columns belonging to the other goal type are ignored.

        Returns:
            Goal, or None if the row has an unknown type
        """
        goal_type = row["type"]

        if goal_type == GoalType.PERCENTAGE.value:
            return PercentageGoal(
                id=row["id"],
                name=row["name"],
                progress=row["progress"] if row["progress"] is not None else 0,
            )

        if goal_type == GoalType.TIMEFRAME.value:
            return TimeframeGoal(
                id=row["id"],
                name=row["name"],
                start_date=_parse_date(row["start_date"]),
                end_date=_parse_date(row["end_date"]),
            )

        logger.warning(f"Skipping goal {row['id']} with unknown type {goal_type!r}")
        return None


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO-8601 date, treating bad values as unset."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Ignoring unparseable stored date: {value!r}")
        return None
