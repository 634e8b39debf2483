"""Date-keyed ledgers of habit completions and religious counters."""

import logging
from typing import Generic, Optional, TypeVar

from .catalogs import HabitCatalog
from .models import HabitLog, HabitType, ReligiousHabitLog
from .persistence import PersistentStore

logger = logging.getLogger(__name__)

L = TypeVar("L", HabitLog, ReligiousHabitLog)


class Ledger(Generic[L]):
    """
    Map of date -> rows, one row per habit.

    A date never maps to an empty list; the key is removed instead.
    """

    storage_key = ""

    def __init__(self, storage: PersistentStore, logs: Optional[dict[str, list[L]]] = None):
        self.storage = storage
        self.logs: dict[str, list[L]] = {date: list(rows) for date, rows in (logs or {}).items()}

    def rows(self, date: str) -> list[L]:
        return self.logs.get(date, [])

    def get_log(self, date: str, habit_id: str) -> Optional[L]:
        """Find the row for a habit on a date."""
        for row in self.rows(date):
            if row.habit_id == habit_id:
                return row
        return None

    def _commit(self, date: str, rows: list[L]):
        """Store the new rows for a date, dropping the key when empty, and save."""
        if rows:
            self.logs[date] = rows
        else:
            self.logs.pop(date, None)
        self.save()

    def to_json(self) -> dict:
        return {date: [row.to_json() for row in rows] for date, rows in self.logs.items()}

    def save(self):
        self.storage.set(self.storage_key, self.to_json())


class HabitLogLedger(Ledger[HabitLog]):
    """Completion rows for regular habits."""

    storage_key = "habitLogs"

    def __init__(
        self,
        storage: PersistentStore,
        catalog: HabitCatalog,
        logs: Optional[dict[str, list[HabitLog]]] = None,
    ):
        super().__init__(storage, logs)
        self.catalog = catalog

    def set_log(self, date: str, habit_id: str, done: bool):
        """
        Record a habit as done or not done on a date.

        Daily and custom habits keep a row either way and toggle its done
        flag. Weekly habits only keep a row for days they were performed:
        done=True adds it once, done=False removes it.

        Args:
            date: ISO date (YYYY-MM-DD)
            habit_id: Habit id from the catalog
            done: New completion state
        """
        current = self.rows(date)
        existing = self.get_log(date, habit_id)

        if self.catalog.type_of(habit_id) == HabitType.WEEKLY:
            if done:
                if existing is not None:
                    return
                rows = current + [HabitLog(date=date, habit_id=habit_id, done=True)]
            else:
                if existing is None:
                    return
                rows = [row for row in current if row.habit_id != habit_id]
        elif existing is not None:
            rows = [
                row.model_copy(update={"done": done}) if row.habit_id == habit_id else row
                for row in current
            ]
        else:
            rows = current + [HabitLog(date=date, habit_id=habit_id, done=done)]

        logger.debug(f"Habit {habit_id} on {date}: done={done}")
        self._commit(date, rows)

    def count_done_between(self, habit_id: str, start: str, end: str) -> int:
        """
        Count days in [start, end] with a done row for a habit.

        Args:
            habit_id: Habit id
            start: First ISO date, inclusive
            end: Last ISO date, inclusive

        Returns:
            Number of days
        """
        count = 0
        for date, rows in self.logs.items():
            if start <= date <= end and any(
                row.habit_id == habit_id and row.done for row in rows
            ):
                count += 1
        return count


class ReligiousHabitLedger(Ledger[ReligiousHabitLog]):
    """Counter rows for religious habits. Zero counts are never stored."""

    storage_key = "religiousHabitLogs"

    def update_count(self, date: str, habit_id: str, count: int):
        """
        Set a habit's counter on a date.

        Negative counts are clamped to 0, and a count of 0 removes the row.
        """
        if count < 0:
            logger.debug(f"Clamping count {count} for {habit_id} to 0")
            count = 0

        current = self.rows(date)
        existing = self.get_log(date, habit_id)

        if existing is not None:
            if count > 0:
                rows = [
                    row.model_copy(update={"count": count}) if row.habit_id == habit_id else row
                    for row in current
                ]
            else:
                rows = [row for row in current if row.habit_id != habit_id]
        elif count > 0:
            rows = current + [ReligiousHabitLog(date=date, habit_id=habit_id, count=count)]
        else:
            return

        logger.debug(f"Religious habit {habit_id} on {date}: count={count}")
        self._commit(date, rows)

    def get_count(self, date: str, habit_id: str) -> int:
        """Get a counter value; a missing row means 0."""
        row = self.get_log(date, habit_id)
        return row.count if row else 0
