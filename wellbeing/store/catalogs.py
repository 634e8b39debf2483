"""Append-only habit catalogs."""

import logging
from typing import Generic, Optional, TypeVar

from .models import Habit, HabitType, ReligiousHabit
from .persistence import PersistentStore

logger = logging.getLogger(__name__)

T = TypeVar("T", Habit, ReligiousHabit)


class Catalog(Generic[T]):
    """Ordered list of catalog records persisted under one key."""

    storage_key = ""

    def __init__(self, storage: PersistentStore, records: list[T]):
        self.storage = storage
        self.records: list[T] = list(records)

    def __iter__(self):
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def get(self, record_id: str) -> Optional[T]:
        """Find a record by id."""
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def append(self, record: T) -> T:
        """Add a record to the end of the catalog and save."""
        self.records.append(record)
        logger.info(f"Added {record.name} ({record.id}) to {self.storage_key}")
        self.save()
        return record

    def to_json(self) -> list[dict]:
        return [record.to_json() for record in self.records]

    def save(self):
        self.storage.set(self.storage_key, self.to_json())


class HabitCatalog(Catalog[Habit]):
    storage_key = "habits"

    def type_of(self, habit_id: str) -> HabitType:
        """Get a habit's cadence; unknown habits count as daily."""
        habit = self.get(habit_id)
        if habit is None:
            return HabitType.DAILY
        return HabitType(habit.type)


class ReligiousHabitCatalog(Catalog[ReligiousHabit]):
    storage_key = "religiousHabits"
