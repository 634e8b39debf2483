"""Date-keyed daily entries."""

import logging
from typing import Optional

from .defaults import new_daily_entry
from .models import DailyEntry
from .persistence import PersistentStore

logger = logging.getLogger(__name__)


class DailyEntryRepository:
    """Holds one DailyEntry per date and writes the whole map back on change."""

    storage_key = "dailyEntries"

    def __init__(
        self,
        storage: PersistentStore,
        entries: Optional[dict[str, DailyEntry]] = None,
    ):
        self.storage = storage
        self.entries: dict[str, DailyEntry] = dict(entries or {})

    def get(self, date: str) -> Optional[DailyEntry]:
        """Get the entry for a date, if one exists."""
        return self.entries.get(date)

    def get_or_create(self, date: str) -> DailyEntry:
        """
        Get the entry for a date, creating and saving a default if absent.

        Args:
            date: ISO date (YYYY-MM-DD)

        Returns:
            The stored entry
        """
        entry = self.entries.get(date)
        if entry is None:
            entry = new_daily_entry(date)
            self.entries[date] = entry
            logger.info(f"Created daily entry for {date}")
            self.save()
        return entry

    def replace(self, entry: DailyEntry):
        """Swap in a new version of an entry and save."""
        self.entries[entry.date] = entry
        self.save()

    def to_json(self) -> dict:
        return {date: entry.to_json() for date, entry in self.entries.items()}

    def save(self):
        self.storage.set(self.storage_key, self.to_json())
