"""The store consumed by the rest of the application."""

import logging
from typing import Callable, Optional

from .catalogs import HabitCatalog, ReligiousHabitCatalog
from .clock import Clock, SystemClock, week_bounds
from .entries import DailyEntryRepository
from .ledgers import HabitLogLedger, ReligiousHabitLedger
from .models import (
    MEAL_SLOTS,
    DailyEntry,
    Habit,
    HabitLog,
    HabitType,
    Meals,
    Mood,
    ReligiousHabit,
    ReligiousHabitLog,
)
from .persistence import PersistentStore
from .sanitizer import RecordSanitizer

logger = logging.getLogger(__name__)

USER_NAME_KEY = "userName"
CURRENT_WEIGHT_KEY = "currentWeight"
TARGET_WEIGHT_KEY = "targetWeight"


class WellbeingStore:
    """
    Canonical in-memory state backed by a PersistentStore.

    Lifecycle: ``load()`` reads and repairs everything once, each mutation
    writes its collection back immediately, ``flush()`` rewrites all of it.
    """

    def __init__(self, storage: PersistentStore, clock: Optional[Clock] = None):
        """
        Initialize an empty store.

        Args:
            storage: Persistence to load from and write back to
            clock: Source of "today" (defaults to UTC wall-clock time)
        """
        self.storage = storage
        self.clock = clock or SystemClock()
        self.sanitizer = RecordSanitizer()
        self._last_id = 0

        self._user_name: Optional[str] = None
        self._current_weight: Optional[float] = None
        self._target_weight: Optional[float] = None
        self.catalog = HabitCatalog(storage, [])
        self.religious_catalog = ReligiousHabitCatalog(storage, [])
        self.entries = DailyEntryRepository(storage)
        self.habit_ledger = HabitLogLedger(storage, self.catalog)
        self.religious_ledger = ReligiousHabitLedger(storage)

    @classmethod
    def open(cls, storage: PersistentStore, clock: Optional[Clock] = None) -> "WellbeingStore":
        """Create a store and load it from storage."""
        store = cls(storage, clock)
        store.load()
        return store

    def load(self):
        """Read every key, repair what is malformed, and write the result back."""
        s = self.sanitizer
        get = self.storage.get

        self._user_name = s.user_name(get(USER_NAME_KEY))
        self._current_weight = s.weight(CURRENT_WEIGHT_KEY, get(CURRENT_WEIGHT_KEY))
        self._target_weight = s.weight(TARGET_WEIGHT_KEY, get(TARGET_WEIGHT_KEY))

        self.catalog = HabitCatalog(self.storage, s.habits(get(HabitCatalog.storage_key)))
        self.religious_catalog = ReligiousHabitCatalog(
            self.storage, s.religious_habits(get(ReligiousHabitCatalog.storage_key))
        )
        self.entries = DailyEntryRepository(
            self.storage, s.daily_entries(get(DailyEntryRepository.storage_key))
        )
        self.habit_ledger = HabitLogLedger(
            self.storage,
            self.catalog,
            s.habit_logs(get(HabitLogLedger.storage_key), list(self.catalog)),
        )
        self.religious_ledger = ReligiousHabitLedger(
            self.storage, s.religious_habit_logs(get(ReligiousHabitLedger.storage_key))
        )

        logger.info(
            f"Loaded {len(self.catalog)} habits, {len(self.religious_catalog)} religious habits, "
            f"{len(self.entries.entries)} daily entries"
        )
        self.flush()

    def flush(self):
        """Serialize and write back every collection."""
        self._save_scalar(USER_NAME_KEY, self._user_name)
        self._save_scalar(CURRENT_WEIGHT_KEY, self._current_weight)
        self._save_scalar(TARGET_WEIGHT_KEY, self._target_weight)
        self.catalog.save()
        self.religious_catalog.save()
        self.entries.save()
        self.habit_ledger.save()
        self.religious_ledger.save()

    def _save_scalar(self, key: str, value):
        if value is None:
            self.storage.remove(key)
        else:
            self.storage.set(key, value)

    # Getters

    @property
    def today(self) -> str:
        """Current ISO date, recomputed on every access."""
        return self.clock.today()

    @property
    def user_name(self) -> Optional[str]:
        return self._user_name

    @property
    def current_weight(self) -> Optional[float]:
        return self._current_weight

    @property
    def target_weight(self) -> Optional[float]:
        return self._target_weight

    @property
    def habits(self) -> list[Habit]:
        return list(self.catalog)

    @property
    def religious_habits(self) -> list[ReligiousHabit]:
        return list(self.religious_catalog)

    @property
    def daily_entries(self) -> dict[str, DailyEntry]:
        return dict(self.entries.entries)

    @property
    def habit_logs(self) -> dict[str, list[HabitLog]]:
        return {date: list(rows) for date, rows in self.habit_ledger.logs.items()}

    @property
    def religious_habit_logs(self) -> dict[str, list[ReligiousHabitLog]]:
        return {date: list(rows) for date, rows in self.religious_ledger.logs.items()}

    def get_today_entry(self) -> DailyEntry:
        """Get today's entry, creating it on first access."""
        return self.entries.get_or_create(self.today)

    # Profile

    def set_user_name(self, name: str):
        self._user_name = name
        self._save_scalar(USER_NAME_KEY, name)

    def set_current_weight(self, weight: Optional[float]):
        """Set current weight; None clears it."""
        self._current_weight = weight
        self._save_scalar(CURRENT_WEIGHT_KEY, weight)

    def set_target_weight(self, weight: Optional[float]):
        """Set target weight; None clears it."""
        self._target_weight = weight
        self._save_scalar(TARGET_WEIGHT_KEY, weight)

    # Today's entry

    def _update_today(self, changes: Callable[[DailyEntry], dict]) -> DailyEntry:
        """
        Replace today's entry with a copy carrying the given changes.

        ``changes`` receives the entry read once here, so "today" cannot
        move between reading the entry and writing its replacement.
        """
        current = self.get_today_entry()
        entry = current.model_copy(update=changes(current))
        self.entries.replace(entry)
        return entry

    def update_mood(self, mood: Optional[Mood]) -> DailyEntry:
        value = Mood(mood).value if mood is not None else None
        return self._update_today(lambda entry: {"mood": value})

    def update_water(self, count: int) -> DailyEntry:
        """Set today's glasses of water, never below 0."""
        return self._update_today(lambda entry: {"water_count": max(0, count)})

    def _update_task_field(self, task_id: int, **values) -> DailyEntry:
        return self._update_today(
            lambda entry: {
                "tasks": [
                    t.model_copy(update=values) if t.id == task_id else t for t in entry.tasks
                ]
            }
        )

    def update_task(self, task_id: int, done: bool) -> DailyEntry:
        return self._update_task_field(task_id, done=done)

    def update_task_text(self, task_id: int, text: str) -> DailyEntry:
        return self._update_task_field(task_id, text=text)

    def update_meals(self, **fields) -> DailyEntry:
        """
        Merge meal fields into today's meals.

        Args:
            **fields: Any of the Meals fields, e.g. ``lunch="Soup"`` or
                ``dinner_calories=650``

        Raises:
            ValueError: For names that are not Meals fields, or values of
                the wrong type (pydantic's ValidationError)
        """
        unknown = set(fields) - set(Meals.model_fields)
        if unknown:
            raise ValueError(f"Unknown meal fields: {', '.join(sorted(unknown))}")

        return self._update_today(
            lambda entry: {
                "meals": Meals.model_validate({**entry.meals.model_dump(), **fields})
            }
        )

    def update_meal(
        self,
        slot: str,
        text: Optional[str] = None,
        image: Optional[str] = None,
        calories: Optional[int] = None,
    ) -> DailyEntry:
        """Update one meal slot; arguments left as None are unchanged."""
        if slot not in MEAL_SLOTS:
            raise ValueError(f"Unknown meal slot: {slot}")

        fields = {}
        if text is not None:
            fields[slot] = text
        if image is not None:
            fields[f"{slot}_image"] = image
        if calories is not None:
            fields[f"{slot}_calories"] = calories
        return self.update_meals(**fields)

    def update_notes(self, notes: str) -> DailyEntry:
        return self._update_today(lambda entry: {"notes": notes})

    def update_journal(self, text: str, image: Optional[str] = None) -> DailyEntry:
        """Set the journal text; the existing image is kept unless a new one is given."""
        return self._update_today(
            lambda entry: {"journal": text, "journal_image": image or entry.journal_image}
        )

    # Catalogs

    def _new_id(self) -> str:
        """Millisecond timestamp id, bumped to stay increasing within a session."""
        millis = int(self.clock.now().timestamp() * 1000)
        self._last_id = max(millis, self._last_id + 1)
        return str(self._last_id)

    def add_habit(
        self,
        name: str,
        icon: str = "",
        goal: str = "",
        type: HabitType = HabitType.DAILY,
        accent_color: str = "",
        weekly_goal: Optional[int] = None,
    ) -> Habit:
        """Append a new habit to the catalog."""
        habit = Habit(
            id=self._new_id(),
            name=name,
            icon=icon,
            goal=goal,
            type=type,
            weekly_goal=weekly_goal,
            accent_color=accent_color,
            created_at=self.clock.now().isoformat(),
        )
        return self.catalog.append(habit)

    def add_religious_habit(
        self, name: str, icon: str = "", has_counter: bool = False
    ) -> ReligiousHabit:
        """Append a new religious habit to its catalog."""
        habit = ReligiousHabit(
            id=f"r_{self._new_id()}", name=name, icon=icon, has_counter=has_counter
        )
        return self.religious_catalog.append(habit)

    # Ledgers

    def log_habit(self, habit_id: str, done: bool):
        self.habit_ledger.set_log(self.today, habit_id, done)

    def get_habit_log_for_today(self, habit_id: str) -> Optional[HabitLog]:
        return self.habit_ledger.get_log(self.today, habit_id)

    def weekly_progress(self, habit_id: str) -> int:
        """Days this Sunday-Saturday week on which a habit was done."""
        week_start, week_end = week_bounds(self.today)
        return self.habit_ledger.count_done_between(habit_id, week_start, week_end)

    def update_religious_habit_count(self, habit_id: str, count: int):
        self.religious_ledger.update_count(self.today, habit_id, count)

    def get_religious_habit_log_for_today(self, habit_id: str) -> Optional[ReligiousHabitLog]:
        return self.religious_ledger.get_log(self.today, habit_id)

    def get_religious_habit_count_for_today(self, habit_id: str) -> int:
        return self.religious_ledger.get_count(self.today, habit_id)
