"""Repair and default records loaded from storage."""

import logging
from typing import Any, Callable, Optional, TypeVar

from pydantic import ValidationError

from .defaults import initial_habits, initial_religious_habits, new_daily_entry
from .models import (
    TASK_IDS,
    DailyEntry,
    Habit,
    HabitLog,
    HabitType,
    Meals,
    Record,
    ReligiousHabit,
    ReligiousHabitLog,
    Task,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


def _is_object(value: Any) -> bool:
    return isinstance(value, dict)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


class RecordSanitizer:
    """
    Merges stored candidates onto canonical defaults.

    Every check on the shape of persisted data lives here; everything
    downstream trusts the records it is handed.
    """

    def merge(
        self,
        default: R,
        candidate: Any,
        skip: tuple[str, ...] = (),
        where: str = "record",
    ) -> R:
        """
        Merge candidate fields onto a default record, one level deep.

        A candidate field overrides the default only if the record still
        validates with it. Unknown candidate fields are dropped.

        Args:
            default: Canonical record to start from
            candidate: Stored value, any JSON type
            skip: Field names the caller reconciles itself
            where: Label used in log messages

        Returns:
            A record of the same type as default
        """
        model = type(default)

        if not _is_object(candidate):
            logger.warning(f"{where}: stored value is not an object, using default")
            return default

        merged = default.to_json()
        for name, field in model.model_fields.items():
            if name in skip:
                continue

            key = field.alias or name
            if key not in candidate:
                continue

            trial = {**merged, key: candidate[key]}
            try:
                model.model_validate(trial)
            except ValidationError:
                logger.warning(f"{where}: invalid {key}={candidate[key]!r}, using default")
                continue
            merged[key] = candidate[key]

        return model.model_validate(merged)

    def daily_entry(self, date: str, candidate: Any) -> DailyEntry:
        """Repair one stored daily entry."""
        default = new_daily_entry(date)
        where = f"dailyEntries[{date}]"

        if not _is_object(candidate):
            logger.warning(f"{where}: stored value is not an object, using default")
            return default

        candidate = dict(candidate)
        water = candidate.get("waterCount")
        if _is_int(water) and water < 0:
            logger.warning(f"{where}: negative waterCount {water}, clamping to 0")
            candidate["waterCount"] = 0

        entry = self.merge(
            default, candidate, skip=("date", "meals", "tasks"), where=where
        )
        return entry.model_copy(
            update={
                "meals": self.meals(candidate.get("meals"), where),
                "tasks": self.tasks(candidate.get("tasks"), where),
            }
        )

    def meals(self, candidate: Any, where: str = "meals") -> Meals:
        """Merge stored meals onto empty meals; non-objects are discarded."""
        if not _is_object(candidate):
            return Meals()
        return self.merge(Meals(), candidate, where=f"{where}.meals")

    def tasks(self, candidate: Any, where: str = "tasks") -> list[Task]:
        """
        Reconcile stored tasks against the three canonical slots.

        Position i of the candidate (if an object) is merged onto the
        default task of slot i. Ids always come from the slot; extra
        candidate tasks are dropped.
        """
        stored = candidate if isinstance(candidate, list) else []
        if len(stored) > len(TASK_IDS):
            logger.warning(f"{where}: dropping {len(stored) - len(TASK_IDS)} extra tasks")

        tasks = []
        for index, task_id in enumerate(TASK_IDS):
            default = Task(id=task_id)
            existing = stored[index] if index < len(stored) else None
            if _is_object(existing):
                tasks.append(
                    self.merge(
                        default, existing, skip=("id",), where=f"{where}.tasks[{index}]"
                    )
                )
            else:
                tasks.append(default)
        return tasks

    def daily_entries(self, candidate: Any) -> dict[str, DailyEntry]:
        """Repair the date -> entry map."""
        if not _is_object(candidate):
            if candidate is not None:
                logger.warning("dailyEntries: stored value is not an object, resetting")
            return {}

        return {date: self.daily_entry(date, value) for date, value in candidate.items()}

    def habits(self, candidate: Any) -> list[Habit]:
        """Repair the habit catalog."""
        return self._catalog(
            candidate,
            lambda item: Habit(id=item["id"], name=item["name"]),
            initial_habits,
            "habits",
        )

    def religious_habits(self, candidate: Any) -> list[ReligiousHabit]:
        """Repair the religious habit catalog."""
        return self._catalog(
            candidate,
            lambda item: ReligiousHabit(id=item["id"], name=item["name"]),
            initial_religious_habits,
            "religiousHabits",
        )

    def _catalog(
        self,
        candidate: Any,
        make_default: Callable[[dict], R],
        initial: Callable[[], list[R]],
        where: str,
    ) -> list[R]:
        if not isinstance(candidate, list):
            if candidate is not None:
                logger.warning(f"{where}: stored value is not a list, using defaults")
            return initial()

        records = []
        seen = set()
        for index, item in enumerate(candidate):
            if _is_object(item) and _is_int(item.get("id")) and item["id"]:
                # Numeric ids from older data become strings
                item = {**item, "id": str(item["id"])}
            if not (
                _is_object(item) and _has_text(item.get("id")) and _has_text(item.get("name"))
            ):
                logger.warning(f"{where}[{index}]: missing id/name, dropping")
                continue
            if item["id"] in seen:
                logger.warning(f"{where}[{index}]: duplicate id {item['id']}, dropping")
                continue
            seen.add(item["id"])
            records.append(self.merge(make_default(item), item, where=f"{where}[{index}]"))
        return records

    def habit_logs(
        self, candidate: Any, habits: Optional[list[Habit]] = None
    ) -> dict[str, list[HabitLog]]:
        """
        Repair the habit completion ledger.

        Args:
            candidate: Stored ledger
            habits: Repaired catalog; rows with done=false are dropped for
                its weekly habits, which only keep rows for days done
        """
        weekly = {h.id for h in habits or [] if h.type == HabitType.WEEKLY}
        return self._ledger(
            candidate,
            lambda row: isinstance(row.get("done"), bool)
            and (row["done"] or row.get("habitId") not in weekly),
            lambda date, row: HabitLog(date=date, habit_id=row["habitId"], done=row["done"]),
            "habitLogs",
        )

    def religious_habit_logs(self, candidate: Any) -> dict[str, list[ReligiousHabitLog]]:
        """Repair the religious counter ledger. Zero counts are not kept."""
        return self._ledger(
            candidate,
            lambda row: _is_int(row.get("count")) and row["count"] > 0,
            lambda date, row: ReligiousHabitLog(
                date=date, habit_id=row["habitId"], count=row["count"]
            ),
            "religiousHabitLogs",
        )

    def _ledger(
        self,
        candidate: Any,
        has_value: Callable[[dict], bool],
        build: Callable[[str, dict], R],
        where: str,
    ) -> dict[str, list[R]]:
        if not _is_object(candidate):
            if candidate is not None:
                logger.warning(f"{where}: stored value is not an object, resetting")
            return {}

        ledger = {}
        for date, rows in candidate.items():
            if not isinstance(rows, list):
                logger.warning(f"{where}[{date}]: not a list, dropping date")
                continue

            kept = []
            seen = set()
            for row in rows:
                if not (_is_object(row) and _has_text(row.get("habitId")) and has_value(row)):
                    logger.warning(f"{where}[{date}]: dropping malformed row {row!r}")
                    continue
                if row["habitId"] in seen:
                    logger.warning(f"{where}[{date}]: duplicate row for {row['habitId']}")
                    continue
                seen.add(row["habitId"])
                kept.append(build(date, row))

            if kept:
                ledger[date] = kept
        return ledger

    def user_name(self, candidate: Any) -> Optional[str]:
        if candidate is None or isinstance(candidate, str):
            return candidate
        logger.warning(f"userName: expected a string, got {candidate!r}")
        return None

    def weight(self, key: str, candidate: Any) -> Optional[float]:
        if candidate is None or _is_number(candidate):
            return candidate
        logger.warning(f"{key}: expected a number, got {candidate!r}")
        return None
