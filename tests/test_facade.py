"""Tests for WellbeingStore."""

import json

import pytest
from conftest import stored

from wellbeing.store.clock import FixedClock, week_bounds
from wellbeing.store.defaults import initial_habits, initial_religious_habits
from wellbeing.store.facade import WellbeingStore
from wellbeing.store.models import Mood
from wellbeing.store.persistence import MemoryBackend, PersistentStore


def reopen(backend, clock) -> WellbeingStore:
    return WellbeingStore.open(PersistentStore(backend), clock)


class MidnightClock(FixedClock):
    """Fixed clock that crosses midnight right after the next date read once armed."""

    armed = False

    def today(self) -> str:
        day = super().today()
        if self.armed:
            self.armed = False
            self.advance(days=1)
        return day


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def test_fresh_store_seeds_catalogs(store, backend):
    assert store.habits == initial_habits()
    assert store.religious_habits == initial_religious_habits()
    assert store.user_name is None
    assert store.current_weight is None
    assert stored(backend, "habits") == [h.to_json() for h in initial_habits()]
    assert "userName" not in backend.data


def test_load_repairs_and_writes_back(clock):
    backend = MemoryBackend(
        {
            "userName": json.dumps("Sara"),
            "habits": json.dumps([{"id": "x", "name": "Walk"}, {"bad": True}]),
            "dailyEntries": "{broken",
            "habitLogs": json.dumps({"2024-01-01": []}),
            "religiousHabitLogs": json.dumps(
                {"2024-01-01": [{"date": "2024-01-01", "habitId": "r1", "count": 0}]}
            ),
            "currentWeight": json.dumps("heavy"),
        }
    )

    store = reopen(backend, clock)

    assert store.user_name == "Sara"
    assert [h.id for h in store.habits] == ["x"]
    assert store.daily_entries == {}
    assert store.habit_logs == {}
    assert store.religious_habit_logs == {}
    assert store.current_weight is None
    assert "currentWeight" not in backend.data
    assert stored(backend, "habits") == [store.habits[0].to_json()]
    assert stored(backend, "habitLogs") == {}


def test_state_survives_reopen(store, backend, clock):
    store.set_user_name("Sara")
    store.update_mood(Mood.HAPPY)
    store.update_water(5)
    store.log_habit("1", True)
    store.update_religious_habit_count("r6", 4)
    habit = store.add_habit("Stretch", icon="🧘", type="weekly", weekly_goal=2)

    again = reopen(backend, clock)

    assert again.user_name == "Sara"
    assert again.get_today_entry().to_json() == store.get_today_entry().to_json()
    assert again.get_habit_log_for_today("1").done is True
    assert again.get_religious_habit_count_for_today("r6") == 4
    assert again.catalog.get(habit.id) == habit



def test_load_drops_undone_weekly_rows(clock):
    backend = MemoryBackend(
        {
            "habitLogs": json.dumps(
                {
                    "2024-01-01": [
                        {"date": "2024-01-01", "habitId": "3", "done": False},
                        {"date": "2024-01-01", "habitId": "1", "done": False},
                    ]
                }
            ),
        }
    )

    store = reopen(backend, clock)

    assert store.get_habit_log_for_today("3") is None
    assert store.get_habit_log_for_today("1").done is False
    assert stored(backend, "habitLogs") == {
        "2024-01-01": [{"date": "2024-01-01", "habitId": "1", "done": False}]
    }


def test_load_keeps_habits_with_numeric_ids(clock):
    backend = MemoryBackend({"habits": json.dumps([{"id": 7, "name": "Walk"}])})

    store = reopen(backend, clock)
    store.log_habit("7", True)

    assert [h.id for h in store.habits] == ["7"]
    assert stored(backend, "habits")[0]["id"] == "7"
    assert store.get_habit_log_for_today("7").done is True

# ---------------------------------------------------------------------------
# Today
# ---------------------------------------------------------------------------


def test_today_is_created_lazily(store, backend):
    assert store.daily_entries == {}

    entry = store.get_today_entry()

    assert entry.date == "2024-01-01"
    assert [t.id for t in entry.tasks] == [1, 2, 3]
    assert list(stored(backend, "dailyEntries")) == ["2024-01-01"]


def test_today_follows_the_clock(store, clock):
    store.update_notes("first day")
    clock.advance(days=1)

    assert store.today == "2024-01-02"
    assert store.get_today_entry().notes == ""
    assert store.daily_entries["2024-01-01"].notes == "first day"


def test_updates_only_touch_today(store, clock):
    store.update_water(2)
    before = store.daily_entries["2024-01-01"]

    clock.advance(days=1)
    store.update_water(7)

    assert store.daily_entries["2024-01-01"] == before
    assert store.get_today_entry().water_count == 7


def test_update_mood(store):
    assert store.update_mood("😟").mood == Mood.WORRIED
    assert store.update_mood(None).mood is None


def test_update_water_clamps(store):
    assert store.update_water(-4).water_count == 0
    assert store.update_water(3).water_count == 3


def test_update_tasks(store):
    store.update_task_text(2, "Pay rent")
    entry = store.update_task(2, True)

    assert entry.tasks[1].text == "Pay rent"
    assert entry.tasks[1].done is True
    assert not entry.tasks[0].done
    assert not entry.tasks[2].done


def test_update_meals_merges(store, backend):
    store.update_meals(breakfast="Oats")
    entry = store.update_meals(lunch="Soup", lunch_calories=350)

    assert entry.meals.breakfast == "Oats"
    assert entry.meals.lunch == "Soup"
    assert entry.meals.lunch_calories == 350
    saved = stored(backend, "dailyEntries")["2024-01-01"]["meals"]
    assert saved["lunchCalories"] == 350


def test_update_meals_rejects_unknown_fields(store):
    with pytest.raises(ValueError):
        store.update_meals(brunch="Pancakes")


def test_update_meals_rejects_null_text(store):
    store.update_meals(lunch="Soup")

    with pytest.raises(ValueError):
        store.update_meals(lunch=None)

    assert store.get_today_entry().meals.lunch == "Soup"


def test_update_meal_slot(store):
    entry = store.update_meal("dinner", text="Rice", calories=700)

    assert entry.meals.dinner == "Rice"
    assert entry.meals.dinner_calories == 700
    assert entry.meals.dinner_image is None

    with pytest.raises(ValueError):
        store.update_meal("snack", text="Chips")


def test_journal_keeps_image_unless_replaced(store):
    store.update_journal("Morning", "data:image/png;base64,AAA")
    entry = store.update_journal("Evening")

    assert entry.journal == "Evening"
    assert entry.journal_image == "data:image/png;base64,AAA"

    entry = store.update_journal("Night", "data:image/png;base64,BBB")
    assert entry.journal_image == "data:image/png;base64,BBB"


def test_updates_copy_on_write(store):
    before = store.get_today_entry()
    store.update_notes("changed")

    assert before.notes == ""
    assert store.get_today_entry().notes == "changed"


def test_update_reads_today_once_across_midnight(backend):
    clock = MidnightClock.on("2024-01-01")
    store = reopen(backend, clock)
    store.update_task_text(1, "Call mum")

    clock.armed = True
    entry = store.update_task(1, True)

    assert entry.date == "2024-01-01"
    assert entry.tasks[0].text == "Call mum"
    assert entry.tasks[0].done is True
    assert store.today == "2024-01-02"
    assert store.get_today_entry().tasks[0].text == ""


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


def test_add_habit_assigns_unique_increasing_ids(store, clock):
    first = store.add_habit("Walk")
    second = store.add_habit("Swim", type="weekly")

    assert int(second.id) > int(first.id)
    assert first.created_at == clock.now().isoformat()
    assert store.habits[-2:] == [first, second]


def test_add_religious_habit(store, backend):
    habit = store.add_religious_habit("Witr", icon="🌙", has_counter=True)

    assert habit.id.startswith("r_")
    assert habit.has_counter is True
    assert stored(backend, "religiousHabits")[-1]["id"] == habit.id


def test_habit_and_religious_ids_do_not_collide(store):
    habit = store.add_habit("Walk")
    religious = store.add_religious_habit("Witr")
    assert habit.id != religious.id


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------


def test_log_habit_uses_today(store, clock):
    store.log_habit("1", True)
    assert store.get_habit_log_for_today("1").done is True

    clock.advance(days=1)
    assert store.get_habit_log_for_today("1") is None


def test_weekly_habit_log_removed_on_undo(store):
    store.log_habit("3", True)
    store.log_habit("3", False)

    assert store.get_habit_log_for_today("3") is None
    assert store.habit_logs == {}


def test_weekly_progress_counts_this_week(backend):
    clock = FixedClock.on("2023-12-30")
    store = reopen(backend, clock)

    for _ in range(5):
        store.log_habit("3", True)
        clock.advance(days=1)

    # Logged Sat 12-30 through Wed 01-03; the week started Sunday 12-31
    assert week_bounds(store.today) == ("2023-12-31", "2024-01-06")
    assert store.weekly_progress("3") == 4


def test_religious_count_for_today(store):
    store.update_religious_habit_count("r6", 3)
    assert store.get_religious_habit_log_for_today("r6").count == 3

    store.update_religious_habit_count("r6", -1)
    assert store.get_religious_habit_log_for_today("r6") is None
    assert store.get_religious_habit_count_for_today("r6") == 0


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


def test_weights_none_removes_key(store, backend):
    store.set_current_weight(71.5)
    store.set_target_weight(65)
    assert stored(backend, "currentWeight") == 71.5

    store.set_current_weight(None)

    assert store.current_weight is None
    assert "currentWeight" not in backend.data
    assert stored(backend, "targetWeight") == 65


def test_flush_rewrites_everything(store, backend):
    store.update_water(1)
    backend.data.clear()

    store.flush()

    assert set(backend.data) == {
        "habits",
        "religiousHabits",
        "dailyEntries",
        "habitLogs",
        "religiousHabitLogs",
    }
