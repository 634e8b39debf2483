"""Canonical default records."""

from .models import TASK_IDS, DailyEntry, Habit, HabitType, Meals, ReligiousHabit, Task


def new_daily_entry(date: str) -> DailyEntry:
    """Build an empty entry for a date with the three task slots."""
    return DailyEntry(
        date=date,
        meals=Meals(),
        tasks=[Task(id=task_id) for task_id in TASK_IDS],
    )


def initial_habits() -> list[Habit]:
    """Seed habit catalog used when nothing is stored yet."""
    return [
        Habit(
            id="1",
            name="Drink water",
            icon="💧",
            goal="8 glasses",
            type=HabitType.DAILY,
            accent_color="#A8E6CF",
        ),
        Habit(
            id="2",
            name="Read",
            icon="📖",
            goal="10 pages",
            type=HabitType.DAILY,
            accent_color="#FFD3B6",
        ),
        Habit(
            id="3",
            name="Exercise",
            icon="🏃",
            goal="3 times a week",
            type=HabitType.WEEKLY,
            weekly_goal=3,
            accent_color="#FFAAA5",
        ),
    ]


def initial_religious_habits() -> list[ReligiousHabit]:
    """Seed religious practice catalog."""
    return [
        ReligiousHabit(id="r1", name="Fajr", icon="🌅"),
        ReligiousHabit(id="r2", name="Dhuhr", icon="☀️"),
        ReligiousHabit(id="r3", name="Asr", icon="🌤️"),
        ReligiousHabit(id="r4", name="Maghrib", icon="🌇"),
        ReligiousHabit(id="r5", name="Isha", icon="🌙"),
        ReligiousHabit(id="r6", name="Quran pages", icon="📗", has_counter=True),
        ReligiousHabit(id="r7", name="Dhikr", icon="📿", has_counter=True),
    ]
