"""Record models for the wellbeing store.

Persisted JSON uses camelCase keys (``waterCount``, ``habitId``); models are
populated by field name or alias and always dump by alias.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HabitType(str, Enum):
    """Cadence of a regular habit."""

    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"


class Mood(str, Enum):
    """Fixed mood scale."""

    LOVING = "😍"
    HAPPY = "😊"
    NEUTRAL = "😐"
    WORRIED = "😟"
    CRYING = "😭"
    ANGRY = "😡"


MEAL_SLOTS = ("breakfast", "lunch", "dinner")
TASK_IDS = (1, 2, 3)


class Record(BaseModel):
    """Base for persisted records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_json(self) -> dict:
        """Dump in the persisted (camelCase) shape."""
        return self.model_dump(by_alias=True, mode="json")


class Habit(Record):
    """Regular habit in the catalog."""

    id: str
    name: str
    icon: str = ""
    goal: str = ""
    type: HabitType = HabitType.DAILY
    # Reserved: stored and returned, never enforced.
    weekly_goal: Optional[int] = None
    accent_color: str = ""
    created_at: str = ""


class ReligiousHabit(Record):
    """Religious practice, optionally tracked with a counter."""

    id: str
    name: str
    icon: str = ""
    has_counter: bool = False


class Task(Record):
    """One of the three daily tasks."""

    id: int
    text: str = ""
    done: bool = False


class Meals(Record):
    """Meal slots for a day."""

    breakfast: str = ""
    lunch: str = ""
    dinner: str = ""
    breakfast_image: Optional[str] = None
    lunch_image: Optional[str] = None
    dinner_image: Optional[str] = None
    breakfast_calories: Optional[int] = None
    lunch_calories: Optional[int] = None
    dinner_calories: Optional[int] = None


class DailyEntry(Record):
    """Everything recorded for one calendar day."""

    date: str
    mood: Optional[Mood] = None
    water_count: int = Field(default=0, ge=0)
    meals: Meals = Field(default_factory=Meals)
    tasks: list[Task]
    notes: str = ""
    journal: str = ""
    journal_image: Optional[str] = None


class HabitLog(Record):
    """Completion row for a regular habit on a date."""

    date: str
    habit_id: str
    done: bool


class ReligiousHabitLog(Record):
    """Counter row for a religious habit on a date."""

    date: str
    habit_id: str
    count: int = Field(ge=0)
