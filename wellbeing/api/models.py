"""Request bodies for the HTTP API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..store.models import HabitType, Mood


class ApiModel(BaseModel):
    """Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MoodUpdate(ApiModel):
    mood: Optional[Mood] = None


class WaterUpdate(ApiModel):
    count: int


class TaskUpdate(ApiModel):
    """Either or both of a task's fields."""

    text: Optional[str] = None
    done: Optional[bool] = None


class MealsUpdate(ApiModel):
    """Partial meals update; only fields sent are applied."""

    breakfast: Optional[str] = None
    lunch: Optional[str] = None
    dinner: Optional[str] = None
    breakfast_image: Optional[str] = None
    lunch_image: Optional[str] = None
    dinner_image: Optional[str] = None
    breakfast_calories: Optional[int] = None
    lunch_calories: Optional[int] = None
    dinner_calories: Optional[int] = None

    @field_validator("breakfast", "lunch", "dinner")
    @classmethod
    def text_not_null(cls, value: Optional[str]) -> str:
        """Meal text may be omitted but not cleared with null."""
        if value is None:
            raise ValueError("meal text cannot be null, send an empty string")
        return value


class NotesUpdate(ApiModel):
    notes: str


class JournalUpdate(ApiModel):
    text: str
    image: Optional[str] = None


class NewHabit(ApiModel):
    """Habit fields supplied by the user; id and createdAt are assigned."""

    name: str = Field(min_length=1)
    icon: str = ""
    goal: str = ""
    type: HabitType = HabitType.DAILY
    weekly_goal: Optional[int] = None
    accent_color: str = ""


class NewReligiousHabit(ApiModel):
    name: str = Field(min_length=1)
    icon: str = ""
    has_counter: bool = False


class HabitLogUpdate(ApiModel):
    done: bool


class CountUpdate(ApiModel):
    count: int


class ProfileUpdate(ApiModel):
    """Profile fields; a null weight clears it."""

    user_name: Optional[str] = None
    current_weight: Optional[float] = None
    target_weight: Optional[float] = None
