"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException

from .api.models import (
    CountUpdate,
    HabitLogUpdate,
    JournalUpdate,
    MealsUpdate,
    MoodUpdate,
    NewHabit,
    NewReligiousHabit,
    NotesUpdate,
    ProfileUpdate,
    TaskUpdate,
    WaterUpdate,
)
from .config import settings
from .store.clock import week_bounds
from .store.facade import WellbeingStore
from .store.models import TASK_IDS
from .store.persistence import PersistentStore, SQLiteBackend

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

_store: Optional[WellbeingStore] = None


def open_store() -> WellbeingStore:
    """Open the store configured in settings."""
    backend = None
    if not settings.volatile:
        try:
            backend = SQLiteBackend(settings.data_path)
        except Exception as e:
            logger.warning(f"Could not open {settings.data_path}: {e}")

    return WellbeingStore.open(PersistentStore(backend))


async def get_store() -> WellbeingStore:
    """Store shared by all requests, opened on first use on the event loop."""
    global _store
    if _store is None:
        _store = open_store()
    return _store


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _store is not None:
        logger.info("Flushing store on shutdown")
        _store.flush()


# Initialize FastAPI app
app = FastAPI(
    title="Wellbeing Tracker",
    description="Local store for habits, mood, water, tasks, meals and journal",
    version="1.0.0",
    lifespan=lifespan,
)


def require_habit(store: WellbeingStore, habit_id: str):
    if store.catalog.get(habit_id) is None:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")


def require_religious_habit(store: WellbeingStore, habit_id: str):
    if store.religious_catalog.get(habit_id) is None:
        raise HTTPException(status_code=404, detail=f"Religious habit not found: {habit_id}")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Wellbeing Tracker",
        "version": "1.0.0",
        "endpoints": {
            "today": "/api/today",
            "habits": "/api/habits",
            "religious_habits": "/api/religious-habits",
            "profile": "/api/profile",
            "status": "/status",
        },
    }


@app.get("/status")
async def status(store: WellbeingStore = Depends(get_store)):
    """Server status endpoint."""
    return {
        "status": "running",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "today": store.today,
        "storage_available": store.storage.available,
    }


# Today


@app.get("/api/today")
async def get_today(store: WellbeingStore = Depends(get_store)):
    """Today's entry, created on first access."""
    return store.get_today_entry().to_json()


@app.put("/api/today/mood")
async def put_mood(body: MoodUpdate, store: WellbeingStore = Depends(get_store)):
    return store.update_mood(body.mood).to_json()


@app.put("/api/today/water")
async def put_water(body: WaterUpdate, store: WellbeingStore = Depends(get_store)):
    return store.update_water(body.count).to_json()


@app.put("/api/today/tasks/{task_id}")
async def put_task(
    task_id: int, body: TaskUpdate, store: WellbeingStore = Depends(get_store)
):
    """Update a task's text and/or done flag."""
    if task_id not in TASK_IDS:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")

    entry = store.get_today_entry()
    if body.text is not None:
        entry = store.update_task_text(task_id, body.text)
    if body.done is not None:
        entry = store.update_task(task_id, body.done)
    return entry.to_json()


@app.patch("/api/today/meals")
async def patch_meals(body: MealsUpdate, store: WellbeingStore = Depends(get_store)):
    """Apply only the meal fields present in the request."""
    return store.update_meals(**body.model_dump(exclude_unset=True)).to_json()


@app.put("/api/today/notes")
async def put_notes(body: NotesUpdate, store: WellbeingStore = Depends(get_store)):
    return store.update_notes(body.notes).to_json()


@app.put("/api/today/journal")
async def put_journal(body: JournalUpdate, store: WellbeingStore = Depends(get_store)):
    return store.update_journal(body.text, body.image).to_json()


# Habits


@app.get("/api/habits")
async def list_habits(store: WellbeingStore = Depends(get_store)):
    """Habit catalog with today's completion state."""
    habits = []
    for habit in store.habits:
        log = store.get_habit_log_for_today(habit.id)
        habits.append({**habit.to_json(), "doneToday": bool(log and log.done)})
    return habits


@app.post("/api/habits", status_code=201)
async def create_habit(body: NewHabit, store: WellbeingStore = Depends(get_store)):
    habit = store.add_habit(
        name=body.name,
        icon=body.icon,
        goal=body.goal,
        type=body.type,
        accent_color=body.accent_color,
        weekly_goal=body.weekly_goal,
    )
    return habit.to_json()


@app.put("/api/habits/{habit_id}/log")
async def put_habit_log(
    habit_id: str, body: HabitLogUpdate, store: WellbeingStore = Depends(get_store)
):
    """Mark a habit done or not done today."""
    require_habit(store, habit_id)
    store.log_habit(habit_id, body.done)

    log = store.get_habit_log_for_today(habit_id)
    return {"habitId": habit_id, "log": log.to_json() if log else None}


@app.get("/api/habits/{habit_id}/progress")
async def get_habit_progress(habit_id: str, store: WellbeingStore = Depends(get_store)):
    """Days done in the current Sunday-Saturday week."""
    require_habit(store, habit_id)
    week_start, week_end = week_bounds(store.today)

    return {
        "habitId": habit_id,
        "weekStart": week_start,
        "weekEnd": week_end,
        "count": store.weekly_progress(habit_id),
        "weeklyGoal": store.catalog.get(habit_id).weekly_goal,
    }


# Religious habits


@app.get("/api/religious-habits")
async def list_religious_habits(store: WellbeingStore = Depends(get_store)):
    """Religious habit catalog with today's counts."""
    return [
        {**habit.to_json(), "count": store.get_religious_habit_count_for_today(habit.id)}
        for habit in store.religious_habits
    ]


@app.post("/api/religious-habits", status_code=201)
async def create_religious_habit(
    body: NewReligiousHabit, store: WellbeingStore = Depends(get_store)
):
    habit = store.add_religious_habit(
        name=body.name, icon=body.icon, has_counter=body.has_counter
    )
    return habit.to_json()


@app.put("/api/religious-habits/{habit_id}/count")
async def put_religious_count(
    habit_id: str, body: CountUpdate, store: WellbeingStore = Depends(get_store)
):
    """Set today's count; 0 or less clears it."""
    require_religious_habit(store, habit_id)
    store.update_religious_habit_count(habit_id, body.count)
    return {"habitId": habit_id, "count": store.get_religious_habit_count_for_today(habit_id)}


# Profile


def profile_json(store: WellbeingStore) -> dict:
    return {
        "userName": store.user_name,
        "currentWeight": store.current_weight,
        "targetWeight": store.target_weight,
    }


@app.get("/api/profile")
async def get_profile(store: WellbeingStore = Depends(get_store)):
    return profile_json(store)


@app.put("/api/profile")
async def put_profile(body: ProfileUpdate, store: WellbeingStore = Depends(get_store)):
    """Update the fields present in the request; a null weight clears it."""
    fields = body.model_dump(exclude_unset=True)

    if fields.get("user_name") is not None:
        store.set_user_name(fields["user_name"])
    if "current_weight" in fields:
        store.set_current_weight(fields["current_weight"])
    if "target_weight" in fields:
        store.set_target_weight(fields["target_weight"])

    return profile_json(store)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
