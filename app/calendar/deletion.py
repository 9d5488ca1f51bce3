"""Deleting source entities together with their calendar events."""

from __future__ import annotations

from loguru import logger

from app.calendar.errors import SyncError
from app.calendar.sources import CalendarSource
from app.calendar.sync import CALENDAR_EVENTS_TABLE, returns_sync_error
from app.db.store import EntityStore


@returns_sync_error
def delete_entity_with_calendar_event(
    store: EntityStore,
    *,
    table: str,
    entity_id: str | int,
    user_id: str,
    source: str | CalendarSource,
) -> SyncError | None:
    """Delete a source entity and its calendar event.

    The calendar event is deleted first. If deleting the entity then fails
    the entity survives without a calendar event; the error is returned.
    """
    entity_key = str(entity_id)

    calendar_result = store.delete(
        CALENDAR_EVENTS_TABLE,
        {"source": str(source), "source_id": entity_key, "user_id": user_id},
    )
    if calendar_result.error is not None:
        logger.error("[CALENDAR_SYNC] Error deleting calendar event", source=str(source), source_id=entity_key, error=calendar_result.error.message)
        return calendar_result.error

    entity_result = store.delete(table, {"id": entity_key, "user_id": user_id})
    if entity_result.error is not None:
        logger.error("[CALENDAR_SYNC] Error deleting entity", table=table, entity_id=entity_key, error=entity_result.error.message)
        return entity_result.error

    return None


@returns_sync_error
def delete_workout_cascade(store: EntityStore, *, workout_id: str, user_id: str) -> SyncError | None:
    """Delete a workout with its exercises, sets and calendar event.

    Order: sets, exercises, workout, calendar event. Stops at the first error.
    """
    exercises = store.select("fitness_exercises", {"workout_id": workout_id}, columns=["id"])
    if exercises.error is not None:
        logger.error("[CALENDAR_SYNC] Error fetching exercises", workout_id=workout_id, error=exercises.error.message)
        return exercises.error

    exercise_ids = [row["id"] for row in exercises.data]
    if exercise_ids:
        sets_result = store.delete("fitness_sets", {"exercise_id": exercise_ids})
        if sets_result.error is not None:
            logger.error("[CALENDAR_SYNC] Error deleting sets", workout_id=workout_id, error=sets_result.error.message)
            return sets_result.error

    exercises_result = store.delete("fitness_exercises", {"workout_id": workout_id})
    if exercises_result.error is not None:
        logger.error("[CALENDAR_SYNC] Error deleting exercises", workout_id=workout_id, error=exercises_result.error.message)
        return exercises_result.error

    workout_result = store.delete("fitness_workouts", {"id": workout_id, "user_id": user_id})
    if workout_result.error is not None:
        logger.error("[CALENDAR_SYNC] Error deleting workout", workout_id=workout_id, error=workout_result.error.message)
        return workout_result.error

    calendar_result = store.delete(
        CALENDAR_EVENTS_TABLE,
        {"source": CalendarSource.WORKOUT.value, "source_id": workout_id, "user_id": user_id},
    )
    if calendar_result.error is not None:
        logger.error("[CALENDAR_SYNC] Error deleting calendar event", source="workout", source_id=workout_id, error=calendar_result.error.message)
        return calendar_result.error

    logger.info("[CALENDAR_SYNC] Workout deleted", workout_id=workout_id, exercises=len(exercise_ids))
    return None
