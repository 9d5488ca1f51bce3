"""Calendar event synchronization.

Keeps ``calendar_events`` consistent with the source tables (meals, planned
meals, workouts, cardio, sports, stretching, expenses). Every function takes
the ``EntityStore`` explicitly, runs its store calls one after another, and
returns ``None`` on success or the error value on failure. Nothing here
raises: unexpected exceptions are logged and returned as a ``StoreError``.

There are no cross-table transactions. A failure between two calls leaves
the tables out of step; callers see the error and decide what to do.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from typing import Any, ParamSpec

from loguru import logger

from app.calendar.entities import CalendarEntity, entity_from_payload
from app.calendar.errors import SyncError, SyncValidationError, unexpected_error
from app.calendar.helpers import date_part, default_end_time
from app.calendar.sources import FITNESS_TABLES, RESCHEDULE_TARGETS, CalendarSource, parse_source
from app.db.store import EntityStore, Row

CALENDAR_EVENTS_TABLE = "calendar_events"

P = ParamSpec("P")


def returns_sync_error(func: Callable[P, SyncError | None]) -> Callable[P, SyncError | None]:
    """Convert exceptions escaping a sync function into a returned error."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> SyncError | None:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.exception(f"[CALENDAR_SYNC] Unexpected error in {func.__name__}")
            return unexpected_error(e)

    return wrapper


@returns_sync_error
def create_calendar_event_for_entity(
    store: EntityStore,
    source: str | CalendarSource,
    entity: CalendarEntity | Mapping[str, Any],
) -> SyncError | None:
    """Insert the calendar event projecting ``entity``.

    Title, times and description come from the entity model for ``source``.
    Without a derived end time the event lasts one hour.

    Args:
        store: Entity store
        source: Source tag of the entity
        entity: Entity model or raw payload (must include id and user_id)

    Returns:
        None on success, otherwise the validation or store error
    """
    parsed = entity_from_payload(source, entity)
    if isinstance(parsed, SyncValidationError):
        logger.warning("[CALENDAR_SYNC] Entity payload rejected", source=str(source), error=parsed.error)
        return parsed

    fields = parsed.to_event_fields()
    end_time = fields.end_time or default_end_time(fields.start_time)

    result = store.insert(
        CALENDAR_EVENTS_TABLE,
        [
            {
                "user_id": parsed.user_id,
                "title": fields.title,
                "description": fields.description,
                "start_time": fields.start_time,
                "end_time": end_time,
                "source": str(source),
                "source_id": parsed.id,
            }
        ],
    )
    if result.error is not None:
        logger.error("[CALENDAR_SYNC] Error creating calendar event", source=str(source), source_id=parsed.id, error=result.error.message)
        return result.error

    logger.debug("[CALENDAR_SYNC] Created calendar event", source=str(source), source_id=parsed.id)
    return None


@returns_sync_error
def update_linked_entity_on_calendar_change(store: EntityStore, event: Mapping[str, Any]) -> SyncError | None:
    """Write a rescheduled calendar event back onto its source entity.

    The source's date column receives the UTC date of ``start_time``.
    Workouts, cardio and sports also receive ``start_time``/``end_time`` when
    the event has an end time. Sources with no reschedule target are left
    untouched.
    """
    source = parse_source(event.get("source"))
    target = RESCHEDULE_TARGETS.get(source) if source is not None else None
    if target is None:
        logger.debug("[CALENDAR_SYNC] No linked entity to reschedule", source=event.get("source"))
        return None

    fields: dict[str, Any] = {target.date_column: date_part(event["start_time"])}
    if target.carries_times and event.get("end_time"):
        fields["start_time"] = event["start_time"]
        fields["end_time"] = event["end_time"]

    result = store.update(
        target.table,
        fields,
        {"id": event["source_id"], "user_id": event["user_id"]},
    )
    if result.error is not None:
        logger.error(
            "[CALENDAR_SYNC] Error rescheduling linked entity",
            table=target.table,
            source_id=event["source_id"],
            error=result.error.message,
        )
        return result.error
    return None


@returns_sync_error
def update_calendar_event_from_source(
    store: EntityStore,
    source: str | CalendarSource,
    source_id: str | int,
    fields: Mapping[str, Any],
) -> SyncError | None:
    """Apply ``fields`` verbatim to the calendar event of a source entity."""
    result = store.update(
        CALENDAR_EVENTS_TABLE,
        dict(fields),
        {"source": str(source), "source_id": str(source_id)},
    )
    if result.error is not None:
        logger.error("[CALENDAR_SYNC] Error updating calendar event from source", source=str(source), source_id=str(source_id), error=result.error.message)
        return result.error
    return None


def update_calendar_event(
    store: EntityStore,
    source: str | CalendarSource,
    source_id: str | int,
    title: str,
    start_time: str,
    end_time: str | None = None,
) -> SyncError | None:
    """Rewrite title and times of a source entity's calendar event."""
    return update_calendar_event_from_source(
        store,
        source,
        source_id,
        {"title": title, "start_time": start_time, "end_time": end_time},
    )


@returns_sync_error
def delete_calendar_event_for_entity(
    store: EntityStore,
    source: str | CalendarSource,
    source_id: str | int,
) -> SyncError | None:
    """Delete every calendar event for ``(source, source_id)``."""
    result = store.delete(CALENDAR_EVENTS_TABLE, {"source": str(source), "source_id": str(source_id)})
    if result.error is not None:
        logger.error("[CALENDAR_SYNC] Error deleting calendar event", source=str(source), source_id=str(source_id), error=result.error.message)
        return result.error
    logger.debug("[CALENDAR_SYNC] Deleted calendar events", source=str(source), source_id=str(source_id), count=result.count)
    return None


def update_calendar_event_for_completed_entity(
    store: EntityStore,
    source: str | CalendarSource,
    source_id: str | int,
) -> SyncError | None:
    """Handle a planned entity becoming completed.

    The calendar shows pending items only, so the event is deleted.
    """
    return delete_calendar_event_for_entity(store, source, source_id)


def _find_calendar_event(store: EntityStore, source: str, source_id: str) -> Row | SyncError | None:
    result = store.maybe_single(CALENDAR_EVENTS_TABLE, {"source": source, "source_id": source_id})
    if result.error is not None:
        return result.error
    return result.data[0] if result.data else None


@returns_sync_error
def cleanup_planned_session_on_completion(
    store: EntityStore,
    source: str | CalendarSource,
    session_id: str,
    user_id: str,
) -> SyncError | None:
    """Close out a finished fitness session that started from a planned event.

    Steps, stopping at the first error:
    1. Look up the calendar event. None means the session was never planned
       (or is already cleaned up) and nothing is written.
    2. Delete the calendar event.
    3. Mark the session completed and no longer in progress.

    The calendar event goes first: a crash after step 2 leaves a planned
    session with no event, which the fitness views recover from.
    """
    source_key = str(source)
    found = _find_calendar_event(store, source_key, str(session_id))
    if isinstance(found, SyncError):
        logger.error("[CALENDAR_SYNC] Error checking calendar event", source=source_key, session_id=session_id, error=str(found))
        return found
    if found is None:
        logger.debug("[CALENDAR_SYNC] No planned calendar event, nothing to clean up", source=source_key, session_id=session_id)
        return None

    delete_error = delete_calendar_event_for_entity(store, source_key, session_id)
    if delete_error is not None:
        return delete_error

    parsed = parse_source(source_key)
    table = FITNESS_TABLES.get(parsed) if parsed is not None else None
    if table is None:
        logger.warning("[CALENDAR_SYNC] Unknown fitness type", source=source_key)
        return SyncValidationError(error="Unknown fitness type")

    result = store.update(
        table,
        {"status": "completed", "in_progress": False},
        {"id": session_id, "user_id": user_id},
    )
    if result.error is not None:
        logger.error("[CALENDAR_SYNC] Error updating session status", table=table, session_id=session_id, error=result.error.message)
        return result.error

    logger.info("[CALENDAR_SYNC] Planned session completed", source=source_key, session_id=session_id)
    return None
