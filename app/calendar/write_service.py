"""Direct calendar event writes used by the calendar API.

Forms that do not go through the entity dispatch insert events here, and
the calendar view moves events here (drag-and-drop).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from loguru import logger

from app.calendar.errors import SyncError, SyncValidationError, unexpected_error
from app.calendar.helpers import default_end_time, parse_timestamp
from app.calendar.sources import parse_source
from app.calendar.sync import CALENDAR_EVENTS_TABLE, returns_sync_error, update_linked_entity_on_calendar_change
from app.db.store import EntityStore, Row, StoreError


class SyncOutcome(StrEnum):
    FULLY_SYNCED = "fully_synced"
    CALENDAR_ONLY = "calendar_only"
    FAILED = "failed"


@dataclass(frozen=True)
class EventUpdateResult:
    """Result of moving a calendar event.

    Attributes:
        event: Calendar row after the update (None if the update failed)
        linked_entity_updated: Whether the source entity was rescheduled too
        error: Error that stopped the calendar update, if any
        linked_entity_error: Error from rescheduling the source entity, if any
    """

    event: Row | None
    linked_entity_updated: bool
    error: SyncError | None = None
    linked_entity_error: SyncError | None = None

    @property
    def outcome(self) -> SyncOutcome:
        if self.error is not None:
            return SyncOutcome.FAILED
        if self.linked_entity_error is not None:
            return SyncOutcome.CALENDAR_ONLY
        return SyncOutcome.FULLY_SYNCED


def _invalid_timestamp(**fields: str | None) -> SyncValidationError | None:
    """First of ``fields`` that is set but not ISO-8601, as a validation error."""
    for name, value in fields.items():
        if value is None:
            continue
        try:
            parse_timestamp(value)
        except ValueError:
            return SyncValidationError(error=f"Invalid {name}: {value}")
    return None


@returns_sync_error
def add_calendar_event(
    store: EntityStore,
    *,
    user_id: str,
    title: str,
    start_time: str,
    source: str,
    source_id: str | int,
    description: str = "",
    end_time: str | None = None,
) -> SyncError | None:
    """Insert a calendar event after validating its source.

    Without ``end_time`` the event lasts one hour.

    Returns:
        None on success, SyncValidationError for an unknown source or an
        unparseable timestamp (nothing inserted), or the store error
    """
    if parse_source(source) is None:
        return SyncValidationError(error=f"Invalid source value: {source}")
    invalid = _invalid_timestamp(start_time=start_time, end_time=end_time)
    if invalid is not None:
        return invalid

    final_end_time = end_time or default_end_time(start_time)

    result = store.insert(
        CALENDAR_EVENTS_TABLE,
        [
            {
                "user_id": user_id,
                "title": title,
                "description": description,
                "start_time": start_time,
                "end_time": final_end_time,
                "source": source,
                "source_id": str(source_id),
            }
        ],
    )
    if result.error is not None:
        logger.error("[CALENDAR] Error inserting calendar event", source=source, source_id=str(source_id), error=result.error.message)
        return result.error
    return None


insert_event = add_calendar_event


def list_events(store: EntityStore, user_id: str) -> list[Row] | StoreError:
    """All calendar events of a user, earliest first."""
    result = store.select(CALENDAR_EVENTS_TABLE, {"user_id": user_id}, order_by="start_time")
    if result.error is not None:
        logger.error("[CALENDAR] Error listing calendar events", user_id=user_id, error=result.error.message)
        return result.error
    return result.data


@returns_sync_error
def delete_event(store: EntityStore, event_id: str, user_id: str) -> SyncError | None:
    """Delete a single calendar event owned by ``user_id``.

    The source entity is not touched.
    """
    result = store.delete(CALENDAR_EVENTS_TABLE, {"id": event_id, "user_id": user_id})
    if result.error is not None:
        logger.error("[CALENDAR] Error deleting calendar event", event_id=event_id, error=result.error.message)
        return result.error
    return None


def _event_not_found(event_id: str) -> StoreError:
    return StoreError(message=f"Calendar event {event_id} not found", code="not_found", details=CALENDAR_EVENTS_TABLE)


def update_event(
    store: EntityStore,
    *,
    event_id: str,
    user_id: str,
    new_start: str,
    new_end: str | None = None,
    update_linked_entity: bool = False,
) -> EventUpdateResult:
    """Move a calendar event, optionally rescheduling its source entity.

    The end time is ``new_end``, else the event's current end time, else one
    hour after ``new_start``. The calendar row is written first; a failure
    to reschedule the source afterwards is reported on the result rather
    than undoing the move.
    """
    try:
        return _update_event(store, event_id, user_id, new_start, new_end, update_linked_entity)
    except Exception as e:
        logger.exception("[CALENDAR] Unexpected error moving calendar event")
        return EventUpdateResult(event=None, linked_entity_updated=False, error=unexpected_error(e))


def _update_event(
    store: EntityStore,
    event_id: str,
    user_id: str,
    new_start: str,
    new_end: str | None,
    update_linked_entity: bool,
) -> EventUpdateResult:
    invalid = _invalid_timestamp(new_start=new_start, new_end=new_end)
    if invalid is not None:
        return EventUpdateResult(event=None, linked_entity_updated=False, error=invalid)

    filters = {"id": event_id, "user_id": user_id}

    current = store.maybe_single(CALENDAR_EVENTS_TABLE, filters)
    if current.error is not None:
        return EventUpdateResult(event=None, linked_entity_updated=False, error=current.error)
    if not current.data:
        return EventUpdateResult(event=None, linked_entity_updated=False, error=_event_not_found(event_id))

    existing = current.data[0]
    final_end_time = new_end or existing.get("end_time") or default_end_time(new_start)

    updated = store.update(CALENDAR_EVENTS_TABLE, {"start_time": new_start, "end_time": final_end_time}, filters)
    if updated.error is not None:
        logger.error("[CALENDAR] Error moving calendar event", event_id=event_id, error=updated.error.message)
        return EventUpdateResult(event=None, linked_entity_updated=False, error=updated.error)

    event: dict[str, Any] = {**existing, "start_time": new_start, "end_time": final_end_time}
    logger.info("[CALENDAR] Calendar event moved", event_id=event_id, new_start=new_start, end_time=final_end_time)

    if not update_linked_entity:
        return EventUpdateResult(event=event, linked_entity_updated=False)

    linked_error = update_linked_entity_on_calendar_change(store, event)
    if linked_error is not None:
        logger.warning("[CALENDAR] Calendar event moved but linked entity was not updated", event_id=event_id, source=event.get("source"))
        return EventUpdateResult(event=event, linked_entity_updated=False, linked_entity_error=linked_error)

    return EventUpdateResult(event=event, linked_entity_updated=True)
