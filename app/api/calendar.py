"""Calendar API endpoints.

Thin HTTP layer over the calendar sync functions. Sync errors come back as
values and are mapped to HTTP errors here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from loguru import logger

from app.api.schemas.calendar import (
    CalendarEventCreate,
    CalendarEventMove,
    CalendarEventMoveResponse,
    CalendarEventResponse,
    EntityEventCreate,
    EventRouteResponse,
    EventStyleResponse,
    SourceRepairResponse,
)
from app.calendar.deletion import delete_entity_with_calendar_event, delete_workout_cascade
from app.calendar.errors import SyncError, SyncValidationError
from app.calendar.repair import fix_calendar_event_sources
from app.calendar.sources import SOURCE_TABLES, CalendarSource, get_calendar_event_route, get_event_style, parse_source
from app.calendar.sync import cleanup_planned_session_on_completion, create_calendar_event_for_entity
from app.calendar.write_service import add_calendar_event, delete_event, list_events, update_event
from app.db.session import get_store
from app.db.store import EntityStore, StoreError

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _raise_for_error(error: SyncError) -> None:
    if isinstance(error, SyncValidationError):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=error.error)
    if error.code == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)


@router.get("/events", response_model=list[CalendarEventResponse])
def get_events(user_id: str, store: EntityStore = Depends(get_store)):
    """List all calendar events of a user, earliest first."""
    logger.info(f"[CALENDAR] GET /calendar/events called for user_id={user_id}")
    events = list_events(store, user_id)
    if isinstance(events, StoreError):
        _raise_for_error(events)
    return events


@router.post("/events", status_code=status.HTTP_201_CREATED)
def create_event(body: CalendarEventCreate, store: EntityStore = Depends(get_store)):
    """Insert a calendar event directly (no source dispatch)."""
    error = add_calendar_event(
        store,
        user_id=body.user_id,
        title=body.title,
        start_time=body.start_time,
        end_time=body.end_time,
        description=body.description,
        source=body.source,
        source_id=body.source_id,
    )
    if error is not None:
        _raise_for_error(error)
    return {"success": True}


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_event(event_id: str, user_id: str, store: EntityStore = Depends(get_store)):
    error = delete_event(store, event_id, user_id)
    if error is not None:
        _raise_for_error(error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/events/{event_id}/move", response_model=CalendarEventMoveResponse)
def move_event(event_id: str, body: CalendarEventMove, store: EntityStore = Depends(get_store)):
    """Reschedule a calendar event (drag-and-drop).

    A failure to reschedule the source entity is not an HTTP error; it shows
    up as linked_entity_updated=false with outcome calendar_only.
    """
    result = update_event(
        store,
        event_id=event_id,
        user_id=body.user_id,
        new_start=body.new_start,
        new_end=body.new_end,
        update_linked_entity=body.update_linked_entity,
    )
    if result.error is not None:
        _raise_for_error(result.error)
    return CalendarEventMoveResponse(
        event=CalendarEventResponse.model_validate(result.event),
        linked_entity_updated=result.linked_entity_updated,
        outcome=result.outcome.value,
    )


@router.post("/entities/{source}", status_code=status.HTTP_201_CREATED)
def create_event_for_entity(source: str, body: EntityEventCreate, store: EntityStore = Depends(get_store)):
    """Create the calendar event for a freshly saved source entity."""
    error = create_calendar_event_for_entity(store, source, body.entity)
    if error is not None:
        _raise_for_error(error)
    return {"success": True}


@router.delete("/entities/{source}/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entity(source: str, entity_id: str, user_id: str, store: EntityStore = Depends(get_store)):
    """Delete a source entity together with its calendar event.

    Workouts also take their exercises and sets with them.
    """
    parsed = parse_source(source)
    if parsed is None:
        _raise_for_error(SyncValidationError(error=f"Invalid source value: {source}"))

    if parsed is CalendarSource.WORKOUT:
        error = delete_workout_cascade(store, workout_id=entity_id, user_id=user_id)
    else:
        error = delete_entity_with_calendar_event(
            store,
            table=SOURCE_TABLES[parsed],
            entity_id=entity_id,
            user_id=user_id,
            source=parsed,
        )
    if error is not None:
        _raise_for_error(error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{source}/{session_id}/complete")
def complete_planned_session(source: str, session_id: str, user_id: str, store: EntityStore = Depends(get_store)):
    """Mark a planned fitness session completed and drop its calendar event."""
    error = cleanup_planned_session_on_completion(store, source, session_id, user_id)
    if error is not None:
        _raise_for_error(error)
    return {"success": True}


@router.get("/route", response_model=EventRouteResponse)
def get_event_route(source: str, source_id: str):
    return EventRouteResponse(path=get_calendar_event_route(source, source_id))


@router.get("/style/{source}", response_model=EventStyleResponse)
def get_style(source: str):
    style = get_event_style(source)
    return EventStyleResponse(color_class=style.color_class, icon=style.icon)


@router.post("/repair/sources", response_model=SourceRepairResponse)
def repair_event_sources(user_id: str | None = None, store: EntityStore = Depends(get_store)):
    """Re-tag planned meal events stored with the meal source."""
    repaired = fix_calendar_event_sources(store, user_id)
    if isinstance(repaired, StoreError):
        _raise_for_error(repaired)
    return SourceRepairResponse(repaired_ids=repaired)
