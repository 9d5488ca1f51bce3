"""API schemas for calendar events."""

from typing import Any

from pydantic import BaseModel, Field


class CalendarEventResponse(BaseModel):
    """A calendar event row."""

    id: str = Field(description="Event identifier")
    user_id: str = Field(description="Owning user")
    title: str = Field(description="Display title")
    description: str = Field(description="Free text, may be empty", default="")
    start_time: str = Field(description="ISO 8601 start timestamp")
    end_time: str | None = Field(description="ISO 8601 end timestamp", default=None)
    source: str = Field(description="meal | planned_meal | workout | cardio | sport | stretching | expense | note")
    source_id: str = Field(description="Identifier of the source entity")


class CalendarEventCreate(BaseModel):
    """Request body for POST /calendar/events."""

    user_id: str
    title: str
    start_time: str = Field(description="ISO 8601 start timestamp")
    end_time: str | None = Field(description="Defaults to one hour after start_time", default=None)
    description: str = ""
    source: str
    source_id: str


class CalendarEventMove(BaseModel):
    """Request body for POST /calendar/events/{event_id}/move."""

    user_id: str
    new_start: str = Field(description="ISO 8601 start timestamp")
    new_end: str | None = Field(description="Keeps the current end time when omitted", default=None)
    update_linked_entity: bool = Field(description="Also reschedule the source entity", default=False)


class CalendarEventMoveResponse(BaseModel):
    event: CalendarEventResponse
    linked_entity_updated: bool
    outcome: str = Field(description="fully_synced | calendar_only")


class EntityEventCreate(BaseModel):
    """Request body for POST /calendar/entities/{source}: the source entity as stored."""

    entity: dict[str, Any]


class EventRouteResponse(BaseModel):
    path: str


class EventStyleResponse(BaseModel):
    color_class: str
    icon: str


class SourceRepairResponse(BaseModel):
    repaired_ids: list[str]
