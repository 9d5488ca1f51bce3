"""Source entity payloads and how each one becomes a calendar event.

Each source has its own model requiring the fields its title and times are
built from. ``entity_from_payload`` picks the model for a source and
validates a raw mapping into it.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from app.calendar.errors import SyncValidationError
from app.calendar.helpers import format_amount, to_iso, utc_now_iso
from app.calendar.sources import CalendarSource, parse_source

Timestamp = datetime | date | str


@dataclass(frozen=True)
class EventFields:
    """Calendar fields derived from a source entity (before end-time defaulting)."""

    title: str
    start_time: str
    end_time: str | None
    description: str


def _start_or_now(value: Timestamp | None) -> str:
    return to_iso(value) if value else utc_now_iso()


def _optional_iso(value: Timestamp | None) -> str | None:
    return to_iso(value) if value else None


class CalendarEntity(BaseModel):
    """Fields every source entity carries."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        # Integer primary keys are stored as text in calendar_events.source_id
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @abstractmethod
    def to_event_fields(self) -> EventFields: ...


class MealEntity(CalendarEntity):
    name: str
    date: Timestamp | None = None
    description: str | None = None

    def to_event_fields(self) -> EventFields:
        return EventFields(
            title=f"Meal: {self.name}",
            start_time=_start_or_now(self.date),
            end_time=None,
            description=self.description or "",
        )


class PlannedMealEntity(CalendarEntity):
    meal_name: str | None = None
    name: str | None = None
    meal_time: str | None = None
    planned_date: Timestamp | None = None
    description: str | None = None

    def to_event_fields(self) -> EventFields:
        # "dinner" -> "Dinner"; only the first letter changes
        slot = self.meal_time[0].upper() + self.meal_time[1:] if self.meal_time else "Meal"
        return EventFields(
            title=f"{slot}: {self.meal_name or self.name or ''}",
            start_time=_start_or_now(self.planned_date),
            end_time=None,
            description=self.description or "",
        )


class WorkoutEntity(CalendarEntity):
    title: str
    date: Timestamp | None = None
    end_time: Timestamp | None = None
    notes: str | None = None

    def to_event_fields(self) -> EventFields:
        return EventFields(
            title=f"Workout: {self.title}",
            start_time=_start_or_now(self.date),
            end_time=_optional_iso(self.end_time),
            description=self.notes or "",
        )


class CardioEntity(CalendarEntity):
    activity_type: str
    date: Timestamp | None = None
    end_time: Timestamp | None = None
    notes: str | None = None

    def to_event_fields(self) -> EventFields:
        return EventFields(
            title=f"Cardio: {self.activity_type}",
            start_time=_start_or_now(self.date),
            end_time=_optional_iso(self.end_time),
            description=self.notes or "",
        )


class SportEntity(CalendarEntity):
    activity_type: str
    date: Timestamp | None = None
    end_time: Timestamp | None = None
    performance_notes: str | None = None
    notes: str | None = None

    def to_event_fields(self) -> EventFields:
        return EventFields(
            title=f"Sport: {self.activity_type}",
            start_time=_start_or_now(self.date),
            end_time=_optional_iso(self.end_time),
            description=self.performance_notes or self.notes or "",
        )


class ExpenseEntity(CalendarEntity):
    name: str
    amount: float
    date: Timestamp | None = None
    notes: str | None = None

    def to_event_fields(self) -> EventFields:
        return EventFields(
            title=f"Expense: {self.name} - ${format_amount(self.amount)}",
            start_time=_start_or_now(self.date),
            end_time=None,
            description=self.notes or "",
        )


class GenericEntity(CalendarEntity):
    """Stretching sessions, notes and anything without a dedicated template."""

    title: str | None = None
    start_time: Timestamp | None = None
    description: str | None = None

    def to_event_fields(self) -> EventFields:
        return EventFields(
            title=self.title or "Event",
            start_time=_start_or_now(self.start_time),
            end_time=None,
            description=self.description or "",
        )


ENTITY_MODELS: dict[CalendarSource, type[CalendarEntity]] = {
    CalendarSource.MEAL: MealEntity,
    CalendarSource.PLANNED_MEAL: PlannedMealEntity,
    CalendarSource.WORKOUT: WorkoutEntity,
    CalendarSource.CARDIO: CardioEntity,
    CalendarSource.SPORT: SportEntity,
    CalendarSource.EXPENSE: ExpenseEntity,
}


def entity_model_for(source: str | CalendarSource) -> type[CalendarEntity]:
    parsed = parse_source(source)
    if parsed is None:
        return GenericEntity
    return ENTITY_MODELS.get(parsed, GenericEntity)


def entity_from_payload(
    source: str | CalendarSource,
    payload: CalendarEntity | Mapping[str, Any],
) -> CalendarEntity | SyncValidationError:
    """Validate ``payload`` into the entity model for ``source``.

    An already-built entity is returned as is when it is the model for
    ``source``. Validation failures are returned, not raised.
    """
    model = entity_model_for(source)
    if isinstance(payload, CalendarEntity):
        if not isinstance(payload, model):
            return SyncValidationError(error=f"Invalid {source} entity: got {type(payload).__name__}")
        return payload
    try:
        return model.model_validate(dict(payload))
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
        return SyncValidationError(error=f"Invalid {source} entity: {fields}")
