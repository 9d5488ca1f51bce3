"""Calendar event sources and the lookups keyed on them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class CalendarSource(StrEnum):
    MEAL = "meal"
    PLANNED_MEAL = "planned_meal"
    WORKOUT = "workout"
    CARDIO = "cardio"
    SPORT = "sport"
    STRETCHING = "stretching"
    EXPENSE = "expense"
    NOTE = "note"


def parse_source(value: str | CalendarSource | None) -> CalendarSource | None:
    """Return the matching source, or None for values outside the enum."""
    if value is None:
        return None
    try:
        return CalendarSource(value)
    except ValueError:
        return None


# Table backing each source
SOURCE_TABLES: dict[CalendarSource, str] = {
    CalendarSource.MEAL: "meals",
    CalendarSource.PLANNED_MEAL: "planned_meals",
    CalendarSource.WORKOUT: "fitness_workouts",
    CalendarSource.CARDIO: "fitness_cardio",
    CalendarSource.SPORT: "fitness_sports",
    CalendarSource.STRETCHING: "fitness_stretching",
    CalendarSource.EXPENSE: "expenses",
    CalendarSource.NOTE: "scratchpad_notes",
}

# Sources whose planned sessions are closed out on completion
FITNESS_TABLES: dict[CalendarSource, str] = {
    CalendarSource.WORKOUT: "fitness_workouts",
    CalendarSource.CARDIO: "fitness_cardio",
    CalendarSource.SPORT: "fitness_sports",
}


@dataclass(frozen=True)
class RescheduleTarget:
    """Where a calendar reschedule is written on the source side.

    Attributes:
        table: Source table name
        date_column: Column receiving the YYYY-MM-DD date
        carries_times: Whether the table also has start_time/end_time columns
    """

    table: str
    date_column: str
    carries_times: bool = False


# Sources without an entry here are left alone when their event moves.
RESCHEDULE_TARGETS: dict[CalendarSource, RescheduleTarget] = {
    CalendarSource.MEAL: RescheduleTarget("meals", "date"),
    CalendarSource.PLANNED_MEAL: RescheduleTarget("planned_meals", "planned_date"),
    CalendarSource.WORKOUT: RescheduleTarget("fitness_workouts", "date", carries_times=True),
    CalendarSource.CARDIO: RescheduleTarget("fitness_cardio", "date", carries_times=True),
    CalendarSource.SPORT: RescheduleTarget("fitness_sports", "date", carries_times=True),
    CalendarSource.EXPENSE: RescheduleTarget("expenses", "date"),
}


def get_calendar_event_route(source: str | CalendarSource, source_id: str | int) -> str:
    """Path the calendar navigates to when an event is clicked.

    Meals, workouts, cardio and stretching open in modals on their section
    page, so only sports sessions and expenses have per-entity routes.
    """
    match parse_source(source):
        case CalendarSource.MEAL | CalendarSource.PLANNED_MEAL:
            return "/food"
        case CalendarSource.WORKOUT | CalendarSource.CARDIO | CalendarSource.STRETCHING:
            return "/fitness"
        case CalendarSource.SPORT:
            return f"/fitness/sports/{source_id}"
        case CalendarSource.EXPENSE:
            return f"/finances/expenses/{source_id}"
        case CalendarSource.NOTE:
            return "/scratchpad"
        case _:
            return "/"


@dataclass(frozen=True)
class EventStyle:
    color_class: str
    icon: str


DEFAULT_EVENT_STYLE = EventStyle(color_class="bg-card text-base", icon="event_note")

EVENT_STYLES: dict[CalendarSource, EventStyle] = {
    CalendarSource.MEAL: EventStyle("bg-orange-500 text-white", "restaurant"),
    CalendarSource.PLANNED_MEAL: EventStyle("bg-orange-400 text-white", "restaurant"),
    CalendarSource.WORKOUT: EventStyle("bg-red-500 text-white", "fitness_center"),
    CalendarSource.CARDIO: EventStyle("bg-green-500 text-white", "directions_run"),
    CalendarSource.SPORT: EventStyle("bg-green-500 text-white", "sports_basketball"),
    CalendarSource.STRETCHING: EventStyle("bg-blue-400 text-white", "accessibility"),
    CalendarSource.EXPENSE: EventStyle("bg-purple-500 text-white", "attach_money"),
    CalendarSource.NOTE: EventStyle("bg-blue-500 text-white", "event_note"),
}


def get_event_style(source: str | CalendarSource | None) -> EventStyle:
    parsed = parse_source(source)
    if parsed is None:
        return DEFAULT_EVENT_STYLE
    return EVENT_STYLES.get(parsed, DEFAULT_EVENT_STYLE)
