"""Tests for source lookups and timestamp helpers."""

from datetime import UTC, date, datetime

import pytest

from app.calendar.helpers import date_part, default_end_time, format_amount, to_iso
from app.calendar.sources import (
    DEFAULT_EVENT_STYLE,
    CalendarSource,
    get_calendar_event_route,
    get_event_style,
    parse_source,
)


class TestRoutes:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("meal", "/food"),
            ("planned_meal", "/food"),
            ("workout", "/fitness"),
            ("cardio", "/fitness"),
            ("stretching", "/fitness"),
            ("sport", "/fitness/sports/s1"),
            ("expense", "/finances/expenses/s1"),
            ("note", "/scratchpad"),
            ("bogus_type", "/"),
        ],
    )
    def test_route_per_source(self, source, expected):
        assert get_calendar_event_route(source, "s1") == expected

    def test_numeric_source_id(self):
        assert get_calendar_event_route(CalendarSource.EXPENSE, 12) == "/finances/expenses/12"


class TestStyles:
    def test_every_source_has_a_style(self):
        for source in CalendarSource:
            style = get_event_style(source)
            assert style.color_class
            assert style.icon

    def test_known_style(self):
        style = get_event_style("workout")
        assert style.color_class == "bg-red-500 text-white"
        assert style.icon == "fitness_center"

    @pytest.mark.parametrize("source", ["bogus_type", "", None])
    def test_unknown_falls_back_to_default(self, source):
        assert get_event_style(source) == DEFAULT_EVENT_STYLE


class TestParseSource:
    def test_known_values(self):
        assert parse_source("planned_meal") is CalendarSource.PLANNED_MEAL

    def test_unknown_value(self):
        assert parse_source("Meal") is None


class TestTimestamps:
    def test_date_only_is_utc_midnight(self):
        assert to_iso("2024-01-15") == "2024-01-15T00:00:00.000Z"

    def test_offset_converted_to_utc(self):
        assert to_iso("2024-01-15T10:30:00+02:00") == "2024-01-15T08:30:00.000Z"

    def test_milliseconds_truncated(self):
        assert to_iso(datetime(2024, 1, 15, 10, 0, 0, 123987, tzinfo=UTC)) == "2024-01-15T10:00:00.123Z"

    def test_date_object(self):
        assert to_iso(date(2024, 1, 15)) == "2024-01-15T00:00:00.000Z"

    def test_default_end_time_adds_one_hour(self):
        assert default_end_time("2024-12-31T23:30:00.000Z") == "2025-01-01T00:30:00.000Z"

    def test_date_part(self):
        assert date_part("2024-02-01T10:00:00Z") == "2024-02-01"

    @pytest.mark.parametrize(("amount", "expected"), [(40.0, "40"), (40, "40"), (12.5, "12.5"), (0.1, "0.1")])
    def test_format_amount(self, amount, expected):
        assert format_amount(amount) == expected
