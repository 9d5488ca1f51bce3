"""Tests for calendar event deletion and planned session completion."""

import pytest

from app.calendar.errors import SyncValidationError
from app.calendar.sync import (
    cleanup_planned_session_on_completion,
    create_calendar_event_for_entity,
    delete_calendar_event_for_entity,
    update_calendar_event_for_completed_entity,
)
from app.db.store import StoreError


def _planned_event(seed, source: str, source_id: str, user_id: str = "u1") -> dict:
    return seed(
        "calendar_events",
        user_id=user_id,
        title=f"{source} plan",
        start_time="2024-01-15T09:00:00.000Z",
        end_time="2024-01-15T10:00:00.000Z",
        source=source,
        source_id=source_id,
    )


class TestDeleteCalendarEvent:
    def test_create_then_delete_leaves_no_rows(self, store, rows):
        """Test that delete after create removes the (source, source_id) pair."""
        create_calendar_event_for_entity(store, "cardio", {"id": "c1", "user_id": "u1", "activity_type": "Swim", "date": "2024-01-15"})

        error = delete_calendar_event_for_entity(store, "cardio", "c1")

        assert error is None
        assert rows("calendar_events", source="cardio", source_id="c1") == []

    def test_delete_only_matching_pair(self, store, seed, rows):
        _planned_event(seed, "workout", "w1")
        _planned_event(seed, "cardio", "w1")

        delete_calendar_event_for_entity(store, "workout", "w1")

        remaining = rows("calendar_events")
        assert [(e["source"], e["source_id"]) for e in remaining] == [("cardio", "w1")]

    def test_delete_missing_is_success(self, store):
        assert delete_calendar_event_for_entity(store, "meal", "nope") is None

    def test_completed_entity_event_deleted(self, store, seed, rows):
        """Test that completion removes the calendar event rather than updating it."""
        _planned_event(seed, "sport", "s1")

        error = update_calendar_event_for_completed_entity(store, "sport", "s1")

        assert error is None
        assert rows("calendar_events") == []

    def test_delete_error_returned(self, store, make_failing):
        make_failing(store, "delete", message="permission denied")

        error = delete_calendar_event_for_entity(store, "meal", "m1")

        assert isinstance(error, StoreError)
        assert error.message == "permission denied"


class TestCleanupPlannedSession:
    """Planned fitness session -> completed."""

    @pytest.mark.parametrize(
        ("source", "table", "row"),
        [
            ("workout", "fitness_workouts", {"title": "Push"}),
            ("cardio", "fitness_cardio", {"activity_type": "Running"}),
            ("sport", "fitness_sports", {"activity_type": "Tennis"}),
        ],
    )
    def test_planned_session_completed(self, store, seed, rows, source, table, row):
        """Test that the event is deleted and the session marked completed."""
        seed(table, id="s1", user_id="u1", status="planned", in_progress=True, **row)
        _planned_event(seed, source, "s1")

        error = cleanup_planned_session_on_completion(store, source, "s1", "u1")

        assert error is None
        assert rows("calendar_events") == []
        session = rows(table, id="s1")[0]
        assert session["status"] == "completed"
        assert session["in_progress"] is False

    def test_no_calendar_event_is_noop(self, store, seed, rows, make_failing):
        """Test that a session that was never planned is left untouched."""
        seed("fitness_cardio", id="c1", user_id="u1", activity_type="Running", status="planned", in_progress=True)
        update = make_failing(store, "update")
        delete = make_failing(store, "delete")

        error = cleanup_planned_session_on_completion(store, "cardio", "c1", "u1")

        assert error is None
        update.assert_not_called()
        delete.assert_not_called()
        assert rows("fitness_cardio", id="c1")[0]["status"] == "planned"

    def test_repeated_cleanup_is_idempotent(self, store, seed, rows):
        seed("fitness_workouts", id="w1", user_id="u1", title="Push", status="planned", in_progress=True)
        _planned_event(seed, "workout", "w1")

        assert cleanup_planned_session_on_completion(store, "workout", "w1", "u1") is None
        assert cleanup_planned_session_on_completion(store, "workout", "w1", "u1") is None
        assert rows("fitness_workouts", id="w1")[0]["status"] == "completed"

    def test_delete_failure_stops_before_status_update(self, store, seed, rows, make_failing):
        """Test that a failed event delete is returned and the session keeps its status."""
        seed("fitness_workouts", id="w1", user_id="u1", title="Push", status="planned", in_progress=True)
        _planned_event(seed, "workout", "w1")
        make_failing(store, "delete", message="delete failed")
        update = make_failing(store, "update")

        error = cleanup_planned_session_on_completion(store, "workout", "w1", "u1")

        assert isinstance(error, StoreError)
        assert error.message == "delete failed"
        update.assert_not_called()

    def test_status_update_failure_leaves_event_deleted(self, store, seed, rows, make_failing):
        """Test the accepted partial state: event gone, session still in progress."""
        seed("fitness_sports", id="s1", user_id="u1", activity_type="Tennis", status="planned", in_progress=True)
        _planned_event(seed, "sport", "s1")
        make_failing(store, "update", table="fitness_sports", message="update failed")

        error = cleanup_planned_session_on_completion(store, "sport", "s1", "u1")

        assert isinstance(error, StoreError)
        assert error.message == "update failed"
        assert rows("calendar_events") == []
        assert rows("fitness_sports", id="s1")[0]["in_progress"] is True

    def test_non_fitness_source_rejected(self, store, seed, rows, make_failing):
        """Test that a non-fitness source returns an error without touching a source table."""
        seed("fitness_stretching", id="st1", user_id="u1", status="planned", in_progress=True)
        _planned_event(seed, "stretching", "st1")
        update = make_failing(store, "update")

        error = cleanup_planned_session_on_completion(store, "stretching", "st1", "u1")

        assert error == SyncValidationError(error="Unknown fitness type")
        update.assert_not_called()
        assert rows("fitness_stretching", id="st1")[0]["status"] == "planned"

    def test_lookup_failure_returned(self, store, make_failing):
        make_failing(store, "select", table="calendar_events", message="connection reset")

        error = cleanup_planned_session_on_completion(store, "cardio", "c1", "u1")

        assert isinstance(error, StoreError)
        assert error.message == "connection reset"

    def test_other_users_session_not_completed(self, store, seed, rows):
        seed("fitness_cardio", id="c1", user_id="u2", activity_type="Running", status="planned", in_progress=True)
        _planned_event(seed, "cardio", "c1", user_id="u2")

        error = cleanup_planned_session_on_completion(store, "cardio", "c1", "u1")

        assert error is None
        assert rows("fitness_cardio", id="c1")[0]["status"] == "planned"
