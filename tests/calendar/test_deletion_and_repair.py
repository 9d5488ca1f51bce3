"""Tests for entity deletion with calendar cleanup and the source repair utilities."""

from app.calendar.deletion import delete_entity_with_calendar_event, delete_workout_cascade
from app.calendar.repair import count_event_sources, fix_calendar_event_sources
from app.db.store import StoreError


def _calendar_event(seed, source: str, source_id: str, title: str = "t", user_id: str = "u1") -> dict:
    return seed("calendar_events", user_id=user_id, title=title, start_time="2024-01-15T00:00:00.000Z", source=source, source_id=source_id)


class TestDeleteEntityWithCalendarEvent:
    def test_deletes_both(self, store, seed, rows):
        seed("expenses", id="x1", user_id="u1", name="Coffee", amount=3.5)
        _calendar_event(seed, "expense", "x1")

        error = delete_entity_with_calendar_event(store, table="expenses", entity_id="x1", user_id="u1", source="expense")

        assert error is None
        assert rows("expenses") == []
        assert rows("calendar_events") == []

    def test_calendar_failure_keeps_entity(self, store, seed, rows, make_failing):
        seed("meals", id="m1", user_id="u1", name="Soup")
        make_failing(store, "delete", table="calendar_events")

        error = delete_entity_with_calendar_event(store, table="meals", entity_id="m1", user_id="u1", source="meal")

        assert isinstance(error, StoreError)
        assert len(rows("meals")) == 1

    def test_entity_failure_after_calendar_delete(self, store, seed, rows, make_failing):
        """Test the accepted partial state: calendar event gone, entity still there."""
        seed("meals", id="m1", user_id="u1", name="Soup")
        _calendar_event(seed, "meal", "m1")
        make_failing(store, "delete", table="meals")

        error = delete_entity_with_calendar_event(store, table="meals", entity_id="m1", user_id="u1", source="meal")

        assert isinstance(error, StoreError)
        assert rows("calendar_events") == []
        assert len(rows("meals")) == 1


class TestDeleteWorkoutCascade:
    def test_removes_sets_exercises_workout_and_event(self, store, seed, rows):
        seed("fitness_workouts", id="w1", user_id="u1", title="Push")
        seed("fitness_exercises", id="ex1", workout_id="w1", name="Bench")
        seed("fitness_exercises", id="ex2", workout_id="w1", name="Dips")
        seed("fitness_sets", id="set1", exercise_id="ex1", reps=5, weight=100.0)
        seed("fitness_sets", id="set2", exercise_id="ex2", reps=10)
        _calendar_event(seed, "workout", "w1")

        error = delete_workout_cascade(store, workout_id="w1", user_id="u1")

        assert error is None
        for table in ("fitness_sets", "fitness_exercises", "fitness_workouts", "calendar_events"):
            assert rows(table) == [], table

    def test_stops_at_first_error(self, store, seed, rows, make_failing):
        seed("fitness_workouts", id="w1", user_id="u1", title="Push")
        seed("fitness_exercises", id="ex1", workout_id="w1", name="Bench")
        _calendar_event(seed, "workout", "w1")
        make_failing(store, "delete", table="fitness_exercises", message="fk violation")

        error = delete_workout_cascade(store, workout_id="w1", user_id="u1")

        assert error.message == "fk violation"
        assert len(rows("fitness_workouts")) == 1
        assert len(rows("calendar_events")) == 1


class TestRepair:
    def test_fix_retags_planned_meals(self, store, seed, rows):
        dinner = _calendar_event(seed, "meal", "p1", title="Dinner: Tacos")
        _calendar_event(seed, "meal", "m1", title="Meal: Soup")
        snack = _calendar_event(seed, "meal", "p2", title="Snack: Apple")

        repaired = fix_calendar_event_sources(store)

        assert sorted(repaired) == sorted([dinner["id"], snack["id"]])
        sources = {event["source_id"]: event["source"] for event in rows("calendar_events")}
        assert sources == {"p1": "planned_meal", "m1": "meal", "p2": "planned_meal"}

    def test_fix_scoped_by_user(self, store, seed, rows):
        _calendar_event(seed, "meal", "p1", title="Lunch: Salad", user_id="u2")

        assert fix_calendar_event_sources(store, "u1") == []
        assert rows("calendar_events")[0]["source"] == "meal"

    def test_count_event_sources(self, store, seed):
        for index in range(4):
            _calendar_event(seed, "meal", f"m{index}", title=f"Meal {index}")
        _calendar_event(seed, "workout", "w1", title="Workout: Push")

        summary = count_event_sources(store)

        assert summary["meal"]["count"] == 4
        assert len(summary["meal"]["examples"]) == 3
        assert summary["workout"] == {"count": 1, "examples": ["Workout: Push"]}
