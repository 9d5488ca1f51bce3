"""Tests for the maintenance commands of the CLI."""

import pytest
from typer.testing import CliRunner

import cli.cli as cli_module
from app.db.store import StoreError, StoreResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def use_test_store(monkeypatch, store):
    monkeypatch.setattr(cli_module, "get_store", lambda: store)


def test_repair_sources(seed, rows):
    seed("calendar_events", user_id="u1", title="Breakfast: Eggs", start_time="2024-01-15T00:00:00.000Z", source="meal", source_id="p1")

    result = runner.invoke(cli_module.app, ["repair-sources"])

    assert result.exit_code == 0
    assert "Re-tagged 1" in result.output
    assert rows("calendar_events")[0]["source"] == "planned_meal"


def test_source_counts(seed):
    seed("calendar_events", user_id="u1", title="Workout: Push", start_time="2024-01-15T00:00:00.000Z", source="workout", source_id="w1")

    result = runner.invoke(cli_module.app, ["source-counts", "--user-id", "u1"])

    assert result.exit_code == 0
    assert "workout" in result.output


def test_read_failure_exits_nonzero(store, monkeypatch):
    monkeypatch.setattr(store, "select", lambda *args, **kwargs: StoreResult(error=StoreError(message="db down", code="OperationalError")))

    result = runner.invoke(cli_module.app, ["source-counts"])

    assert result.exit_code == 1
    assert "db down" in result.output
