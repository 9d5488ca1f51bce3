"""One-off repair and inspection of stored calendar events."""

from __future__ import annotations

from collections import Counter

from loguru import logger

from app.calendar.sources import CalendarSource
from app.calendar.sync import CALENDAR_EVENTS_TABLE
from app.db.store import EntityStore, StoreError

PLANNED_MEAL_PREFIXES = ("Breakfast:", "Lunch:", "Dinner:", "Snack:")
MAX_EXAMPLES_PER_SOURCE = 3


def fix_calendar_event_sources(store: EntityStore, user_id: str | None = None) -> list[str] | StoreError:
    """Re-tag planned meals that were stored with source ``meal``.

    Older planner code wrote planned meals as ``meal`` events; their titles
    still carry the meal slot (``Dinner: Tacos``). Rows that fail to update
    are logged and skipped.

    Returns:
        Ids of the repaired events, or the store error from the initial read
    """
    filters: dict[str, str] = {"source": CalendarSource.MEAL.value}
    if user_id is not None:
        filters["user_id"] = user_id

    result = store.select(CALENDAR_EVENTS_TABLE, filters, order_by="created_at")
    if result.error is not None:
        logger.error("[CALENDAR] Error fetching calendar events", error=result.error.message)
        return result.error

    repaired: list[str] = []
    for event in result.data:
        if not any(prefix in event["title"] for prefix in PLANNED_MEAL_PREFIXES):
            continue
        update = store.update(
            CALENDAR_EVENTS_TABLE,
            {"source": CalendarSource.PLANNED_MEAL.value},
            {"id": event["id"]},
        )
        if update.error is not None:
            logger.error("[CALENDAR] Error updating event source", event_id=event["id"], error=update.error.message)
            continue
        repaired.append(event["id"])

    if repaired:
        logger.info(f"[CALENDAR] Re-tagged {len(repaired)} planned meal events")
    return repaired


def count_event_sources(store: EntityStore, user_id: str | None = None) -> dict[str, dict] | StoreError:
    """Row count per source with a few example titles each.

    Returns:
        {source: {"count": int, "examples": [title, ...]}}, or the store error
    """
    filters = {"user_id": user_id} if user_id is not None else None
    result = store.select(CALENDAR_EVENTS_TABLE, filters, columns=["source", "title"], order_by="created_at")
    if result.error is not None:
        logger.error("[CALENDAR] Error fetching calendar events", error=result.error.message)
        return result.error

    counts = Counter(row["source"] for row in result.data)
    summary: dict[str, dict] = {source: {"count": count, "examples": []} for source, count in counts.items()}
    for row in result.data:
        examples = summary[row["source"]]["examples"]
        if len(examples) < MAX_EXAMPLES_PER_SOURCE:
            examples.append(row["title"])
    return summary
