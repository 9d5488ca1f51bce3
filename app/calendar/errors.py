"""Errors returned by the calendar sync functions.

Sync functions never raise across their boundary. They return ``None`` on
success and one of these values on failure:

- StoreError: reported by the entity store, passed through unchanged
- SyncValidationError: rejected by the sync layer before touching the store
"""

from __future__ import annotations

from dataclasses import dataclass

from app.db.store import StoreError


@dataclass(frozen=True)
class SyncValidationError:
    """Input rejected by the sync layer (unknown source, bad entity payload)."""

    error: str

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error}


SyncError = StoreError | SyncValidationError


def unexpected_error(exc: Exception) -> StoreError:
    """Wrap an exception that escaped a sync function."""
    return StoreError(message=str(exc), code="unexpected", details=type(exc).__name__)
