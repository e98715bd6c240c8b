"""Datetime helpers."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def elapsed_ms(started_at: datetime, finished_at: datetime | None = None) -> int:
    """Milliseconds between two datetimes (defaults to now)."""
    finished_at = finished_at or utc_now()
    return int((finished_at - started_at).total_seconds() * 1000)
