"""Timestamp presentation helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from datastore.base import as_utc

# East Africa Time has no daylight saving, so a fixed offset is exact.
DISPLAY_TIMEZONE = timezone(timedelta(hours=3), "EAT")


def format_display(value: datetime) -> str:
    """Render an instant as ``YYYY-MM-DD HH:MM:SS`` in East Africa Time."""
    local = as_utc(value).astimezone(DISPLAY_TIMEZONE)
    # strftime does not zero-pad years below 1000 on every platform.
    return (
        f"{local.year:04d}-{local.month:02d}-{local.day:02d} "
        f"{local.hour:02d}:{local.minute:02d}:{local.second:02d}"
    )


def format_iso(value: datetime) -> str:
    return as_utc(value).isoformat().replace("+00:00", "Z")
