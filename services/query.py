"""Filtering and pagination over stored readings."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from app.schemas import PaginationMeta, ReadingOut, ReadingPage
from datastore.base import Clock, ReadingStore, utc_now
from models.records import PageWindow, Reading, ReadingFilter
from services.formatting import format_display, format_iso

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class QueryParams:
    minutes: Optional[int] = None
    hours: Optional[int] = None
    days: Optional[int] = None
    from_: Optional[str] = None
    to: Optional[str] = None
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or date-time; naive values are read as UTC."""
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        try:
            day = date.fromisoformat(candidate)
        except ValueError as exc:
            raise ValueError(f"Invalid date-time value {value!r}") from exc
        parsed = datetime(day.year, day.month, day.day)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError(f"Date-time value {value!r} is out of range") from exc


def _relative_bound(now: datetime, unit: str, amount: int) -> datetime:
    # A window reaching past the earliest representable instant matches everything.
    try:
        return now - timedelta(**{unit: amount})
    except OverflowError:
        return EARLIEST


def build_filter(params: QueryParams, now: datetime) -> ReadingFilter:
    """Translate request parameters into independent, AND-ed timestamp bounds."""
    lower: list[datetime] = []
    upper: list[datetime] = []

    relative = (
        (params.minutes, "minutes"),
        (params.hours, "hours"),
        (params.days, "days"),
    )
    for amount, unit in relative:
        if amount is not None:
            lower.append(_relative_bound(now, unit, amount))

    if params.from_:
        lower.append(parse_timestamp(params.from_))
    if params.to:
        upper.append(parse_timestamp(params.to))

    return ReadingFilter(lower_bounds=tuple(lower), upper_bounds=tuple(upper))


def page_window(page: int, page_size: int) -> PageWindow:
    if page < 1:
        raise ValueError("page must be at least 1")
    if page_size < 1:
        raise ValueError("pageSize must be at least 1")
    return PageWindow(offset=(page - 1) * page_size, limit=page_size)


def build_pagination(page: int, page_size: int, total_rows: int) -> PaginationMeta:
    total_pages = math.ceil(total_rows / page_size)
    return PaginationMeta(
        page=page,
        pageSize=page_size,
        totalRows=total_rows,
        totalPages=total_pages,
        hasNext=page < total_pages,
        hasPrev=page > 1,
    )


def to_output(reading: Reading) -> ReadingOut:
    return ReadingOut(
        id=reading.id,
        device_id=reading.device_id,
        payload=reading.payload,
        timestamp=format_display(reading.timestamp),
        timestamp_utc=format_iso(reading.timestamp),
    )


class QueryService:

    def __init__(self, store: ReadingStore, clock: Clock = utc_now) -> None:
        self.store = store
        self._clock = clock

    def list_readings(self, params: QueryParams) -> ReadingPage:
        """Return one page of readings, newest first, with pagination metadata.

        Raises ``ValueError`` for unparsable bounds or an invalid window; storage
        failures propagate as ``StorageError``.
        """
        reading_filter = build_filter(params, self._clock())
        window = page_window(params.page, params.page_size)

        readings, total_rows = self.store.query(reading_filter, window)
        pagination = build_pagination(params.page, params.page_size, total_rows)
        logger.debug(
            "Readings queried",
            extra={"page": params.page, "page_size": params.page_size, "total_rows": total_rows},
        )
        return ReadingPage(
            pagination=pagination,
            data=[to_output(reading) for reading in readings],
        )
