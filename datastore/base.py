"""Storage contract shared by the durable and volatile reading stores."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from models.records import PageWindow, Reading, ReadingFilter

Clock = Callable[[], datetime]


class StorageError(RuntimeError):
    """Raised when the backing store cannot complete an operation."""


class ReadingStore(Protocol):
    backend: str

    def ensure_schema(self) -> None:
        ...

    def insert(
        self,
        device_id: Optional[str],
        payload: Dict[str, Any],
        timestamp: Optional[datetime] = None,
    ) -> Reading:
        ...

    def query(
        self, reading_filter: ReadingFilter, window: PageWindow
    ) -> Tuple[List[Reading], int]:
        ...

    def close(self) -> None:
        ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to an aware UTC instant; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
