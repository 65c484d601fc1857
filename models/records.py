"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


@dataclass(slots=True)
class Reading:
    """A single stored sensor reading."""

    id: int
    device_id: Optional[str]
    payload: Dict[str, Any]
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class ReadingFilter:
    """Inclusive timestamp bounds; every bound applies (logical AND)."""

    lower_bounds: Tuple[datetime, ...] = field(default_factory=tuple)
    upper_bounds: Tuple[datetime, ...] = field(default_factory=tuple)

    def matches(self, timestamp: datetime) -> bool:
        return all(timestamp >= bound for bound in self.lower_bounds) and all(
            timestamp <= bound for bound in self.upper_bounds
        )


@dataclass(frozen=True, slots=True)
class PageWindow:
    offset: int
    limit: int
