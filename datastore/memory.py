from __future__ import annotations

import copy
import logging
from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

from datastore.base import Clock, as_utc, utc_now
from models.records import PageWindow, Reading, ReadingFilter

logger = logging.getLogger(__name__)


class InMemoryReadingStore:
    """Append-only, process-local reading store. Contents are lost on restart."""

    backend = "memory"

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._readings: List[Reading] = []
        self._next_id = 1
        self._lock = Lock()

    def ensure_schema(self) -> None:
        logger.warning(
            "No DATABASE_URL configured; readings are kept in memory only",
            extra={"backend": self.backend},
        )

    def insert(
        self,
        device_id: Optional[str],
        payload: Dict[str, Any],
        timestamp: Optional[datetime] = None,
    ) -> Reading:
        stamp = as_utc(timestamp) if timestamp is not None else self._clock()
        with self._lock:
            reading = Reading(
                id=self._next_id,
                device_id=device_id,
                payload=copy.deepcopy(payload),
                timestamp=stamp,
            )
            self._readings.append(reading)
            self._next_id += 1
            return copy.deepcopy(reading)

    def query(
        self, reading_filter: ReadingFilter, window: PageWindow
    ) -> Tuple[List[Reading], int]:
        with self._lock:
            snapshot = list(self._readings)

        matched = [item for item in snapshot if reading_filter.matches(item.timestamp)]
        matched.sort(key=lambda item: (item.timestamp, item.id), reverse=True)
        page = matched[window.offset : window.offset + window.limit]
        return [copy.deepcopy(item) for item in page], len(matched)

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)

    def close(self) -> None:
        return None
