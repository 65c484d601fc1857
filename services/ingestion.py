"""Normalization and persistence of incoming sensor readings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from datastore.base import Clock, ReadingStore, utc_now
from models.records import Reading
from services.formatting import format_iso

logger = logging.getLogger(__name__)

DEVICE_ID_FIELDS = ("deviceId", "device_id")
SERVER_TIMESTAMP_FIELD = "server_timestamp"


@dataclass
class IngestionResult:
    reading: Reading
    received: Dict[str, Any]


def extract_device_id(body: Dict[str, Any]) -> tuple[Optional[str], Dict[str, Any]]:
    """Split the device identifier out of a request body.

    ``deviceId`` wins over ``device_id`` when both carry a value. Only non-empty
    strings and non-zero integers count as a value. Both keys are
    dropped from the returned payload whether or not they were used.
    """
    device_id: Optional[str] = None
    for key in DEVICE_ID_FIELDS:
        value = body.get(key)
        if isinstance(value, bool) or not isinstance(value, (str, int)) or not value:
            continue
        candidate = str(value).strip()
        if candidate:
            device_id = candidate
            break

    payload = {key: value for key, value in body.items() if key not in DEVICE_ID_FIELDS}
    return device_id, payload


class IngestionService:

    def __init__(self, store: ReadingStore, clock: Clock = utc_now) -> None:
        self.store = store
        self._clock = clock

    def ingest(self, body: Any) -> IngestionResult:
        """Validate, normalize and persist one reading.

        Raises ``ValueError`` for bodies that carry no sensor fields and lets
        ``StorageError`` from the store propagate untouched.
        """
        if not isinstance(body, dict) or not body:
            raise ValueError("No sensor data received")

        device_id, payload = extract_device_id(body)
        if not payload:
            raise ValueError("No sensor fields received")

        received_at = self._clock()
        payload[SERVER_TIMESTAMP_FIELD] = format_iso(received_at)

        reading = self.store.insert(device_id, payload, received_at)
        logger.info(
            "Reading stored",
            extra={"reading_id": reading.id, "device_id": device_id, "backend": self.store.backend},
        )
        return IngestionResult(reading=reading, received=payload)
