"""Unit tests for reading normalization and ingestion."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from datastore.base import StorageError
from datastore.memory import InMemoryReadingStore
from services.ingestion import IngestionService, extract_device_id

_NOW = datetime(2024, 6, 1, 9, 15, 30, tzinfo=timezone.utc)


class FailingStore(InMemoryReadingStore):
    backend = "failing"

    def insert(self, device_id, payload, timestamp=None):
        raise StorageError("relation \"sensor_readings\" does not exist")


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ({"deviceId": "a", "device_id": "b", "t": 1}, "a"),
        ({"deviceId": "", "device_id": "b", "t": 1}, "b"),
        ({"deviceId": None, "device_id": "  ", "t": 1}, None),
        ({"device_id": 42, "t": 1}, "42"),
        ({"t": 1}, None),
        ({"deviceId": False, "device_id": "b", "t": 1}, "b"),
        ({"deviceId": 0, "device_id": "b", "t": 1}, "b"),
        ({"deviceId": {"x": 1}, "t": 1}, None),
        ({"deviceId": 7, "t": 1}, "7"),
    ],
)
def test_extract_device_id(body: dict, expected) -> None:
    device_id, payload = extract_device_id(body)

    assert device_id == expected
    assert payload == {"t": 1}


def test_ingest_stamps_payload_with_receive_time() -> None:
    store = InMemoryReadingStore()
    service = IngestionService(store, clock=lambda: _NOW)

    result = service.ingest({"temperature": 21.5, "device_id": "probe-1"})

    assert result.reading.id == 1
    assert result.reading.device_id == "probe-1"
    assert result.reading.timestamp == _NOW
    assert result.received == {
        "temperature": 21.5,
        "server_timestamp": "2024-06-01T09:15:30Z",
    }
    assert result.reading.payload == result.received


def test_ingest_does_not_mutate_request_body() -> None:
    service = IngestionService(InMemoryReadingStore(), clock=lambda: _NOW)
    body = {"deviceId": "probe-2", "rain": 0}

    service.ingest(body)

    assert body == {"deviceId": "probe-2", "rain": 0}


@pytest.mark.parametrize("body", [None, {}, [], "text", {"deviceId": "only-id"}])
def test_ingest_rejects_bodies_without_fields(body) -> None:
    store = InMemoryReadingStore()
    service = IngestionService(store)

    with pytest.raises(ValueError):
        service.ingest(body)
    assert len(store) == 0


def test_ingest_propagates_storage_errors() -> None:
    service = IngestionService(FailingStore())

    with pytest.raises(StorageError, match="does not exist"):
        service.ingest({"temperature": 20})
