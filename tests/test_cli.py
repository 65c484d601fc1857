from __future__ import annotations

from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from cli.app import app, parse_fields


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.sent: List[Dict[str, Any]] = []
        self.list_params: List[Dict[str, Any]] = []
        self.page_payload: Dict[str, Any] = {
            "pagination": {
                "page": 1,
                "pageSize": 50,
                "totalRows": 1,
                "totalPages": 1,
                "hasNext": False,
                "hasPrev": False,
            },
            "data": [
                {
                    "id": 7,
                    "device_id": "probe-1",
                    "payload": {"temperature": 21.5},
                    "timestamp": "2024-01-01 03:00:00",
                    "timestamp_utc": "2024-01-01T00:00:00Z",
                }
            ],
        }
        self.closed = False

    def send_reading(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self.sent.append(dict(body))
        received = {k: v for k, v in body.items() if k not in ("device_id", "deviceId")}
        received["server_timestamp"] = "2024-01-01T00:00:00Z"
        return {
            "message": "Data stored successfully",
            "id": 7,
            "device_id": body.get("device_id"),
            "timestamp": "2024-01-01T00:00:00Z",
            "timestamp_formatted": "2024-01-01 03:00:00",
            "received": received,
        }

    def list_readings(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.list_params.append(dict(params))
        return self.page_payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return client


def test_parse_fields_decodes_json_values() -> None:
    assert parse_fields(["temperature=21.5", "ok=true", "label=north", "raw="]) == {
        "temperature": 21.5,
        "ok": True,
        "label": "north",
        "raw": "",
    }


def test_send_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(
        app,
        ["--base-url", "http://sensors.local:9000/", "send", "temperature=21.5", "--device-id", "probe-1"],
    )

    assert result.exit_code == 0
    assert "Reading stored. id=7" in result.stdout
    assert stub.sent == [{"temperature": 21.5, "device_id": "probe-1"}]
    assert stub.config.base_url == "http://sensors.local:9000"
    assert stub.closed is True


def test_send_command_merges_json_body(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["send", "--json", '{"humidity": 40}', "pressure=1013"])

    assert result.exit_code == 0
    assert stub.sent == [{"humidity": 40, "pressure": 1013}]


def test_send_command_device_id_flag_replaces_json_device_id(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["send", "--json", '{"deviceId": "Y", "rain": 0}', "--device-id", "X"])

    assert result.exit_code == 0
    assert stub.sent == [{"rain": 0, "device_id": "X"}]


def test_send_command_requires_fields(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["send"])

    assert result.exit_code != 0
    assert stub.sent == []


def test_list_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["list", "--hours", "3", "--page-size", "10"])

    assert result.exit_code == 0
    assert "totalRows: 1" in result.stdout
    assert "#7 2024-01-01 03:00:00 [probe-1]" in result.stdout
    assert stub.list_params == [
        {
            "minutes": None,
            "hours": 3,
            "days": None,
            "from": None,
            "to": None,
            "page": 1,
            "pageSize": 10,
        }
    ]
    assert stub.closed is True
