from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the sensor ingest service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def send_reading(self, body: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post("/data", json=dict(body))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        payload = response.json()
        if not isinstance(payload.get("id"), int):
            raise typer.BadParameter("Unexpected response payload when sending reading.")
        return payload

    def list_readings(self, params: Mapping[str, Optional[Any]]) -> Dict[str, Any]:
        query = {key: value for key, value in params.items() if value is not None}
        try:
            response = self._client.get("/data", params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail") or data.get("error") or data.get("message")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
