from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_created, render_page


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor ingest service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_fields(fields: List[str]) -> Dict[str, Any]:
    """Turn ``key=value`` arguments into a payload; values are JSON-decoded when possible."""
    payload: Dict[str, Any] = {}
    for item in fields:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {item!r}.")
        payload[key] = _parse_value(raw)
    return payload


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Ingest API base URL (defaults to API_BASE_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    fields: Optional[List[str]] = typer.Argument(None, help="Sensor fields as key=value pairs."),
    device_id: Optional[str] = typer.Option(None, "--device-id", "-d", help="Originating device id."),
    raw_json: Optional[str] = typer.Option(None, "--json", help="Full JSON object to send."),
) -> None:
    """Send one reading to the service."""
    state = _get_state(ctx)
    body: Dict[str, Any] = {}
    if raw_json:
        try:
            decoded = json.loads(raw_json)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"--json is not valid JSON: {exc}") from exc
        if not isinstance(decoded, dict):
            raise typer.BadParameter("--json must be a JSON object.")
        body.update(decoded)
    body.update(parse_fields(fields or []))
    if device_id:
        body.pop("deviceId", None)
        body["device_id"] = device_id
    if not body:
        raise typer.BadParameter("Provide at least one field or --json.")

    typer.echo(f"Sending reading to {state.config.base_url} ...")
    payload = state.client.send_reading(body)
    typer.secho(f"Reading stored. id={payload['id']}", fg=typer.colors.GREEN)
    render_created(payload)


@app.command("list")
def list_command(
    ctx: typer.Context,
    minutes: Optional[int] = typer.Option(None, "--minutes", min=0, help="Only the last N minutes."),
    hours: Optional[int] = typer.Option(None, "--hours", min=0, help="Only the last N hours."),
    days: Optional[int] = typer.Option(None, "--days", min=0, help="Only the last N days."),
    from_: Optional[str] = typer.Option(None, "--from", help="Inclusive lower bound (ISO-8601)."),
    to: Optional[str] = typer.Option(None, "--to", help="Inclusive upper bound (ISO-8601)."),
    page: int = typer.Option(1, "--page", min=1),
    page_size: int = typer.Option(50, "--page-size", min=1),
) -> None:
    """List stored readings, newest first."""
    state = _get_state(ctx)
    payload = state.client.list_readings(
        {
            "minutes": minutes,
            "hours": hours,
            "days": days,
            "from": from_,
            "to": to,
            "page": page,
            "pageSize": page_size,
        }
    )
    render_page(payload)
