from __future__ import annotations

import json
from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_created(payload: Dict[str, Any]) -> None:
    echo_heading("Stored Reading")
    echo_key_values(
        [
            ("id", payload.get("id")),
            ("device_id", payload.get("device_id")),
            ("timestamp", payload.get("timestamp_formatted")),
        ]
    )
    typer.echo(f"received: {json.dumps(payload.get('received') or {}, sort_keys=True)}")


def render_page(payload: Dict[str, Any]) -> None:
    pagination = payload.get("pagination") or {}
    echo_heading("Pagination")
    echo_key_values(
        [
            ("page", f"{pagination.get('page')} of {pagination.get('totalPages')}"),
            ("pageSize", pagination.get("pageSize")),
            ("totalRows", pagination.get("totalRows")),
        ]
    )

    rows = payload.get("data") or []
    typer.echo()
    echo_heading("Readings")
    if not rows:
        typer.echo("No readings found.")
        return
    for row in rows:
        device = row.get("device_id") or "-"
        fields = json.dumps(row.get("payload") or {}, sort_keys=True)
        typer.echo(f"  #{row.get('id')} {row.get('timestamp')} [{device}] {fields}")
