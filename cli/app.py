from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_devices, render_history, render_reading


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the telemetry hub.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Hub API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("devices")
def devices_command(ctx: typer.Context) -> None:
    """List every device with its latest reading."""
    state = _get_state(ctx)
    render_devices(state.client.list_latest())


@app.command("latest")
def latest_command(
    ctx: typer.Context,
    device_id: str = typer.Argument(..., help="Device identifier."),
) -> None:
    """Show the latest reading for a device."""
    state = _get_state(ctx)
    reading = state.client.get_latest(device_id)
    if reading is None:
        typer.secho(f"Device {device_id} has not reported.", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    render_reading(reading)


@app.command("history")
def history_command(
    ctx: typer.Context,
    device_id: str = typer.Argument(..., help="Device identifier."),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Only show the N most recent readings.",
    ),
) -> None:
    """Show recent readings for a device, newest first."""
    state = _get_state(ctx)
    readings = state.client.get_history(device_id)
    if limit is not None:
        readings = readings[:limit]
    render_history(device_id, readings)
