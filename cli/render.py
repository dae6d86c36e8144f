from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

import typer

_READING_FIELDS = (
    "temperature",
    "humidity",
    "airQualityStatus",
    "airQualityRaw",
    "co2",
    "co",
    "nh3",
    "ch4",
    "isLight",
    "motionDetected",
    "timestamp",
    "receivedAt",
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_reading(payload: Dict[str, Any]) -> None:
    echo_heading(f"Device {payload.get('deviceId')}")
    echo_key_values((field, payload.get(field)) for field in _READING_FIELDS)


def render_devices(readings: Sequence[Dict[str, Any]]) -> None:
    echo_heading("Devices")
    if not readings:
        typer.echo("No devices have reported yet.")
        return
    for reading in sorted(readings, key=lambda item: str(item.get("deviceId"))):
        typer.echo(
            f"  - {reading.get('deviceId')}: "
            f"temperature={reading.get('temperature')} "
            f"humidity={reading.get('humidity')} "
            f"receivedAt={reading.get('receivedAt')}"
        )


def render_history(device_id: str, readings: Sequence[Dict[str, Any]]) -> None:
    echo_heading(f"History for {device_id} (newest first)")
    if not readings:
        typer.echo("No readings recorded.")
        return
    for reading in readings:
        typer.echo(
            f"  - {reading.get('receivedAt')}: "
            f"temperature={reading.get('temperature')} "
            f"humidity={reading.get('humidity')} "
            f"co2={reading.get('co2')} "
            f"status={reading.get('airQualityStatus')}"
        )
