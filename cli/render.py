from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import typer


@dataclass(frozen=True)
class DisplayOptions:
    """Which optional parts of a snapshot to print."""

    show_names: bool = True
    show_location: bool = True
    show_timestamp: bool = True


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def format_sensor(sensor: Dict[str, Any], show_name: bool) -> str:
    measurement = sensor.get("lastMeasurement")
    if measurement:
        reading = f"{measurement.get('value')} {sensor.get('unit') or ''}".rstrip()
    else:
        reading = "No data"
    if show_name:
        return f"{sensor.get('name')}: {reading}"
    return reading


def render_snapshot(payload: Dict[str, Any], options: DisplayOptions) -> None:
    location = payload.get("currentLocation")
    if options.show_location and location:
        echo_heading(location)

    sensors = payload.get("sensors") or []
    if sensors:
        for sensor in sensors:
            typer.echo(f"  - {format_sensor(sensor, options.show_names)}")
    else:
        typer.echo("No sensors reported.")

    last_measurement_at = payload.get("lastMeasurementAt")
    if options.show_timestamp and last_measurement_at:
        typer.echo()
        typer.echo(f"Last updated: {last_measurement_at}")
