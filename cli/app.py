from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import DisplayOptions, render_snapshot
from services.errors import StationDataError
from services.station_data import build_default_service


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for reading openSenseMap boxes through the block proxy.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _fetch_direct(station_id: str) -> Dict[str, Any]:
    service = build_default_service()
    try:
        snapshot = service.get_station_data(station_id)
    except StationDataError as exc:
        typer.secho(
            f"Request failed with status {exc.status}: {exc.message}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1) from exc
    finally:
        service.close()
        build_default_service.cache_clear()
    return snapshot.model_dump(mode="json", by_alias=True)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Proxy base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the proxy to answer.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("station")
def station_command(
    ctx: typer.Context,
    station_id: str = typer.Argument(..., help="openSenseMap box ID."),
    direct: bool = typer.Option(
        False,
        "--direct",
        help="Query the openSenseMap API in-process instead of going through the proxy.",
    ),
    names: bool = typer.Option(True, "--names/--no-names", help="Show or hide sensor names."),
    location: bool = typer.Option(
        True, "--location/--no-location", help="Show or hide the location name."
    ),
    timestamp: bool = typer.Option(
        True, "--timestamp/--no-timestamp", help="Show or hide the last update time."
    ),
) -> None:
    """Print the current readings of a box."""
    state = _get_state(ctx)
    if direct:
        payload = _fetch_direct(station_id)
    else:
        payload = state.client.get_station(station_id)
    render_snapshot(
        payload,
        DisplayOptions(show_names=names, show_location=location, show_timestamp=timestamp),
    )
