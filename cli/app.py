from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from app.schemas import temperature_response
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_log, render_snapshot, render_table
from services.poller import SnapshotPoller
from services.telemetry import build_default_service


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for reading the thermal dashboard from a terminal.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between refreshes for the watch command.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(
        base_url=base_url,
        poll_interval=poll_interval,
        request_timeout=timeout,
    )
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show the current snapshot with summary statistics."""
    state = _get_state(ctx)
    render_snapshot(state.client.get_temperature())


@app.command("log")
def log_command(ctx: typer.Context) -> None:
    """Show the latest row of the server's AIDA64 log."""
    state = _get_state(ctx)
    render_log(state.client.get_log())


@app.command("table")
def table_command(ctx: typer.Context) -> None:
    """Show the per-device temperature table."""
    state = _get_state(ctx)
    render_table(state.client.get_table())


@app.command("upload")
def upload_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to an AIDA64 CSV export."),
) -> None:
    """Upload an AIDA64 export and show the aggregated result."""
    state = _get_state(ctx)
    typer.echo(f"Uploading {file} to {state.config.base_url} ...")
    payload = state.client.upload_file(file)
    if payload.get("error"):
        typer.secho(f"Upload could not be parsed: {payload['error']}", fg=typer.colors.YELLOW)
    else:
        typer.secho("Upload parsed.", fg=typer.colors.GREEN)
    typer.echo()
    render_snapshot(payload)


@app.command("sample")
def sample_command(ctx: typer.Context) -> None:
    """Show the aggregated bundled sample export."""
    state = _get_state(ctx)
    render_snapshot(state.client.get_sample())


@app.command("toggle-mode")
def toggle_mode_command(ctx: typer.Context) -> None:
    """Send the toggle_mode configuration action."""
    state = _get_state(ctx)
    payload = state.client.toggle_mode()
    typer.secho(payload.get("message") or "Done.", fg=typer.colors.GREEN)


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        min=1,
        help="Stop after this many refreshes (runs until interrupted by default).",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Override the refresh interval in seconds.",
    ),
) -> None:
    """Refresh the snapshot on a fixed interval."""
    state = _get_state(ctx)
    seconds = interval if interval is not None else state.config.poll_interval

    def show(payload: Dict[str, Any]) -> None:
        render_snapshot(payload)
        typer.echo()

    poller = SnapshotPoller(
        fetch=state.client.get_temperature,
        subscriber=show,
        interval=seconds,
        max_ticks=count,
    )
    typer.echo(f"Refreshing every {seconds}s from {state.config.base_url} (Ctrl+C to stop)...")
    poller.start()
    try:
        poller.wait()
    except KeyboardInterrupt:
        typer.echo("Stopped.")
    finally:
        poller.stop(timeout=seconds + state.config.request_timeout)


@app.command("parse")
def parse_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to an AIDA64 CSV export."),
) -> None:
    """Aggregate a local AIDA64 export without contacting the server."""
    text = file.read_text(encoding="utf-8-sig", errors="replace")
    snapshot = build_default_service().snapshot_from_upload(text, filename=file.name)
    payload = temperature_response(snapshot).model_dump(mode="json", by_alias=True)
    render_snapshot(payload)
    if snapshot.error:
        raise typer.Exit(code=1)
