from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_STATUS_COLORS = {
    "Cool": typer.colors.BLUE,
    "Normal": typer.colors.GREEN,
    "Warning": typer.colors.YELLOW,
    "Critical": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _echo_status(status: str) -> None:
    typer.secho(status, fg=_STATUS_COLORS.get(status))


def render_snapshot(payload: Dict[str, Any]) -> None:
    echo_heading("Temperature Snapshot")
    echo_key_values(
        [
            ("timestamp", payload.get("timestamp")),
            ("data_source", payload.get("dataSource")),
            ("connected", payload.get("connected")),
        ]
    )
    reason = payload.get("error") or payload.get("message")
    if reason:
        typer.secho(f"fallback: {reason}", fg=typer.colors.YELLOW)

    data = payload.get("data") or {}
    summary = data.get("summary") or {}
    typer.echo()
    echo_heading("Summary")
    echo_key_values(
        [
            ("max_temp", summary.get("maxTemp")),
            ("min_temp", summary.get("minTemp")),
            ("avg_temp", summary.get("avgTemp")),
            ("critical_count", summary.get("criticalCount")),
            ("warning_count", summary.get("warningCount")),
        ]
    )

    sensors = data.get("sensors") or []
    typer.echo()
    echo_heading("Sensors")
    if not sensors:
        typer.echo("No sensors reported.")
        return
    for sensor in sensors:
        typer.echo(
            f"  - {sensor.get('name')}: {sensor.get('currentTemperature')}°C "
            f"(avg {sensor.get('averageTemperature')}, max {sensor.get('maxTemperature')}) ",
            nl=False,
        )
        _echo_status(sensor.get("statusClass", ""))


def render_log(payload: Dict[str, Any]) -> None:
    echo_heading("AIDA64 Log")
    if not payload.get("success"):
        typer.secho(
            f"{payload.get('error')}: {payload.get('message')}",
            fg=typer.colors.RED,
        )
        mock = payload.get("mockData") or {}
        typer.echo(f"Showing {mock.get('source', 'mock data')}:")
        temperatures = mock.get("temperatures") or []
    else:
        echo_key_values([("timestamp", payload.get("timestamp")), ("source", payload.get("source"))])
        temperatures = payload.get("temperatures") or []

    for reading in temperatures:
        typer.echo(f"  - {reading.get('name')}: {reading.get('value')}{reading.get('unit', '')}")


def render_table(payload: Dict[str, Any]) -> None:
    echo_heading("CPU Temperature Monitoring")
    echo_key_values([("data_source", payload.get("dataSource"))])
    for row in payload.get("rows") or []:
        typer.echo(
            f"  {row.get('position')}. {row.get('deviceName')} "
            f"{row.get('currentTemp')}°C [{row.get('acAction')}] ",
            nl=False,
        )
        _echo_status(row.get("status", ""))
