"""Parsers for AIDA64 sensor logs.

Two shapes are supported:

* the minimal form, a header line followed by data lines, of which only the
  most recent one is kept (:func:`parse_latest_row`);
* the full AIDA64 export, where free-text metadata precedes a
  ``Date,Time,UpTime,<sensors...>`` header, a units row follows it, and every
  later row is a sample (:func:`parse_history`).
"""

from __future__ import annotations

import csv
import io
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from services.errors import HeaderNotFoundError, InsufficientDataError, NoValidSamplesError

HEADER_MARKER = "Date"
HEADER_SIGNATURE = "Date,Time,UpTime,CPU"
TIME_COLUMN = "Time"
# Date, Time and UpTime precede the sensor columns.
FIRST_SENSOR_COLUMN = 3


@dataclass(frozen=True)
class LatestRow:
    headers: Tuple[str, ...]
    values: Dict[str, Optional[str]]
    timestamp: str


@dataclass
class SampleHistory:
    """Every positive sample found per sensor, in column order of first sighting."""

    headers: Tuple[str, ...]
    samples_by_sensor: Dict[str, List[float]] = field(default_factory=dict)
    samples: List[float] = field(default_factory=list)
    row_count: int = 0
    timestamp: str = ""


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _read_rows(text: str) -> List[List[str]]:
    return [row for row in csv.reader(io.StringIO(text)) if row]


def _to_number(cell: str) -> Optional[float]:
    candidate = cell.strip()
    if not candidate:
        return None
    try:
        value = float(candidate)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_latest_row(text: str) -> LatestRow:
    """Map each header of ``text`` to its cell in the last non-empty line."""
    rows = [row for row in _read_rows(text) if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        raise InsufficientDataError("Log file does not contain enough data.")

    headers = tuple(cell.strip() for cell in rows[0])
    latest = [cell.strip() for cell in rows[-1]]

    values: Dict[str, Optional[str]] = {}
    for index, name in enumerate(headers):
        values[name] = latest[index] if index < len(latest) else None

    return LatestRow(
        headers=headers,
        values=values,
        timestamp=values.get(TIME_COLUMN) or _utc_now(),
    )


def _is_header(row: List[str]) -> bool:
    first = row[0]
    if _to_number(first) is not None:
        return False
    return HEADER_MARKER in first or HEADER_SIGNATURE in ",".join(row)


def parse_history(text: str) -> SampleHistory:
    """Collect every positive temperature sample below the AIDA64 header row."""
    rows = _read_rows(text)

    header_index = next((i for i, row in enumerate(rows) if _is_header(row)), None)
    if header_index is None:
        raise HeaderNotFoundError("Header row not found in file.")

    headers = tuple(cell.strip() for cell in rows[header_index])
    sensors = headers[FIRST_SENSOR_COLUMN:]
    history = SampleHistory(headers=headers)

    # The row right after the header only carries units.
    for row in rows[header_index + 2 :]:
        if len(row) < FIRST_SENSOR_COLUMN + 1:
            continue
        history.row_count += 1

        found = False
        for offset, sensor in enumerate(sensors):
            column = FIRST_SENSOR_COLUMN + offset
            if column >= len(row):
                break
            value = _to_number(row[column])
            if value is None or value <= 0:
                continue
            history.samples_by_sensor.setdefault(sensor, []).append(value)
            history.samples.append(value)
            found = True

        if found:
            history.timestamp = " ".join(cell.strip() for cell in row[:2] if cell.strip())

    if not history.samples:
        raise NoValidSamplesError("No valid temperature data found.")

    if not history.timestamp:
        history.timestamp = _utc_now()
    return history
