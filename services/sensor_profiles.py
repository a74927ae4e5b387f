"""Static metadata attached to sensors by name.

AIDA64 logs carry temperatures only. Core counts and the storage flag are
configuration, matched against the sensor label in table order: the first
pattern contained in the label wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class SensorProfile:
    core_count: int
    is_storage: bool = False


DEFAULT_PROFILE = SensorProfile(core_count=1)

SENSOR_PROFILES: Tuple[Tuple[str, SensorProfile], ...] = (
    ("Package", SensorProfile(core_count=8)),
    ("IA", SensorProfile(core_count=4)),
    ("GT", SensorProfile(core_count=4)),
    ("HDD", SensorProfile(core_count=0, is_storage=True)),
)


def profile_for(
    name: str,
    table: Sequence[Tuple[str, SensorProfile]] = SENSOR_PROFILES,
) -> SensorProfile:
    for pattern, profile in table:
        if pattern in name:
            return profile
    return DEFAULT_PROFILE
