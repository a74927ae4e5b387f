"""Synthetic values used when no real log is available.

Everything produced here is fabricated. Callers tag it as such: snapshots
built from :class:`MockGenerator` carry the mock provenance, and usage
figures from :func:`synthetic_usage` set ``usage_synthetic``.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple

from models.records import SensorReading
from services.sensor_profiles import SensorProfile, profile_for

MOCK_SENSORS: Tuple[str, ...] = (
    "CPU",
    "CPU Package",
    "CPU IA Cores",
    "CPU GT Cores",
    "HDD1",
)


def synthetic_usage(profile: SensorProfile, rng: random.Random) -> Tuple[int, bool]:
    """Return ``(usage_percent, synthetic)`` for a sensor with no usage signal."""
    if profile.is_storage:
        return 0, False
    return rng.randrange(100), True


class MockGenerator:
    """Plausible readings centred on typical CPU and drive temperatures.

    CPU sensors share one variation in [-10, 10] around ``cpu_base`` and every
    sensor after the first adds its own jitter in [-2.5, 2.5]. Storage sensors
    fall in ``[storage_base, storage_base + 10]``.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        sensors: Sequence[str] = MOCK_SENSORS,
        cpu_base: float = 65.0,
        storage_base: float = 35.0,
    ) -> None:
        self.rng = rng or random.Random()
        self.sensors = tuple(sensors)
        self.cpu_base = cpu_base
        self.storage_base = storage_base

    def readings(self) -> List[SensorReading]:
        variation = self.rng.uniform(-10, 10)
        readings: List[SensorReading] = []
        for index, name in enumerate(self.sensors):
            if profile_for(name).is_storage:
                value = self.storage_base + self.rng.uniform(0, 10)
            else:
                jitter = self.rng.uniform(-2.5, 2.5) if index else 0.0
                value = self.cpu_base + variation + jitter
            readings.append(SensorReading(name=name, value=round(value, 1)))
        return readings
