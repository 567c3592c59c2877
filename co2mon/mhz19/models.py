"""Domain models for MH-Z19C sensor readings."""

from dataclasses import dataclass, field
from datetime import datetime

from co2mon.lib.config import Unit


@dataclass(frozen=True, slots=True)
class Measurement:
    """A decoded gas concentration value."""

    value: float
    unit: Unit = field(default=Unit.PPM)

    def __str__(self) -> str:
        return f"{self.value:.2f} {self.unit}"


@dataclass(frozen=True, slots=True)
class Reading:
    co2: Measurement
    recording_time: datetime
