"""
Sensor Reading Value Object
============================
Immutable value object representing a temperature/humidity reading.
Temperatures are always stored in Fahrenheit, whatever the backend's native unit.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from humidor.enums import Metric
from humidor.utils.time import ensure_utc


def to_fahrenheit(celsius: float) -> float:
    """Convert a Celsius value to Fahrenheit."""
    return celsius * 9 / 5 + 32


def to_celsius(fahrenheit: float) -> float:
    """Convert a Fahrenheit value to Celsius."""
    return (fahrenheit - 32) * 5 / 9


@dataclass(frozen=True)
class Reading:
    """
    Immutable sensor reading.
    Represents a single point-in-time sample from one sensor.
    """

    sensor_id: str
    timestamp: datetime
    temperature_f: float
    humidity_pct: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        object.__setattr__(self, "temperature_f", float(self.temperature_f))
        object.__setattr__(self, "humidity_pct", float(self.humidity_pct))

    @classmethod
    def from_celsius(cls, sensor_id: str, timestamp: datetime, temperature_c: float, humidity_pct: float) -> "Reading":
        """Build a reading from a backend that reports Celsius."""
        return cls(
            sensor_id=sensor_id,
            timestamp=timestamp,
            temperature_f=to_fahrenheit(temperature_c),
            humidity_pct=humidity_pct,
        )

    def value(self, metric: Metric) -> float:
        """Return the value for ``metric``."""
        if metric is Metric.TEMPERATURE:
            return self.temperature_f
        return self.humidity_pct

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary"""
        return {
            "sensor_id": self.sensor_id,
            "timestamp": self.timestamp.isoformat(),
            "temperature_f": self.temperature_f,
            "humidity_pct": self.humidity_pct,
        }
