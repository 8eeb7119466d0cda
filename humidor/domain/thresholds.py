"""
Threshold Configuration
=======================
Per-humidor min/max bounds used by the alert engine and the automation builder.
"""

from dataclasses import dataclass
from typing import Any

from humidor.enums import Metric


@dataclass(frozen=True)
class ThresholdConfig:
    """Alert bounds for one monitored humidor (temperatures in Fahrenheit)."""

    humidor_id: str
    min_temp: float
    max_temp: float
    min_humidity: float
    max_humidity: float

    def __post_init__(self) -> None:
        if self.min_temp >= self.max_temp:
            raise ValueError(f"min_temp ({self.min_temp}) must be below max_temp ({self.max_temp})")
        if self.min_humidity >= self.max_humidity:
            raise ValueError(
                f"min_humidity ({self.min_humidity}) must be below max_humidity ({self.max_humidity})"
            )

    def bounds(self, metric: Metric) -> tuple[float, float]:
        """Return ``(low, high)`` for ``metric``."""
        if metric is Metric.TEMPERATURE:
            return self.min_temp, self.max_temp
        return self.min_humidity, self.max_humidity

    def to_dict(self) -> dict[str, Any]:
        return {
            "humidor_id": self.humidor_id,
            "min_temp": self.min_temp,
            "max_temp": self.max_temp,
            "min_humidity": self.min_humidity,
            "max_humidity": self.max_humidity,
        }
