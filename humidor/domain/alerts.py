"""
Environmental Alert Event
=========================
Transient event raised when a reading crosses a threshold bound.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from humidor.enums import AlertKind


@dataclass(frozen=True)
class AlertEvent:
    """A threshold crossing for one sensor. Identity for de-duplication is (kind, sensor_id)."""

    kind: AlertKind
    sensor_id: str
    value: float
    timestamp: datetime

    @property
    def dedup_key(self) -> tuple[AlertKind, str]:
        return (self.kind, self.sensor_id)

    @property
    def title(self) -> str:
        return self.kind.title

    @property
    def message(self) -> str:
        metric = self.kind.metric
        direction = "high" if self.kind.is_high else "low"
        return f"{metric.value.capitalize()} is too {direction} ({self.value:.1f}{metric.unit})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "sensor_id": self.sensor_id,
            "value": self.value,
            "timestamp": self.timestamp.isoformat(),
            "title": self.title,
            "message": self.message,
        }
