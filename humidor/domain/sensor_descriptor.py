"""Sensor descriptor as reported by a backend listing call."""

from dataclasses import dataclass
from typing import Any

from humidor.enums import BackendKind


@dataclass(frozen=True)
class SensorDescriptor:
    """
    Backend-owned description of a sensor.
    Refreshed on every listing call; the core never persists it.
    """

    id: str
    display_name: str
    backend_kind: BackendKind
    battery_voltage: float | None = None
    signal_strength: int | None = None
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "backend_kind": self.backend_kind.value,
            "battery_voltage": self.battery_voltage,
            "signal_strength": self.signal_strength,
            "is_active": self.is_active,
        }
