"""
Base Environmental Sensor Interface
====================================
Abstract interface that every sensor backend variant must implement.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime

from humidor.domain import Reading, SensorDescriptor, TimeRange
from humidor.enums import BackendKind
from humidor.utils.cancellation import CancellationToken


class IEnvironmentalSensor(ABC):
    """
    Abstract interface for humidor sensors.
    Each backend (home-automation hub, cloud API) implements this interface.

    Required Methods (must override):
        - fetch_current_reading(): One round trip for the latest values
        - fetch_historical_data(): Bounded history, ascending by timestamp

    Provided:
        - id / display_name / backend_kind from the descriptor
        - last_updated / current_temperature / current_humidity, kept in step
          with the most recent reading seen by this sensor object
    """

    def __init__(self, descriptor: SensorDescriptor):
        self.descriptor = descriptor
        self._lock = threading.Lock()
        self._latest: Reading | None = None

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def display_name(self) -> str:
        return self.descriptor.display_name

    @property
    def backend_kind(self) -> BackendKind:
        return self.descriptor.backend_kind

    @property
    def last_updated(self) -> datetime | None:
        with self._lock:
            return self._latest.timestamp if self._latest else None

    @property
    def current_temperature(self) -> float | None:
        """Latest temperature in °F, or None before the first fetch."""
        with self._lock:
            return self._latest.temperature_f if self._latest else None

    @property
    def current_humidity(self) -> float | None:
        with self._lock:
            return self._latest.humidity_pct if self._latest else None

    def _record(self, reading: Reading) -> None:
        """Adopt ``reading`` as current unless a newer one is already held."""
        with self._lock:
            if self._latest is None or reading.timestamp >= self._latest.timestamp:
                self._latest = reading

    @abstractmethod
    def fetch_current_reading(self, cancel_token: CancellationToken | None = None) -> Reading:
        """
        Fetch the latest reading and update the current values.

        Raises:
            MonitorError subclass describing the backend failure
        """

    @abstractmethod
    def fetch_historical_data(
        self,
        time_range: TimeRange,
        cancel_token: CancellationToken | None = None,
    ) -> list[Reading]:
        """
        Fetch readings for ``time_range``.

        Returns:
            Readings sorted ascending by timestamp, at most ``time_range.limit``
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} backend={self.backend_kind}>"
