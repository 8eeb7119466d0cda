"""Per-process cache of the latest reading and a time window of history per sensor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import Lock
from typing import Any, Iterable

from humidor.domain import Reading
from humidor.utils.concurrency import synchronized

logger = logging.getLogger(__name__)


@dataclass
class _SensorEntry:
    current: Reading | None = None
    history: list[Reading] = field(default_factory=list)
    window: timedelta | None = None


class ReadingCache:
    """
    Thread-safe map of sensor id to (current reading, ascending history).

    Writers may finish out of order; the current reading is only replaced by a
    candidate at least as new as the cached one. The cache never schedules
    refreshes on its own.

    Each sensor remembers the last window it was updated with, so later
    updates without one (polling the current reading) stay bounded.
    ``default_window`` applies to sensors that were never given a window.
    """

    def __init__(self, default_window: timedelta | None = None) -> None:
        self.default_window = default_window
        self._entries: dict[str, _SensorEntry] = {}
        self._lock = Lock()

        self._stale_rejections = 0

    def update(
        self,
        sensor_id: str,
        readings: Iterable[Reading],
        window: timedelta | None = None,
    ) -> Reading | None:
        """
        Merge ``readings`` into the sensor's history and advance its current reading.

        Args:
            sensor_id: Sensor the readings belong to
            readings: New readings, any order
            window: Keep only history within this span of the newest reading;
                remembered for later updates of this sensor

        Returns:
            The current reading after the merge
        """
        incoming = sorted(readings, key=lambda r: r.timestamp)
        with self._lock:
            entry = self._entries.setdefault(sensor_id, _SensorEntry())

            if incoming:
                by_timestamp = {r.timestamp: r for r in entry.history}
                for reading in incoming:
                    by_timestamp[reading.timestamp] = reading
                entry.history = [by_timestamp[ts] for ts in sorted(by_timestamp)]

                candidate = incoming[-1]
                if entry.current is None or candidate.timestamp >= entry.current.timestamp:
                    entry.current = candidate
                else:
                    self._stale_rejections += 1
                    logger.debug(
                        "Kept newer cached reading for %s (%s) over %s",
                        sensor_id,
                        entry.current.timestamp.isoformat(),
                        candidate.timestamp.isoformat(),
                    )

            if window is not None:
                entry.window = window
            window = entry.window or self.default_window
            if window is not None and entry.history:
                cutoff = entry.history[-1].timestamp - window
                entry.history = [r for r in entry.history if r.timestamp >= cutoff]

            return entry.current

    @synchronized
    def current(self, sensor_id: str) -> Reading | None:
        entry = self._entries.get(sensor_id)
        return entry.current if entry else None

    def history(self, sensor_id: str, since: datetime | None = None) -> list[Reading]:
        """Ascending history, optionally only readings at or after ``since``."""
        with self._lock:
            entry = self._entries.get(sensor_id)
            if entry is None:
                return []
            if since is None:
                return list(entry.history)
            return [r for r in entry.history if r.timestamp >= since]

    @synchronized
    def remove(self, sensor_id: str) -> None:
        self._entries.pop(sensor_id, None)

    @synchronized
    def clear(self) -> None:
        self._entries.clear()

    @synchronized
    def sensor_ids(self) -> list[str]:
        return list(self._entries)

    def get_stats(self) -> dict[str, Any]:
        """Cache statistics for diagnostics."""
        with self._lock:
            return {
                "sensors": len(self._entries),
                "readings": sum(len(e.history) for e in self._entries.values()),
                "stale_rejections": self._stale_rejections,
            }
