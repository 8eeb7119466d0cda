"""
Alert Engine
============
Turns readings into threshold-crossing alerts.

``evaluate`` is a pure function of (reading, thresholds). ``process`` adds
de-duplication owned by the engine: an alert for a given (kind, sensor) is
emitted once and stays open until a reading shows the condition cleared,
which re-arms it. Subscribers receive every newly opened alert.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from humidor.domain import AlertEvent, Reading, ThresholdConfig
from humidor.enums import AlertKind, EnvironmentStatus, Metric

logger = logging.getLogger(__name__)

AlertListener = Callable[[AlertEvent], None]


def environment_status(value: float | None, low: float, high: float, margin: float = 1.0) -> EnvironmentStatus:
    """
    Traffic-light status for one metric.

    CRITICAL outside [low, high], WARNING within ``margin`` of either bound,
    NORMAL otherwise. A missing value is NORMAL.
    """
    if value is None:
        return EnvironmentStatus.NORMAL
    if value < low or value > high:
        return EnvironmentStatus.CRITICAL
    if value - low < margin or high - value < margin:
        return EnvironmentStatus.WARNING
    return EnvironmentStatus.NORMAL


class AlertEngine:
    """Threshold evaluation with per-(kind, sensor) de-duplication."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._open: dict[tuple[AlertKind, str], AlertEvent] = {}
        self._listeners: list[AlertListener] = []

    @staticmethod
    def evaluate(reading: Reading, thresholds: ThresholdConfig) -> list[AlertEvent]:
        """Alerts implied by one reading. A value equal to a bound does not alert."""
        events = []
        for metric in Metric:
            low, high = thresholds.bounds(metric)
            value = reading.value(metric)
            if value < low:
                kind = AlertKind.for_boundary(metric, high=False)
            elif value > high:
                kind = AlertKind.for_boundary(metric, high=True)
            else:
                continue
            events.append(AlertEvent(kind=kind, sensor_id=reading.sensor_id, value=value, timestamp=reading.timestamp))
        return events

    def process(self, reading: Reading, thresholds: ThresholdConfig) -> list[AlertEvent]:
        """
        Evaluate ``reading`` and return only alerts that were not already open.

        Open alerts for this sensor whose condition no longer holds are closed.
        """
        events = self.evaluate(reading, thresholds)
        active_keys = {e.dedup_key for e in events}

        fresh = []
        with self._lock:
            for key in [k for k in self._open if k[1] == reading.sensor_id and k not in active_keys]:
                logger.info("Alert cleared: %s for sensor %s", key[0], key[1])
                del self._open[key]
            for event in events:
                if event.dedup_key in self._open:
                    continue
                self._open[event.dedup_key] = event
                fresh.append(event)
            listeners = list(self._listeners)

        for event in fresh:
            logger.warning("Alert raised for sensor %s: %s", event.sensor_id, event.message)
            for listener in listeners:
                try:
                    listener(event)
                except Exception as e:
                    logger.error("Alert listener %r failed: %s", listener, e, exc_info=True)
        return fresh

    def open_alerts(self, sensor_id: str | None = None) -> list[AlertEvent]:
        with self._lock:
            return [e for e in self._open.values() if sensor_id is None or e.sensor_id == sensor_id]

    def reset(self, sensor_id: str | None = None) -> None:
        """Forget open alerts (all, or one sensor's) so they can fire again."""
        with self._lock:
            if sensor_id is None:
                self._open.clear()
            else:
                for key in [k for k in self._open if k[1] == sensor_id]:
                    del self._open[key]

    def subscribe(self, listener: AlertListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._listeners.remove(listener)
                except ValueError:
                    pass

        return unsubscribe
