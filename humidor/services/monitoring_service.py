"""
Monitoring Service
==================
Consumer-facing facade over the sensor backends, the reading cache, the
stability analyzer and the alert engine.

The service keeps the registry of sensors, their assignment to humidors and
each humidor's thresholds. Refreshing is caller driven: ``refresh_all`` runs
one pass and ``next_refresh_delay`` tells the caller when to run the next one,
backing off exponentially after repeated failed passes.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from humidor.config import MonitorConfig
from humidor.domain import Reading, StabilityMetrics, ThresholdConfig, TimeRange, WindowSummary
from humidor.enums import EnvironmentStatus, Metric
from humidor.errors import MonitorError, OperationCancelled, SensorNotFound
from humidor.hardware.adapters.sensors import (
    CloudSensor,
    CloudSensorBackend,
    HubSensor,
    HubSensorBackend,
    IEnvironmentalSensor,
)
from humidor.services.alert_engine import AlertEngine, environment_status
from humidor.services.reading_cache import ReadingCache
from humidor.services.stability_analyzer import StabilityAnalyzer
from humidor.utils.cancellation import CancellationToken

logger = logging.getLogger(__name__)

DEFAULT_HUMIDOR_ID = "default"


@dataclass
class RefreshReport:
    """Outcome of one ``refresh_all`` pass."""

    refreshed: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {"refreshed": list(self.refreshed), "failures": dict(self.failures)}


class MonitoringService:
    """Sensor registry plus reading, alerting and stability operations."""

    def __init__(
        self,
        config: MonitorConfig,
        cache: ReadingCache,
        analyzer: StabilityAnalyzer,
        alert_engine: AlertEngine,
        cloud_backend: CloudSensorBackend | None = None,
        hub_backend: HubSensorBackend | None = None,
    ):
        self.config = config
        self.cache = cache
        self.analyzer = analyzer
        self.alert_engine = alert_engine
        self.cloud_backend = cloud_backend
        self.hub_backend = hub_backend

        self._lock = threading.RLock()
        self._sensors: dict[str, IEnvironmentalSensor] = {}
        self._assignments: dict[str, str] = {}
        self._thresholds: dict[str, ThresholdConfig] = {}
        self._failed_attempts = 0

    # ==================== Registry ====================

    def register_sensor(self, sensor: IEnvironmentalSensor) -> IEnvironmentalSensor:
        """Add ``sensor``; an already registered sensor with the same id is kept."""
        with self._lock:
            existing = self._sensors.get(sensor.id)
            if existing is not None:
                return existing
            self._sensors[sensor.id] = sensor
        logger.info("Registered %s sensor %s (%s)", sensor.backend_kind, sensor.id, sensor.display_name)
        return sensor

    def remove_sensor(self, sensor_id: str) -> None:
        with self._lock:
            self._sensors.pop(sensor_id, None)
            self._assignments.pop(sensor_id, None)
        self.cache.remove(sensor_id)
        self.alert_engine.reset(sensor_id)

    def sensor(self, sensor_id: str) -> IEnvironmentalSensor:
        with self._lock:
            sensor = self._sensors.get(sensor_id)
        if sensor is None:
            raise SensorNotFound(sensor_id)
        return sensor

    def sensors(self) -> list[IEnvironmentalSensor]:
        with self._lock:
            return list(self._sensors.values())

    def discover_cloud_sensors(self, cancel_token: CancellationToken | None = None) -> list[IEnvironmentalSensor]:
        if self.cloud_backend is None:
            return []
        return [
            self.register_sensor(CloudSensor(descriptor, self.cloud_backend))
            for descriptor in self.cloud_backend.list_sensors(cancel_token)
        ]

    def discover_hub_sensors(self) -> list[IEnvironmentalSensor]:
        if self.hub_backend is None:
            return []
        return [
            self.register_sensor(HubSensor(descriptor, self.hub_backend))
            for descriptor in self.hub_backend.list_sensors()
        ]

    # ==================== Humidors and thresholds ====================

    def assign(self, sensor_id: str, humidor_id: str) -> None:
        """Attach a registered sensor to a humidor."""
        self.sensor(sensor_id)
        with self._lock:
            self._assignments[sensor_id] = humidor_id

    def set_thresholds(self, thresholds: ThresholdConfig) -> None:
        with self._lock:
            self._thresholds[thresholds.humidor_id] = thresholds
        logger.info("Thresholds updated for humidor %s", thresholds.humidor_id)

    def default_thresholds(self, humidor_id: str = DEFAULT_HUMIDOR_ID) -> ThresholdConfig:
        return ThresholdConfig(
            humidor_id=humidor_id,
            min_temp=self.config.default_min_temperature,
            max_temp=self.config.default_max_temperature,
            min_humidity=self.config.default_min_humidity,
            max_humidity=self.config.default_max_humidity,
        )

    def thresholds_for(self, sensor_id: str) -> ThresholdConfig:
        """Thresholds of the sensor's humidor, or the configured defaults."""
        with self._lock:
            humidor_id = self._assignments.get(sensor_id, DEFAULT_HUMIDOR_ID)
            configured = self._thresholds.get(humidor_id)
        return configured or self.default_thresholds(humidor_id)

    def sensors_for(self, humidor_id: str) -> list[IEnvironmentalSensor]:
        with self._lock:
            return [s for sid, s in self._sensors.items() if self._assignments.get(sid) == humidor_id]

    # ==================== Readings ====================

    def latest_reading(self, sensor_id: str, cancel_token: CancellationToken | None = None) -> Reading:
        """Fetch a fresh reading, cache it and run it through the alert engine.

        Returns the cached current reading, which is the fetched one unless a
        concurrent fetch already stored something newer.
        """
        sensor = self.sensor(sensor_id)
        reading = sensor.fetch_current_reading(cancel_token)
        current = self.cache.update(sensor_id, [reading]) or reading
        # Alerts follow the cached reading; a late, older fetch must not clear them
        self.alert_engine.process(current, self.thresholds_for(sensor_id))
        return current

    def refresh(
        self,
        sensor_id: str,
        time_range: TimeRange = TimeRange.DAY,
        cancel_token: CancellationToken | None = None,
    ) -> list[Reading]:
        """Fetch history for ``time_range`` into the cache; returns the cached window."""
        sensor = self.sensor(sensor_id)
        readings = sensor.fetch_historical_data(time_range, cancel_token)
        current = self.cache.update(sensor_id, readings, window=time_range.duration)
        if readings and current is not None:
            self.alert_engine.process(current, self.thresholds_for(sensor_id))
        return self.cache.history(sensor_id)

    def refresh_all(
        self,
        time_range: TimeRange = TimeRange.DAY,
        cancel_token: CancellationToken | None = None,
    ) -> RefreshReport:
        """One pass over every registered sensor. Per-sensor errors are collected, not raised."""
        report = RefreshReport()
        for sensor in self.sensors():
            try:
                self.refresh(sensor.id, time_range, cancel_token)
                report.refreshed.append(sensor.id)
            except OperationCancelled:
                raise
            except MonitorError as e:
                logger.error("Failed to refresh sensor %s: %s", sensor.id, e)
                report.failures[sensor.id] = str(e)

        with self._lock:
            if report.failures:
                self._failed_attempts += 1
            else:
                self._failed_attempts = 0
            failed = self._failed_attempts
        if failed >= self.config.refresh_max_failed_attempts:
            logger.warning("%d consecutive refresh passes failed", failed)
        return report

    @property
    def failed_attempts(self) -> int:
        with self._lock:
            return self._failed_attempts

    def next_refresh_delay(self) -> float:
        """Seconds until the next pass: the regular interval, or 2^n minutes after repeated failures."""
        failed = self.failed_attempts
        if failed >= self.config.refresh_max_failed_attempts:
            return float(min(self.config.refresh_backoff_cap_seconds, (2**failed) * 60))
        return float(self.config.refresh_interval_seconds)

    # ==================== Derived values ====================

    def stability(self, sensor_id: str) -> StabilityMetrics:
        return self.analyzer.analyze(self.cache.history(sensor_id))

    def summary(self, sensor_id: str) -> dict[Metric, WindowSummary]:
        return self.analyzer.summarize(self.cache.history(sensor_id))

    def _average(self, metric: Metric, humidor_id: str | None) -> float | None:
        sensors = self.sensors() if humidor_id is None else self.sensors_for(humidor_id)
        values = [r.value(metric) for r in (self.cache.current(s.id) for s in sensors) if r is not None]
        if not values:
            return None
        return sum(values) / len(values)

    def average_temperature(self, humidor_id: str | None = None) -> float | None:
        """Mean current temperature (°F) across sensors, or one humidor's sensors."""
        return self._average(Metric.TEMPERATURE, humidor_id)

    def average_humidity(self, humidor_id: str | None = None) -> float | None:
        return self._average(Metric.HUMIDITY, humidor_id)

    def status(self, sensor_id: str) -> dict[Metric, EnvironmentStatus]:
        current = self.cache.current(sensor_id)
        thresholds = self.thresholds_for(sensor_id)
        return {
            metric: environment_status(
                current.value(metric) if current else None,
                *thresholds.bounds(metric),
                margin=self.config.status_warning_margin,
            )
            for metric in Metric
        }
