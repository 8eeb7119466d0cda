"""
Sensor and Alert Enumerations
==============================

This module contains the enums shared by the sensor backends, the alert
engine and the automation builder.
"""

from enum import Enum


class BackendKind(str, Enum):
    """
    Source of a sensor's readings.
    Used by: capability interface, monitoring service, descriptors
    """
    HUB = "hub"
    CLOUD = "cloud"

    def __str__(self) -> str:
        return self.value


class Metric(str, Enum):
    """Environmental metrics tracked per humidor."""
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"

    @property
    def unit(self) -> str:
        return "°F" if self is Metric.TEMPERATURE else "%"

    def __str__(self) -> str:
        return self.value


class AlertKind(str, Enum):
    """
    Threshold-crossing conditions.
    Used by: alert engine, automation builder
    """
    TEMP_LOW = "temperature_low"
    TEMP_HIGH = "temperature_high"
    HUMIDITY_LOW = "humidity_low"
    HUMIDITY_HIGH = "humidity_high"

    @property
    def metric(self) -> Metric:
        if self in (AlertKind.TEMP_LOW, AlertKind.TEMP_HIGH):
            return Metric.TEMPERATURE
        return Metric.HUMIDITY

    @property
    def is_high(self) -> bool:
        return self in (AlertKind.TEMP_HIGH, AlertKind.HUMIDITY_HIGH)

    @property
    def title(self) -> str:
        """Human-readable title, e.g. "High Temperature"."""
        direction = "High" if self.is_high else "Low"
        return f"{direction} {self.metric.value.capitalize()}"

    @classmethod
    def for_boundary(cls, metric: Metric, high: bool) -> "AlertKind":
        if metric is Metric.TEMPERATURE:
            return cls.TEMP_HIGH if high else cls.TEMP_LOW
        return cls.HUMIDITY_HIGH if high else cls.HUMIDITY_LOW

    def __str__(self) -> str:
        return self.value


class Comparison(str, Enum):
    """Direction in which a hub trigger's characteristic must cross its threshold."""
    GREATER_THAN = ">"
    LESS_THAN = "<"

    def __str__(self) -> str:
        return self.value


class EnvironmentStatus(str, Enum):
    """
    Per-metric status indicator for a humidor.
    NORMAL inside the band, WARNING within the margin of a bound, CRITICAL outside.
    """
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value


class HubCharacteristicType(str, Enum):
    """Characteristic types the core reads from or writes to on the hub."""
    CURRENT_TEMPERATURE = "current_temperature"
    CURRENT_RELATIVE_HUMIDITY = "current_relative_humidity"

    @classmethod
    def for_metric(cls, metric: Metric) -> "HubCharacteristicType":
        if metric is Metric.TEMPERATURE:
            return cls.CURRENT_TEMPERATURE
        return cls.CURRENT_RELATIVE_HUMIDITY

    def __str__(self) -> str:
        return self.value
