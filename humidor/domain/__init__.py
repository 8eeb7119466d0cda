"""Domain value objects for the monitoring core."""

from humidor.domain.alerts import AlertEvent
from humidor.domain.auth import AuthToken
from humidor.domain.automation import AutomationResult, AutomationRule, MonitoredUnit
from humidor.domain.reading import Reading, to_celsius, to_fahrenheit
from humidor.domain.sensor_descriptor import SensorDescriptor
from humidor.domain.stability import StabilityMetrics, StabilityScore, WindowSummary
from humidor.domain.thresholds import ThresholdConfig
from humidor.domain.time_range import TimeRange

__all__ = [
    "AlertEvent",
    "AuthToken",
    "AutomationResult",
    "AutomationRule",
    "MonitoredUnit",
    "Reading",
    "SensorDescriptor",
    "StabilityMetrics",
    "StabilityScore",
    "ThresholdConfig",
    "TimeRange",
    "WindowSummary",
    "to_celsius",
    "to_fahrenheit",
]
