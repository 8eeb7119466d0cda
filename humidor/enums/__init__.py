"""
Enumerations Package
====================

Re-exports the enums used across the monitoring core.
"""

from humidor.enums.sensors import (
    AlertKind,
    BackendKind,
    Comparison,
    EnvironmentStatus,
    HubCharacteristicType,
    Metric,
)

__all__ = [
    "AlertKind",
    "BackendKind",
    "Comparison",
    "EnvironmentStatus",
    "HubCharacteristicType",
    "Metric",
]
