"""
Sensor Adapters
===============
Backend variants behind the environmental sensor capability interface.

Adapter Types:
    - HubSensor / HubSensorBackend: accessories paired with the local home-automation hub
    - CloudSensor / CloudSensorBackend: sensors reported by the cloud sensor API
"""
from .base_adapter import IEnvironmentalSensor
from .cloud_adapter import CloudSensor, CloudSensorBackend
from .hub_adapter import HubSensor, HubSensorBackend

__all__ = [
    'IEnvironmentalSensor',
    'CloudSensor',
    'CloudSensorBackend',
    'HubSensor',
    'HubSensorBackend',
]
