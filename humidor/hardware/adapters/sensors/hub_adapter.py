"""
Hub Sensor Adapter
==================
Reads temperature and humidity from accessories paired with the local
home-automation hub.

The hub reports temperature in Celsius; readings leave this module in
Fahrenheit. The hub keeps no history, so ``fetch_historical_data`` returns the
current reading only.
"""

import logging
from datetime import datetime
from typing import Any, Callable

from humidor.domain import Reading, SensorDescriptor, TimeRange, to_fahrenheit
from humidor.enums import BackendKind, HubCharacteristicType, Metric
from humidor.errors import (
    AuthorizationDenied,
    CharacteristicNotFound,
    DecodingError,
    HomeNotFound,
    SensorNotFound,
)
from humidor.hardware.adapters.sensors.base_adapter import IEnvironmentalSensor
from humidor.hardware.hub.bridge import call_hub
from humidor.hardware.hub.protocol import HubAccessory, HubCharacteristic, HubHome, HubHomeManager
from humidor.utils.cancellation import CancellationToken, checkpoint
from humidor.utils.time import utc_now

logger = logging.getLogger(__name__)


class HubSensorBackend:
    """Hub variant of the sensor backends."""

    def __init__(
        self,
        manager: HubHomeManager,
        call_timeout: float = 10.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.manager = manager
        self.call_timeout = call_timeout
        self._clock = clock

    # ==================== Home / accessory lookup ====================

    def primary_home(self) -> HubHome:
        """
        Resolve the home the monitor works in.

        Raises:
            AuthorizationDenied: the hub has not granted access
            HomeNotFound: no home is configured
        """
        if not self.manager.is_authorized:
            raise AuthorizationDenied()
        home = self.manager.primary_home
        if home is None:
            homes = list(self.manager.homes)
            if not homes:
                raise HomeNotFound()
            home = homes[0]
        return home

    @staticmethod
    def find_characteristic(accessory: HubAccessory, metric: Metric) -> HubCharacteristic | None:
        wanted = HubCharacteristicType.for_metric(metric).value
        for service in accessory.services:
            for characteristic in service.characteristics:
                if characteristic.characteristic_type == wanted:
                    return characteristic
        return None

    def characteristic(self, accessory: HubAccessory, metric: Metric) -> HubCharacteristic:
        found = self.find_characteristic(accessory, metric)
        if found is None:
            raise CharacteristicNotFound(accessory.name, HubCharacteristicType.for_metric(metric).value)
        return found

    def accessories_for(self, metric: Metric) -> list[HubAccessory]:
        home = self.primary_home()
        return [a for a in home.accessories if self.find_characteristic(a, metric) is not None]

    def temperature_accessories(self) -> list[HubAccessory]:
        return self.accessories_for(Metric.TEMPERATURE)

    def humidity_accessories(self) -> list[HubAccessory]:
        return self.accessories_for(Metric.HUMIDITY)

    def find_by_service_id(self, service_id: str) -> HubAccessory | None:
        """Accessory owning the service with this opaque identifier."""
        for accessory in self.primary_home().accessories:
            if any(service.service_id == service_id for service in accessory.services):
                return accessory
        return None

    def accessory(self, accessory_id: str) -> HubAccessory:
        for accessory in self.primary_home().accessories:
            if accessory.unique_id == accessory_id:
                return accessory
        raise SensorNotFound(accessory_id)

    def list_sensors(self) -> list[SensorDescriptor]:
        """Accessories exposing temperature or humidity, each listed once."""
        seen: dict[str, SensorDescriptor] = {}
        for accessory in self.temperature_accessories() + self.humidity_accessories():
            if accessory.unique_id not in seen:
                seen[accessory.unique_id] = SensorDescriptor(
                    id=accessory.unique_id,
                    display_name=accessory.name,
                    backend_kind=BackendKind.HUB,
                )
        return list(seen.values())

    # ==================== Reads ====================

    def read_metric(
        self,
        accessory: HubAccessory,
        metric: Metric,
        cancel_token: CancellationToken | None = None,
    ) -> float:
        """Read one metric; temperature is returned in °F."""
        characteristic = self.characteristic(accessory, metric)
        raw = call_hub(
            characteristic.read_value,
            operation=f"read {metric} of {accessory.name}",
            timeout=self.call_timeout,
            cancel_token=cancel_token,
        )
        value = _as_number(raw, accessory.name, metric)
        if metric is Metric.TEMPERATURE:
            return to_fahrenheit(value)
        return value

    def read_current(self, accessory: HubAccessory, cancel_token: CancellationToken | None = None) -> Reading:
        temperature_f = self.read_metric(accessory, Metric.TEMPERATURE, cancel_token)
        checkpoint(cancel_token, "hub reading")
        humidity = self.read_metric(accessory, Metric.HUMIDITY, cancel_token)
        return Reading(
            sensor_id=accessory.unique_id,
            timestamp=self._clock(),
            temperature_f=temperature_f,
            humidity_pct=humidity,
        )


def _as_number(raw: Any, accessory_name: str, metric: Metric) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise DecodingError(f"{metric} value of '{accessory_name}' is {type(raw).__name__}")
    try:
        return float(raw)
    except ValueError:
        raise DecodingError(f"{metric} value of '{accessory_name}' is not numeric: {raw!r}") from None


class HubSensor(IEnvironmentalSensor):
    """A sensor accessory read through the hub."""

    def __init__(self, descriptor: SensorDescriptor, backend: HubSensorBackend):
        super().__init__(descriptor)
        self.backend = backend

    def fetch_current_reading(self, cancel_token: CancellationToken | None = None) -> Reading:
        accessory = self.backend.accessory(self.id)
        reading = self.backend.read_current(accessory, cancel_token)
        self._record(reading)
        logger.debug("Hub reading for %s: %.1f°F %.1f%%", self.id, reading.temperature_f, reading.humidity_pct)
        return reading

    def fetch_historical_data(
        self,
        time_range: TimeRange,
        cancel_token: CancellationToken | None = None,
    ) -> list[Reading]:
        return [self.fetch_current_reading(cancel_token)]
