import pytest

from humidor.domain import TimeRange
from humidor.enums import BackendKind, Metric
from humidor.errors import (
    AuthorizationDenied,
    CharacteristicNotFound,
    DecodingError,
    HomeNotFound,
    HubTimeout,
    SensorNotFound,
)
from humidor.hardware.adapters.sensors import HubSensor, HubSensorBackend


@pytest.fixture
def backend(hub_manager):
    return HubSensorBackend(hub_manager, call_timeout=1.0)


def test_unauthorized_hub(hub_kit, hub_home):
    backend = HubSensorBackend(hub_kit.HomeManager([hub_home], is_authorized=False))
    with pytest.raises(AuthorizationDenied):
        backend.primary_home()


def test_no_home_configured(hub_kit):
    backend = HubSensorBackend(hub_kit.HomeManager([]))
    with pytest.raises(HomeNotFound):
        backend.temperature_accessories()


def test_capability_listings_are_distinct(hub_kit):
    hub = hub_kit.Hub()
    climate = hub_kit.climate_accessory(hub, "acc-1", "Humidor Sensor", 20.0, 68.0)
    hygrometer = hub_kit.Accessory(
        "acc-2",
        "Hygrometer",
        [hub_kit.Service("hyg", [hub_kit.Characteristic(hub, "current_relative_humidity", 70.0)])],
    )
    home = hub_kit.Home(hub, accessories=[climate, hygrometer])
    backend = HubSensorBackend(hub_kit.HomeManager([home]))

    assert [a.unique_id for a in backend.temperature_accessories()] == ["acc-1"]
    assert [a.unique_id for a in backend.humidity_accessories()] == ["acc-1", "acc-2"]

    descriptors = backend.list_sensors()
    assert [d.id for d in descriptors] == ["acc-1", "acc-2"]
    assert all(d.backend_kind is BackendKind.HUB for d in descriptors)


def test_find_by_service_id(backend):
    assert backend.find_by_service_id("acc-1-hum").unique_id == "acc-1"
    assert backend.find_by_service_id("missing") is None


def test_unknown_accessory(backend):
    with pytest.raises(SensorNotFound):
        backend.accessory("nope")


def test_read_converts_celsius_to_fahrenheit(backend):
    accessory = backend.accessory("acc-1")
    assert backend.read_metric(accessory, Metric.TEMPERATURE) == pytest.approx(68.0)
    assert backend.read_metric(accessory, Metric.HUMIDITY) == pytest.approx(68.0)


def test_missing_characteristic(backend):
    lamp = backend.accessory("acc-bulb")
    with pytest.raises(CharacteristicNotFound):
        backend.read_metric(lamp, Metric.TEMPERATURE)


def test_non_numeric_value(hub_kit):
    hub = hub_kit.Hub()
    accessory = hub_kit.climate_accessory(hub, "acc-1", "Broken", None, 65.0)
    backend = HubSensorBackend(hub_kit.HomeManager([hub_kit.Home(hub, accessories=[accessory])]))
    with pytest.raises(DecodingError):
        backend.read_metric(accessory, Metric.TEMPERATURE)


def test_silent_hub_times_out(hub_kit):
    hub = hub_kit.Hub()
    hub.silence("read_value")
    accessory = hub_kit.climate_accessory(hub, "acc-1", "Sleepy", 20.0, 65.0)
    backend = HubSensorBackend(hub_kit.HomeManager([hub_kit.Home(hub, accessories=[accessory])]), call_timeout=0.1)
    with pytest.raises(HubTimeout):
        backend.read_current(accessory)


class TestHubSensor:
    def _sensor(self, backend):
        descriptor = next(d for d in backend.list_sensors() if d.id == "acc-1")
        return HubSensor(descriptor, backend)

    def test_current_reading(self, backend):
        sensor = self._sensor(backend)
        reading = sensor.fetch_current_reading()
        assert reading.sensor_id == "acc-1"
        assert reading.temperature_f == pytest.approx(68.0)
        assert reading.humidity_pct == pytest.approx(68.0)
        assert sensor.current_temperature == pytest.approx(68.0)
        assert sensor.last_updated == reading.timestamp

    def test_history_is_current_reading_only(self, backend):
        history = self._sensor(backend).fetch_historical_data(TimeRange.MONTH)
        assert len(history) == 1
