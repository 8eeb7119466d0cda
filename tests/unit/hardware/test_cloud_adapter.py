from datetime import datetime, timezone

import pytest

from humidor.domain import SensorDescriptor, TimeRange
from humidor.enums import BackendKind
from humidor.errors import DecodingError, InvalidResponse, InvalidToken
from humidor.hardware.adapters.sensors import CloudSensor, CloudSensorBackend

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def backend(signed_in_session):
    return CloudSensorBackend(signed_in_session, lookback_minutes=5, clock=lambda: NOW)


def test_list_sensors_maps_details(backend, http):
    http.queue(
        200,
        {
            "1001.abc": {"id": "1001.abc", "deviceId": "1001", "name": "Cabinet", "active": True,
                         "battery_voltage": 2.9, "rssi": -71},
            "1002.def": {"deviceId": "1002", "active": False},
        },
    )

    sensors = backend.list_sensors()

    assert http.calls[0]["url"].endswith("/devices/sensors")
    assert [s.id for s in sensors] == ["1001.abc", "1002.def"]
    cabinet, travel = sensors
    assert cabinet.display_name == "Cabinet"
    assert cabinet.backend_kind is BackendKind.CLOUD
    assert cabinet.battery_voltage == 2.9
    assert cabinet.signal_strength == -71
    assert travel.display_name == "1002"
    assert travel.is_active is False


def test_list_sensors_rejects_non_object_detail(backend, http):
    http.queue(200, {"1001.abc": "Cabinet"})
    with pytest.raises(DecodingError):
        backend.list_sensors()


def test_fetch_samples_request_and_ordering(backend, http):
    http.queue(
        200,
        {
            "sensors": {
                "1001.abc": [
                    {"observed": "2026-01-01T11:50:00.000Z", "temperature": 69.5, "humidity": 66.0},
                    {"observed": "2026-01-01T11:40:00.000Z", "temperature": 69.0, "humidity": 65.5},
                ],
                "other": [{"observed": "2026-01-01T11:45:00.000Z", "temperature": 1.0, "humidity": 1.0}],
            },
            "truncated": False,
        },
    )

    readings = backend.fetch_samples("1001.abc", datetime(2026, 1, 1, 11, 0, tzinfo=timezone.utc), 10)

    assert http.calls[0]["json"] == {
        "limit": 10,
        "sensors": ["1001.abc"],
        "startTime": "2026-01-01T11:00:00.000Z",
    }
    assert [r.temperature_f for r in readings] == [69.0, 69.5]
    assert all(r.sensor_id == "1001.abc" for r in readings)
    assert readings[0].timestamp < readings[1].timestamp


def test_fetch_samples_missing_series_is_empty(backend, http):
    http.queue(200, {"sensors": None})
    assert backend.fetch_samples("1001.abc", NOW, 5) == []


def test_malformed_sample_is_decoding_error(backend, http):
    http.queue(200, {"sensors": {"1001.abc": [{"observed": "2026-01-01T11:50:00Z", "temperature": "warm"}]}})
    with pytest.raises(DecodingError):
        backend.fetch_samples("1001.abc", NOW, 5)


def test_current_reading_uses_five_minute_lookback(backend, http):
    http.queue(
        200,
        {"sensors": {"1001.abc": [{"observed": "2026-01-01T11:58:00Z", "temperature": 70.0, "humidity": 67.0}]}},
    )
    reading = backend.fetch_current_reading("1001.abc")
    assert reading.temperature_f == 70.0
    assert http.calls[0]["json"]["limit"] == 1
    assert http.calls[0]["json"]["startTime"] == "2026-01-01T11:55:00.000Z"


def test_current_reading_without_samples(backend, http):
    http.queue(200, {"sensors": {"1001.abc": []}})
    with pytest.raises(InvalidResponse, match="No recent samples"):
        backend.fetch_current_reading("1001.abc")


def test_requires_sign_in(auth_session):
    backend = CloudSensorBackend(auth_session)
    with pytest.raises(InvalidToken):
        backend.list_sensors()


class TestCloudSensor:
    def _sensor(self, backend):
        descriptor = SensorDescriptor(id="1001.abc", display_name="Cabinet", backend_kind=BackendKind.CLOUD)
        return CloudSensor(descriptor, backend)

    def test_current_values_follow_fetch(self, backend, http):
        sensor = self._sensor(backend)
        assert sensor.current_temperature is None
        assert sensor.last_updated is None

        http.queue(
            200,
            {"sensors": {"1001.abc": [{"observed": "2026-01-01T11:58:00Z", "temperature": 70.0, "humidity": 67.0}]}},
        )
        sensor.fetch_current_reading()

        assert sensor.current_temperature == 70.0
        assert sensor.current_humidity == 67.0
        assert sensor.last_updated == datetime(2026, 1, 1, 11, 58, tzinfo=timezone.utc)
        assert sensor.backend_kind is BackendKind.CLOUD

    def test_historical_data_uses_range_limit(self, backend, http):
        sensor = self._sensor(backend)
        http.queue(200, {"sensors": {"1001.abc": []}})
        assert sensor.fetch_historical_data(TimeRange.WEEK) == []
        body = http.calls[0]["json"]
        assert body["limit"] == 168
        assert body["startTime"] == "2025-12-25T12:00:00.000Z"
