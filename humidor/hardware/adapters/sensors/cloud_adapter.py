"""
Cloud Sensor Adapter
====================
Sensor listing and sample retrieval over the cloud sensor API.

All requests go through the shared ``CloudAuthSession``, so they are
authenticated and spaced by its rate limiter. Samples arrive in Fahrenheit.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from humidor.domain import Reading, SensorDescriptor, TimeRange
from humidor.enums import BackendKind
from humidor.errors import DecodingError, InvalidResponse
from humidor.hardware.adapters.sensors.base_adapter import IEnvironmentalSensor
from humidor.schemas.cloud import CloudSensorDetail, SamplesRequest, SamplesResponse
from humidor.services.cloud.auth_session import CloudAuthSession, decode_payload
from humidor.utils.cancellation import CancellationToken
from humidor.utils.time import to_api_timestamp, utc_now

logger = logging.getLogger(__name__)

SENSORS_PATH = "/devices/sensors"
SAMPLES_PATH = "/samples"


class CloudSensorBackend:
    """Cloud variant of the sensor backends."""

    def __init__(
        self,
        session: CloudAuthSession,
        lookback_minutes: int = 5,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session = session
        self.lookback = timedelta(minutes=lookback_minutes)
        self._clock = clock

    def list_sensors(self, cancel_token: CancellationToken | None = None) -> list[SensorDescriptor]:
        """
        List every sensor on the account.

        Raises:
            InvalidToken: not signed in, or the token was rejected
            InvalidResponse / DecodingError: malformed listing
        """
        body = self.session.post(SENSORS_PATH, {}, cancel_token=cancel_token)
        if not isinstance(body, dict):
            raise InvalidResponse("Sensor listing is not a JSON object")

        descriptors = []
        for sensor_id, raw in body.items():
            if not isinstance(raw, dict):
                raise DecodingError(f"sensor {sensor_id!r} detail is not an object")
            detail = decode_payload(CloudSensorDetail, {"id": sensor_id, **raw})
            descriptors.append(
                SensorDescriptor(
                    id=sensor_id,
                    display_name=detail.display_name,
                    backend_kind=BackendKind.CLOUD,
                    battery_voltage=detail.battery_voltage,
                    signal_strength=detail.rssi,
                    is_active=detail.active,
                )
            )
        logger.info("Cloud listing returned %d sensor(s)", len(descriptors))
        return descriptors

    def fetch_samples(
        self,
        sensor_id: str,
        start: datetime,
        limit: int,
        cancel_token: CancellationToken | None = None,
    ) -> list[Reading]:
        """Fetch up to ``limit`` samples since ``start``, sorted ascending."""
        request = SamplesRequest(limit=limit, sensors=[sensor_id], start_time=to_api_timestamp(start))
        body = self.session.post(
            SAMPLES_PATH,
            request.model_dump(by_alias=True, exclude_none=True),
            cancel_token=cancel_token,
        )
        response = decode_payload(SamplesResponse, body)

        readings = [
            Reading(
                sensor_id=sensor_id,
                timestamp=sample.observed,
                temperature_f=sample.temperature,
                humidity_pct=sample.humidity,
            )
            for sample in response.sensors.get(sensor_id, [])
        ]
        readings.sort(key=lambda r: r.timestamp)
        logger.debug("Fetched %d sample(s) for %s since %s", len(readings), sensor_id, start.isoformat())
        return readings

    def fetch_current_reading(self, sensor_id: str, cancel_token: CancellationToken | None = None) -> Reading:
        """Most recent sample within the lookback window."""
        start = self._clock() - self.lookback
        readings = self.fetch_samples(sensor_id, start, 1, cancel_token=cancel_token)
        if not readings:
            raise InvalidResponse(f"No recent samples for sensor {sensor_id}")
        return readings[-1]

    def fetch_history(
        self,
        sensor_id: str,
        time_range: TimeRange,
        cancel_token: CancellationToken | None = None,
    ) -> list[Reading]:
        return self.fetch_samples(
            sensor_id,
            time_range.start(self._clock()),
            time_range.limit,
            cancel_token=cancel_token,
        )


class CloudSensor(IEnvironmentalSensor):
    """A sensor read through the cloud API."""

    def __init__(self, descriptor: SensorDescriptor, backend: CloudSensorBackend):
        super().__init__(descriptor)
        self.backend = backend

    def fetch_current_reading(self, cancel_token: CancellationToken | None = None) -> Reading:
        reading = self.backend.fetch_current_reading(self.id, cancel_token=cancel_token)
        self._record(reading)
        return reading

    def fetch_historical_data(
        self,
        time_range: TimeRange,
        cancel_token: CancellationToken | None = None,
    ) -> list[Reading]:
        readings = self.backend.fetch_history(self.id, time_range, cancel_token=cancel_token)
        if readings:
            self._record(readings[-1])
        return readings
