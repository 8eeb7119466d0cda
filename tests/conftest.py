"""
Shared test fixtures for the humidor monitor test suite.

Provides:
- A MonitorConfig with fast timeouts and no request spacing surprises
- In-memory secret store, fake monotonic clock and a scripted HTTP session
- A fake home-automation hub whose completions arrive on worker threads
- Reading factories

Usage:
    def test_example(auth_session, http):
        http.queue(200, {"authorization": "code"})
        ...
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any

import pytest

# Ensure repository root is on sys.path so tests can import application modules
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from humidor.config import MonitorConfig
from humidor.domain import Reading
from humidor.enums import HubCharacteristicType
from humidor.services.cloud.auth_session import CloudAuthSession
from infrastructure.secrets import InMemorySecretStore

# ---------------------------------------------------------------------------
# Logging: keep test output quiet
# ---------------------------------------------------------------------------
logging.getLogger("humidor").setLevel(logging.WARNING)
logging.getLogger("infrastructure").setLevel(logging.WARNING)

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


# ========================== Config & clocks ================================


@pytest.fixture()
def config():
    """Configuration with short hub timeouts so timeout tests stay fast."""
    return MonitorConfig(
        cloud_base_url="https://cloud.test/api/v1/",
        http_timeout_seconds=5.0,
        min_request_interval_seconds=1.0,
        hub_call_timeout_seconds=1.0,
    )


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instead of blocking."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


# ========================== HTTP ===========================================

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = _NO_JSON, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self._payload is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeHttpSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self) -> None:
        self.responses: list[Any] = []
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def queue(self, status_code: int, payload: Any = _NO_JSON, text: str = "") -> None:
        self.responses.append(FakeResponse(status_code, payload, text))

    def queue_error(self, error: Exception) -> None:
        self.responses.append(error)

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": dict(headers or {}), "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"Unexpected request to {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def http():
    return FakeHttpSession()


@pytest.fixture()
def secret_store():
    return InMemorySecretStore()


@pytest.fixture()
def auth_session(config, secret_store, http, clock):
    """CloudAuthSession wired to the fake HTTP session and fake clock."""
    return CloudAuthSession(config, secret_store, http_session=http, clock=clock, sleep=clock.sleep)


@pytest.fixture()
def signed_in_session(auth_session, http):
    http.queue(200, {"authorization": "auth-code"})
    http.queue(200, {"accesstoken": "token-123"})
    auth_session.authenticate("user@example.com", "secret")
    http.calls.clear()
    return auth_session


# ========================== Fake hub =======================================


class FakeHub:
    """Completion dispatcher shared by every fake hub object.

    ``fail(op, error, on_call=n)`` makes the n-th call of ``op`` complete with
    ``error``; ``silence(op)`` makes ``op`` never complete.
    """

    def __init__(self, threaded: bool = True) -> None:
        self.threaded = threaded
        self.counts: dict[str, int] = {}
        self.failures: dict[tuple[str, int], Exception] = {}
        self.silent: set[str] = set()
        self.duplicate_completions = False
        self._threads: list[threading.Thread] = []

    def fail(self, op: str, error: Exception, on_call: int = 1) -> None:
        self.failures[(op, on_call)] = error

    def silence(self, op: str) -> None:
        self.silent.add(op)

    def run(self, op: str, completion, action) -> None:
        """Count the call, then either fail it, drop it, or apply ``action`` and complete."""
        self.counts[op] = self.counts.get(op, 0) + 1
        if op in self.silent:
            return
        error = self.failures.get((op, self.counts[op]))
        result = None if error is not None else action()
        self._deliver(completion, result, error)
        if self.duplicate_completions:
            self._deliver(completion, "duplicate", None)

    def _deliver(self, completion, result, error) -> None:
        if not self.threaded:
            completion(result, error)
            return
        thread = threading.Thread(target=completion, args=(result, error), daemon=True)
        self._threads.append(thread)
        thread.start()


class FakeCharacteristic:
    def __init__(self, hub: FakeHub, characteristic_type: str, value: Any) -> None:
        self.hub = hub
        self.characteristic_type = characteristic_type
        self.value = value
        self.writes: list[Any] = []

    def read_value(self, completion) -> None:
        self.hub.run("read_value", completion, lambda: self.value)

    def write_value(self, value, completion) -> None:
        self.hub.run("write_value", completion, lambda: self.writes.append(value))


class FakeService:
    def __init__(self, service_id: str, characteristics: list[FakeCharacteristic]) -> None:
        self.service_id = service_id
        self.characteristics = characteristics


class FakeAccessory:
    def __init__(self, unique_id: str, name: str, services: list[FakeService]) -> None:
        self.unique_id = unique_id
        self.name = name
        self.services = services


class FakeActionSet:
    def __init__(self, hub: FakeHub, name: str, metadata: dict[str, str]) -> None:
        self.hub = hub
        self.name = name
        self.metadata = dict(metadata)
        self.actions: list[tuple[Any, Any]] = []

    def add_write_action(self, characteristic, value, completion) -> None:
        self.hub.run("add_write_action", completion, lambda: self.actions.append((characteristic, value)))


class FakeTrigger:
    def __init__(self, hub, name, characteristic, comparison, threshold, metadata) -> None:
        self.hub = hub
        self.name = name
        self.characteristic = characteristic
        self.comparison = comparison
        self.threshold = threshold
        self.metadata = dict(metadata)
        self.enabled = False
        self.action_sets: list[FakeActionSet] = []

    def add_action_set(self, action_set, completion) -> None:
        self.hub.run("wire_action_set", completion, lambda: self.action_sets.append(action_set))

    def enable(self, enabled, completion) -> None:
        def apply():
            self.enabled = enabled

        self.hub.run("enable", completion, apply)


class FakeHome:
    def __init__(self, hub: FakeHub, name: str = "Home", accessories=None) -> None:
        self.hub = hub
        self.name = name
        self.accessories = list(accessories or [])
        self.triggers: list[FakeTrigger] = []
        self.action_sets: list[FakeActionSet] = []

    def add_action_set(self, name, metadata, completion) -> None:
        def apply():
            action_set = FakeActionSet(self.hub, name, metadata)
            self.action_sets.append(action_set)
            return action_set

        self.hub.run("add_action_set", completion, apply)

    def remove_action_set(self, action_set, completion) -> None:
        self.hub.run("remove_action_set", completion, lambda: self.action_sets.remove(action_set))

    def add_event_trigger(self, name, characteristic, comparison, threshold, metadata, completion) -> None:
        def apply():
            trigger = FakeTrigger(self.hub, name, characteristic, comparison, threshold, metadata)
            self.triggers.append(trigger)
            return trigger

        self.hub.run("add_event_trigger", completion, apply)

    def remove_trigger(self, trigger, completion) -> None:
        self.hub.run("remove_trigger", completion, lambda: self.triggers.remove(trigger))


class FakeHomeManager:
    def __init__(self, homes: list[FakeHome], is_authorized: bool = True) -> None:
        self.homes = homes
        self.is_authorized = is_authorized

    @property
    def primary_home(self):
        return self.homes[0] if self.homes else None


def make_climate_accessory(hub: FakeHub, unique_id: str, name: str, celsius: float, humidity: float) -> FakeAccessory:
    return FakeAccessory(
        unique_id,
        name,
        [
            FakeService(
                f"{unique_id}-temp",
                [FakeCharacteristic(hub, HubCharacteristicType.CURRENT_TEMPERATURE.value, celsius)],
            ),
            FakeService(
                f"{unique_id}-hum",
                [FakeCharacteristic(hub, HubCharacteristicType.CURRENT_RELATIVE_HUMIDITY.value, humidity)],
            ),
        ],
    )


@pytest.fixture()
def hub_kit():
    """Fake hub classes for tests that assemble their own home layout."""
    return SimpleNamespace(
        Hub=FakeHub,
        Home=FakeHome,
        HomeManager=FakeHomeManager,
        Accessory=FakeAccessory,
        Service=FakeService,
        Characteristic=FakeCharacteristic,
        climate_accessory=make_climate_accessory,
    )


@pytest.fixture()
def fake_hub():
    return FakeHub(threaded=True)


@pytest.fixture()
def hub_home(fake_hub):
    """Home with one climate accessory at 20°C / 68% and one light bulb."""
    climate = make_climate_accessory(fake_hub, "acc-1", "Humidor Sensor", 20.0, 68.0)
    bulb = FakeAccessory("acc-bulb", "Desk Lamp", [FakeService("bulb-svc", [])])
    return FakeHome(fake_hub, accessories=[climate, bulb])


@pytest.fixture()
def hub_manager(hub_home):
    return FakeHomeManager([hub_home])


# ========================== Readings =======================================


@pytest.fixture()
def make_reading():
    """Factory: ``make_reading(temp_f, humidity, minutes=0, sensor_id="s1")``."""

    def _make(temperature_f: float, humidity: float, minutes: float = 0, sensor_id: str = "s1") -> Reading:
        return Reading(
            sensor_id=sensor_id,
            timestamp=BASE_TIME + timedelta(minutes=minutes),
            temperature_f=temperature_f,
            humidity_pct=humidity,
        )

    return _make
