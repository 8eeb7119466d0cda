"""
Home-Automation Hub API
=======================
Structural types for the parts of the home-automation hub the monitor consumes.

The hub's native API is callback based: every mutating or reading call takes a
``completion(result, error)`` callable that the hub may invoke on any thread.
``humidor.hardware.hub.bridge.call_hub`` turns those into blocking calls with
a timeout.

Characteristic types are compared against ``HubCharacteristicType`` values.
Temperatures on the hub are Celsius.
"""

from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, runtime_checkable

Completion = Callable[[Any, Optional[BaseException]], None]


@runtime_checkable
class HubCharacteristic(Protocol):
    characteristic_type: str

    def read_value(self, completion: Completion) -> None:
        ...

    def write_value(self, value: Any, completion: Completion) -> None:
        ...


@runtime_checkable
class HubService(Protocol):
    service_id: str
    characteristics: Sequence[HubCharacteristic]


@runtime_checkable
class HubAccessory(Protocol):
    unique_id: str
    name: str
    services: Sequence[HubService]


@runtime_checkable
class HubActionSet(Protocol):
    name: str
    metadata: Mapping[str, str]

    def add_write_action(self, characteristic: HubCharacteristic, value: Any, completion: Completion) -> None:
        ...


@runtime_checkable
class HubTrigger(Protocol):
    name: str
    metadata: Mapping[str, str]
    enabled: bool

    def add_action_set(self, action_set: HubActionSet, completion: Completion) -> None:
        ...

    def enable(self, enabled: bool, completion: Completion) -> None:
        ...


@runtime_checkable
class HubHome(Protocol):
    name: str
    accessories: Sequence[HubAccessory]
    triggers: Sequence[HubTrigger]
    action_sets: Sequence[HubActionSet]

    def add_action_set(self, name: str, metadata: Mapping[str, str], completion: Completion) -> None:
        """Completion receives the created ``HubActionSet``."""

    def remove_action_set(self, action_set: HubActionSet, completion: Completion) -> None:
        ...

    def add_event_trigger(
        self,
        name: str,
        characteristic: HubCharacteristic,
        comparison: str,
        threshold: float,
        metadata: Mapping[str, str],
        completion: Completion,
    ) -> None:
        """Completion receives the created ``HubTrigger``.

        ``comparison`` is ``">"`` or ``"<"``; the trigger fires when the
        characteristic's value crosses ``threshold`` in that direction.
        """

    def remove_trigger(self, trigger: HubTrigger, completion: Completion) -> None:
        ...


@runtime_checkable
class HubHomeManager(Protocol):
    is_authorized: bool
    homes: Sequence[HubHome]
    primary_home: Optional[HubHome]
