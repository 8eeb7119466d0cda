"""Home-automation hub structural types and the callback bridge."""

from humidor.hardware.hub.bridge import call_hub
from humidor.hardware.hub.protocol import (
    Completion,
    HubAccessory,
    HubActionSet,
    HubCharacteristic,
    HubHome,
    HubHomeManager,
    HubService,
    HubTrigger,
)

__all__ = [
    "Completion",
    "HubAccessory",
    "HubActionSet",
    "HubCharacteristic",
    "HubHome",
    "HubHomeManager",
    "HubService",
    "HubTrigger",
    "call_hub",
]
