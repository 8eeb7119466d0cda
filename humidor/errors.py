"""
Monitor Errors
==============
Exception taxonomy shared by the cloud session, both sensor backends and the
automation builder. Callers catch ``MonitorError`` for "anything the monitor
raised" or one of the specific subclasses below.
"""

from __future__ import annotations

from typing import Any


class MonitorError(Exception):
    """Base class for every error raised by the monitoring core."""


# ==================== Cloud session ====================


class AuthenticationFailed(MonitorError):
    """The cloud API rejected a request; ``message`` is the provider's text."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidToken(AuthenticationFailed):
    """No access token is held, or the provider reported it as invalid/expired."""

    def __init__(self, message: str = "Not authorized. Please sign in.", status_code: int | None = None):
        super().__init__(message, status_code)


class InvalidResponse(MonitorError):
    """The response body could not be parsed (not JSON, empty, wrong top-level type)."""

    def __init__(self, message: str = "Invalid response from server"):
        super().__init__(message)


class DecodingError(MonitorError):
    """The response parsed but did not match the expected payload shape."""

    def __init__(self, detail: str):
        super().__init__(f"Unexpected payload: {detail}")
        self.detail = detail


class NetworkError(MonitorError):
    """Transport-level failure (DNS, connection reset, HTTP timeout)."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Network error: {cause}")
        self.cause = cause


class RateLimited(MonitorError):
    """Request spacing not yet satisfied. Resolved internally by sleeping."""

    def __init__(self, wait_seconds: float):
        super().__init__(f"Rate limited, retry in {wait_seconds:.3f}s")
        self.wait_seconds = wait_seconds


# ==================== Hub ====================


class AuthorizationDenied(MonitorError):
    """The hub has not granted this application access."""

    def __init__(self, message: str = "Home automation access not authorized"):
        super().__init__(message)


class HomeNotFound(MonitorError):
    """No home container is configured on the hub."""

    def __init__(self, message: str = "No home configured on the hub"):
        super().__init__(message)


class CharacteristicNotFound(MonitorError):
    """The accessory does not expose the requested characteristic."""

    def __init__(self, accessory: str, characteristic: str):
        super().__init__(f"Accessory '{accessory}' has no {characteristic} characteristic")
        self.accessory = accessory
        self.characteristic = characteristic


class HubTimeout(MonitorError):
    """A hub callback did not arrive within the configured timeout."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"Hub call '{operation}' timed out after {timeout:.1f}s")
        self.operation = operation
        self.timeout = timeout


class SetupFailed(MonitorError):
    """Automation setup failed at ``step``.

    ``leftovers`` names hub objects that were created by the failed run and
    could not be rolled back.
    """

    def __init__(self, reason: str, step: str | None = None, leftovers: list[str] | None = None):
        super().__init__(reason if step is None else f"{step}: {reason}")
        self.reason = reason
        self.step = step
        self.leftovers = list(leftovers or [])


# ==================== General ====================


class OperationCancelled(MonitorError):
    """A cancellation token was triggered while the call was in flight."""

    def __init__(self, operation: str = "operation", reason: str | None = None):
        message = f"{operation} cancelled"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.operation = operation
        self.reason = reason


class SensorNotFound(MonitorError):
    """No sensor with the given identity is registered or reported by a backend."""

    def __init__(self, sensor_id: Any):
        super().__init__(f"Sensor not found: {sensor_id}")
        self.sensor_id = sensor_id
