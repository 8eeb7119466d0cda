"""Cooperative cancellation for blocking monitor calls.

A ``CancellationToken`` is handed to every call that may block (cloud
requests, rate-limit sleeps, hub characteristic reads, automation setup).
Cancelling it wakes any sleeper and makes the next checkpoint raise
``OperationCancelled``.
"""

from __future__ import annotations

import threading

from humidor.errors import OperationCancelled


class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, operation: str = "operation") -> None:
        if self._event.is_set():
            raise OperationCancelled(operation, self.reason)

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout)


def checkpoint(token: CancellationToken | None, operation: str) -> None:
    """Raise ``OperationCancelled`` when ``token`` has been cancelled."""
    if token is not None:
        token.raise_if_cancelled(operation)
