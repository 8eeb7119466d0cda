"""Blocking bridge over the hub's completion callbacks.

Each call gets its own single-shot future. The first completion settles it;
duplicate completions, and completions arriving after a timeout or a
cancellation, are logged and dropped.
"""

import logging
import threading
import time
from concurrent.futures import Future, wait
from typing import Any, Callable, Optional

from humidor.errors import HubTimeout, OperationCancelled
from humidor.hardware.hub.protocol import Completion
from humidor.utils.cancellation import CancellationToken

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.05


def call_hub(
    start: Callable[[Completion], None],
    *,
    operation: str,
    timeout: float,
    cancel_token: Optional[CancellationToken] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> Any:
    """
    Run one callback-style hub call and wait for its completion.

    Args:
        start: Issues the hub call, passing it the completion to invoke
        operation: Name used in logs and errors
        timeout: Seconds to wait for the completion
        cancel_token: Aborts the wait when cancelled

    Returns:
        The ``result`` handed to the completion

    Raises:
        HubTimeout: no completion within ``timeout``
        OperationCancelled: ``cancel_token`` fired while waiting
        Exception: the ``error`` handed to the completion, unchanged
    """
    future: Future = Future()
    settle_lock = threading.Lock()

    def completion(result: Any = None, error: Optional[BaseException] = None) -> None:
        with settle_lock:
            if future.done():
                logger.debug("Ignoring extra completion for hub call '%s'", operation)
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

    def abandon() -> bool:
        """Cancel the future; False when a completion won the race."""
        with settle_lock:
            return future.cancel()

    if cancel_token is not None and cancel_token.is_cancelled:
        raise OperationCancelled(operation, cancel_token.reason)

    start(completion)

    deadline = time.monotonic() + timeout
    while True:
        remaining = deadline - time.monotonic()
        done, _ = wait([future], timeout=max(0.0, min(poll_interval, remaining)))
        if done:
            return future.result()
        if cancel_token is not None and cancel_token.is_cancelled:
            if not abandon():
                return future.result()
            raise OperationCancelled(operation, cancel_token.reason)
        if remaining <= 0:
            if not abandon():
                return future.result()
            logger.warning("Hub call '%s' timed out after %.1fs", operation, timeout)
            raise HubTimeout(operation, timeout)
