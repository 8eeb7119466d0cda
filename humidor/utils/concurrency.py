"""
Concurrency utilities.

Provides a `synchronized` decorator that acquires an instance `_lock` if present.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable


def synchronized(func: Callable) -> Callable:
    """Decorator that acquires `self._lock` if present on the instance.

    If no `_lock` attribute exists on `self`, the function is executed
    without locking. Use a reentrant lock when synchronized methods call
    each other.
    """

    @wraps(func)
    def _wrapped(*args, **kwargs):
        self = args[0] if args else None
        lock = getattr(self, "_lock", None)
        if lock is None:
            return func(*args, **kwargs)
        with lock:
            return func(*args, **kwargs)

    return _wrapped
