"""Secret persistence for the cloud access token and the local user identifier.

The monitoring core only needs ``save`` / ``read`` / ``delete`` over string
keys. ``InMemorySecretStore`` backs tests and ephemeral sessions;
``JsonFileSecretStore`` persists to a JSON file guarded by an advisory lock
file and written atomically, for hosts without an OS credential vault.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "cloud.access_token"
TOKEN_OBTAINED_AT_KEY = "cloud.token_obtained_at"
USER_IDENTIFIER_KEY = "user.identifier"


@runtime_checkable
class SecretStore(Protocol):
    """Secure key-value store consumed by the auth session."""

    def save(self, key: str, value: str) -> None:
        ...

    def read(self, key: str) -> str | None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemorySecretStore:
    """Process-local store; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def save(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def read(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class FileLock:
    """Advisory lock using atomic creation of a ``.lock`` file.

    Suitable for single-writer or low-contention use; retries until timeout.
    """

    def __init__(self, lock_path: str, timeout: float = 5.0, retry: float = 0.05) -> None:
        self.lock_path = lock_path
        self.timeout = float(timeout)
        self.retry = float(retry)
        self._acquired = False

    def acquire(self) -> bool:
        start = time.monotonic()
        while True:
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                os.close(fd)
                self._acquired = True
                return True
            except FileExistsError:
                if (time.monotonic() - start) >= self.timeout:
                    return False
                time.sleep(self.retry)

    def release(self) -> None:
        try:
            if self._acquired and os.path.exists(self.lock_path):
                os.unlink(self.lock_path)
        finally:
            self._acquired = False

    def __enter__(self):
        if not self.acquire():
            raise TimeoutError(f"Failed to acquire file lock: {self.lock_path}")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


class JsonFileSecretStore:
    """Secret store persisted as a single JSON object on disk (mode 0600)."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock_path = str(self.path) + ".lock"
        self._thread_lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Secret store %s unreadable, treating as empty: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Secret store %s does not hold an object, treating as empty", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = str(self.path) + ".tmp"
        fd = os.open(tmp, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self.path)

    def save(self, key: str, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._thread_lock, FileLock(self._lock_path):
            data = self._load()
            data[key] = value
            self._write(data)

    def read(self, key: str) -> str | None:
        with self._thread_lock:
            return self._load().get(key)

    def delete(self, key: str) -> None:
        if not self.path.exists():
            return
        with self._thread_lock, FileLock(self._lock_path):
            data = self._load()
            if data.pop(key, None) is not None:
                self._write(data)
