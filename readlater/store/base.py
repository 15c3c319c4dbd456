from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Callable

Updater = Callable[[bytes | None], bytes]


class KeyValueStore(ABC):
    """A byte store addressed by string keys, shared between writers.

    ``update`` is the only way to do read-modify-write: implementations
    guarantee that no other ``update`` on the same key interleaves with it.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the stored value, or ``None`` if *key* is absent."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Overwrite *key* unconditionally."""

    @abstractmethod
    def update(self, key: str, fn: Updater) -> bytes:
        """Atomically replace the value of *key* with ``fn(current)``.

        Returns the value that was written.
        """


class MemoryStore(KeyValueStore):
    """In-process store; ``update`` is serialized by a lock per key."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock_for(key):
            self._data[key] = value

    def update(self, key: str, fn: Updater) -> bytes:
        with self._lock_for(key):
            value = fn(self.get(key))
            self._data[key] = value
            return value
