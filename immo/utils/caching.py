"""Caching utilities used across services."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Callable, Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """Small thread-safe least-recently-used mapping.

    A ``key_func`` may be supplied so callers can look entries up by a
    normalized form of the key (e.g. case-folded addresses).
    """

    def __init__(self, maxsize: int = 1024, key_func: Optional[Callable[[K], Hashable]] = None) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._key_func = key_func or (lambda key: key)
        self._lock = threading.Lock()
        self._data: "OrderedDict[Hashable, V]" = OrderedDict()

    def get(self, key: K) -> Optional[V]:
        k = self._key_func(key)
        with self._lock:
            if k not in self._data:
                return None
            self._data.move_to_end(k)
            return self._data[k]

    def set(self, key: K, value: V) -> None:
        k = self._key_func(key)
        with self._lock:
            self._data[k] = value
            self._data.move_to_end(k)
            while len(self._data) > self.maxsize:
                self._data.popitem(last=False)

    def __contains__(self, key: K) -> bool:
        with self._lock:
            return self._key_func(key) in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


__all__ = ["LRUCache"]
