import logging
import threading
import time
from typing import Any, Callable

from ..helpers import deserialize_value, serialize_value
from ..models import DeserializationError, Entry, Lookup
from .interface import KeyValueStore

log = logging.getLogger("micro-kv")


class MemoryStore(KeyValueStore):
    """In-process table shared by request handlers and the reaper.

    Every read filters expired entries itself, so callers never observe an
    expired value even when the reaper has not run yet. One lock guards the
    whole table.
    """

    needs_reaper = True

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._table: dict[str, Entry] = {}

    def __len__(self) -> int:
        # Physical size, including entries the reaper has not evicted yet
        with self._lock:
            return len(self._table)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._table

    def get(self, key: str) -> Lookup:
        with self._lock:
            now = self._clock()
            entry = self._table.get(key)
            if entry is None:
                return Lookup.missing()
            if entry.is_expired(now):
                return Lookup.expired()
            value = deserialize_value(entry.serialized_value)
            return Lookup.hit(value, entry.remaining(now))

    def get_all(self) -> dict[str, tuple[Any, float | None]]:
        result = {}
        with self._lock:
            now = self._clock()
            for key, entry in self._table.items():
                if entry.is_expired(now):
                    continue
                try:
                    value = deserialize_value(entry.serialized_value)
                except DeserializationError as e:
                    log.error("Skipping key=%s in listing: %s", key, e)
                    continue
                result[key] = (value, entry.remaining(now))
        return result

    def get_ttl(self, key: str) -> Lookup:
        with self._lock:
            now = self._clock()
            entry = self._table.get(key)
            if entry is None or entry.is_expired(now):
                return Lookup.missing()
            return Lookup.hit(ttl=entry.remaining(now))

    def put(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        serialized = serialize_value(value)
        with self._lock:
            expiry = None if ttl_seconds is None else self._clock() + float(ttl_seconds)
            self._table[key] = Entry(serialized, expiry)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._table.pop(key, None) is not None

    def next_expiry_in(self) -> float | None:
        """Seconds until the earliest pending expiry, or None if nothing expires."""
        with self._lock:
            expiries = [e.expiry for e in self._table.values() if e.expiry is not None]
            if not expiries:
                return None
            return max(0.0, min(expiries) - self._clock())

    def purge_expired(self) -> int:
        """Evict every entry whose expiry has passed; return how many were removed."""
        with self._lock:
            now = self._clock()
            dead = [k for k, e in self._table.items() if e.is_expired(now)]
            for key in dead:
                del self._table[key]
            return len(dead)
