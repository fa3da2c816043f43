"""
Records and result types shared by the store backends and the HTTP routes.

Expiry instants are absolute readings of the store's clock (monotonic seconds),
never wall-clock time, so that system clock changes cannot resurrect or kill
entries early.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class StoreError(Exception):
    """Base class for faults raised by a store backend."""


class SerializationError(StoreError):
    """The value could not be encoded for storage; nothing was written."""


class DeserializationError(StoreError):
    """Stored bytes could not be decoded; the table is inconsistent."""


@dataclass(frozen=True)
class Entry:
    serialized_value: bytes
    expiry: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expiry is not None and self.expiry <= now

    def remaining(self, now: float) -> float | None:
        if self.expiry is None:
            return None
        return max(0.0, self.expiry - now)


class LookupStatus(str, Enum):
    FOUND = "found"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Lookup:
    status: LookupStatus
    value: Any = None
    ttl: Optional[float] = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @staticmethod
    def hit(value: Any = None, ttl: float | None = None) -> "Lookup":
        return Lookup(status=LookupStatus.FOUND, value=value, ttl=ttl)

    @staticmethod
    def expired() -> "Lookup":
        return Lookup(status=LookupStatus.EXPIRED)

    @staticmethod
    def missing() -> "Lookup":
        return Lookup(status=LookupStatus.NOT_FOUND)
