from typing import Any

from ..models import Lookup


class KeyValueStore:
    # Whether entries need an in-process reaper to reclaim space
    needs_reaper = False

    def get(self, key: str) -> Lookup:
        """
        Return a FOUND lookup with (value, remaining ttl) if present and not expired;
        EXPIRED or NOT_FOUND otherwise. Raises DeserializationError on corrupt data.
        """
        raise NotImplementedError

    def get_all(self) -> dict[str, tuple[Any, float | None]]:
        """
        Return {key: (value, remaining ttl)} for every live entry.
        """
        raise NotImplementedError

    def get_ttl(self, key: str) -> Lookup:
        """
        Return a FOUND lookup carrying only the remaining ttl, or NOT_FOUND.
        """
        raise NotImplementedError

    def put(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """
        Store value with expiry now + ttl_seconds (never expires when None).
        Raises SerializationError without writing anything.
        """
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        """
        Remove key; return whether an entry was removed.
        """
        raise NotImplementedError
