import logging
from typing import Any

import redis

from ..helpers import deserialize_value, serialize_value
from ..models import DeserializationError, Lookup
from .interface import KeyValueStore

log = logging.getLogger("micro-kv")


class RedisStore(KeyValueStore):
    def __init__(self, url: str = "", key_prefix: str = "kv:", client: Any = None) -> None:
        self._client = client if client is not None else redis.Redis.from_url(url)
        self._prefix = key_prefix

    def _k(self, key: str) -> str:
        return f"{self._prefix}{key}"

    @staticmethod
    def _ttl_from_pttl(ttl_ms: Any) -> float | None:
        # PTTL: -1 means no expiry
        return None if int(ttl_ms) == -1 else int(ttl_ms) / 1000.0

    def get(self, key: str) -> Lookup:
        # Use pipeline to fetch value and TTL together
        with self._client.pipeline() as pipe:
            pipe.get(self._k(key))
            pipe.pttl(self._k(key))
            val_bytes, ttl_ms = pipe.execute()

        # Redis drops expired keys itself; -2 is "no such key"
        if val_bytes is None or ttl_ms is None or int(ttl_ms) == -2:
            return Lookup.missing()

        value = deserialize_value(val_bytes)
        return Lookup.hit(value, self._ttl_from_pttl(ttl_ms))

    def get_all(self) -> dict[str, tuple[Any, float | None]]:
        keys = list(self._client.scan_iter(match=f"{self._prefix}*"))
        if not keys:
            return {}

        with self._client.pipeline() as pipe:
            for k in keys:
                pipe.get(k)
                pipe.pttl(k)
            replies = pipe.execute()

        result = {}
        for i, k in enumerate(keys):
            val_bytes, ttl_ms = replies[2 * i], replies[2 * i + 1]
            if val_bytes is None or int(ttl_ms) == -2:
                continue
            name = k.decode("utf-8") if isinstance(k, bytes) else str(k)
            try:
                value = deserialize_value(val_bytes)
            except DeserializationError as e:
                log.error("Skipping key=%s in listing: %s", name, e)
                continue
            result[name[len(self._prefix):]] = (value, self._ttl_from_pttl(ttl_ms))
        return result

    def get_ttl(self, key: str) -> Lookup:
        ttl_ms = self._client.pttl(self._k(key))
        if ttl_ms is None or int(ttl_ms) == -2:
            return Lookup.missing()
        return Lookup.hit(ttl=self._ttl_from_pttl(ttl_ms))

    def put(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        val = serialize_value(value)
        if ttl_seconds is None:
            self._client.set(self._k(key), val)
        elif ttl_seconds <= 0:
            # Already expired: an upsert with no lifetime leaves nothing behind
            self._client.delete(self._k(key))
        else:
            self._client.set(self._k(key), val, px=max(1, int(ttl_seconds * 1000)))

    def delete(self, key: str) -> bool:
        return int(self._client.delete(self._k(key))) > 0
