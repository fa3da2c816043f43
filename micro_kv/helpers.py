import json
import math
from typing import Any

from .models import DeserializationError, SerializationError


def serialize_value(value: Any) -> bytes:
    """Encode a JSON value to the bytes kept in the table."""
    try:
        return json.dumps(value, separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Error serializing JSON: {e}") from e


def deserialize_value(raw: bytes) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DeserializationError(f"Error deserializing JSON: {e}") from e


def parse_ttl(raw: str | None, default: float | None = None) -> tuple[float | None, str | None]:
    """
    Parse the ``ttl`` query parameter into seconds.
    A missing parameter yields ``default`` (None keeps the entry forever).
    Returns (ttl_seconds, error_message).
    """
    if raw is None or raw == "":
        return default, None

    try:
        ttl = float(raw)
    except (ValueError, TypeError):
        return None, f"ttl must be a number of seconds, got: {raw}"

    if math.isnan(ttl) or math.isinf(ttl):
        return None, f"ttl must be finite, got: {raw}"

    if ttl < 0:
        return None, f"ttl cannot be negative, got: {raw}"

    return ttl, None


def make_status(status: str, **extra: Any) -> dict[str, Any]:
    """Return the JSON body the API uses for status-only answers."""
    body = {"status": status}
    body.update(extra)
    return body


def not_found_status(key: str) -> dict[str, Any]:
    return make_status(f"Key not found: {key}")
