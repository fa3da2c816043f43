import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    val = os.getenv(name)
    return val if val is not None and val != "" else default


def _parse_int(name: str, default: int) -> int:
    val = _get_env(name, str(default))
    try:
        return int(val)
    except Exception:
        return default


def _parse_float(name: str, default: float) -> float:
    val = _get_env(name, str(default))
    try:
        return float(val)
    except Exception:
        return default


def _parse_bool(name: str, default: bool) -> bool:
    val = _get_env(name, "true" if default else "false")
    return val.lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    # Server
    app_env: str = "production"
    host: str = "0.0.0.0"
    port: int = 3310

    # Expiry policy
    default_ttl_seconds: int = 0  # 0 keeps entries until deleted
    reaper_enabled: bool = True
    reaper_max_interval_seconds: float = 1.0

    # Backend
    redis_url: str = ""
    redis_key_prefix: str = "kv:"

    @property
    def default_ttl(self) -> float | None:
        """TTL applied when a write omits one; None means permanent."""
        return float(self.default_ttl_seconds) if self.default_ttl_seconds > 0 else None


def load() -> Settings:
    max_interval = _parse_float("REAPER_MAX_INTERVAL_SECONDS", 1.0)
    if max_interval <= 0:
        max_interval = 1.0
    return Settings(
        app_env=_get_env("APP_ENV", "production"),
        host=_get_env("HOST", "0.0.0.0"),
        port=_parse_int("PORT", 3310),
        default_ttl_seconds=max(0, _parse_int("DEFAULT_TTL_SECONDS", 0)),
        reaper_enabled=_parse_bool("REAPER_ENABLED", True),
        reaper_max_interval_seconds=max_interval,
        redis_url=_get_env("REDIS_URL", ""),
        redis_key_prefix=_get_env("REDIS_KEY_PREFIX", "kv:"),
    )


# Singleton settings for app usage (optional in tests)
settings: Settings = load()
