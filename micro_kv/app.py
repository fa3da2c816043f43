"""
micro-kv: ephemeral key-value store over HTTP.
SPDX-License-Identifier: MIT-0
"""
import logging
import os

from flask import Flask

from .config import Settings, settings
from .reaper import Reaper
from .routes import create_routes
from .store.interface import KeyValueStore
from .store.memory_store import MemoryStore
from .store.redis_store import RedisStore

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)
log = logging.getLogger("micro-kv")


def build_datastore(conf: Settings) -> KeyValueStore:
    if getattr(conf, "redis_url", ""):
        log.info("Using Redis backend at %s", conf.redis_url)
        return RedisStore(conf.redis_url, getattr(conf, "redis_key_prefix", "kv:"))
    return MemoryStore()


def create_app(conf: Settings, store: KeyValueStore | None = None) -> Flask:
    """Build the Flask app around one store; the store is also what the reaper sweeps."""
    flask_app = Flask(__name__)
    store = store if store is not None else build_datastore(conf)
    flask_app.extensions["datastore"] = store
    flask_app.register_blueprint(create_routes(conf, store))
    return flask_app


def start_reaper(conf: Settings, store: KeyValueStore) -> Reaper | None:
    if not getattr(conf, "reaper_enabled", True):
        log.info("Reaper disabled by config")
        return None

    if not store.needs_reaper:
        return None

    reaper = Reaper(store, getattr(conf, "reaper_max_interval_seconds", 1.0))
    reaper.start()
    return reaper


app = create_app(settings)
datastore = app.extensions["datastore"]
reaper = None

# Start reaper eagerly in non-test envs (compatible with gunicorn)
if getattr(settings, "app_env", "production") != "test":
    reaper = start_reaper(settings, datastore)


def main() -> None:
    log.info("Starting key-value server on %s:%s", settings.host, settings.port)
    app.run(host=settings.host, port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
