import logging
import threading

from .store.memory_store import MemoryStore

log = logging.getLogger("micro-kv")


class Reaper:
    """Background eviction of expired entries from a MemoryStore.

    Reads already hide expired entries, so the reaper only reclaims memory.
    It sleeps until the earliest pending expiry, capped at max_interval.
    """

    def __init__(self, store: MemoryStore, max_interval: float = 1.0) -> None:
        self._store = store
        self._max_interval = max(0.0, float(max_interval))
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sleep_for(self) -> float:
        next_in = self._store.next_expiry_in()
        if next_in is None:
            return self._max_interval
        return min(max(0.0, next_in), self._max_interval)

    def run_once(self) -> int:
        removed = self._store.purge_expired()
        if removed:
            log.debug("Reaper evicted %d expired keys", removed)
        return removed

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                # Sleep happens outside the store lock
                if self._stop.wait(self.sleep_for()):
                    break
                self.run_once()
            except Exception:
                log.error("Reaper cycle failed", exc_info=True)
                self._stop.wait(self._max_interval)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="reaper", daemon=True)
        self._thread.start()
        log.info("Reaper started (max_interval=%ss)", self._max_interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
