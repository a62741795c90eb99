"""Single-slot in-memory cache for the live status payload"""
import threading
import time

CACHE_TTL_SECONDS = 90  # keep results ~90s to avoid hammering YouTube


class LiveCache:
    """Holds one payload and the time it was captured.

    Lives as long as the warm function instance. Entries expire by age only;
    concurrent refreshes simply overwrite each other.
    """

    def __init__(self, ttl_seconds=CACHE_TTL_SECONDS, clock=time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._captured_at = None
        self._payload = None

    def get(self):
        """Cached payload if it is still fresh, else None"""
        with self._lock:
            if self._payload is None or self._captured_at is None:
                return None
            if self.clock() - self._captured_at < self.ttl_seconds:
                return self._payload
        return None

    def set(self, payload, captured_at=None):
        with self._lock:
            self._payload = payload
            self._captured_at = self.clock() if captured_at is None else captured_at

    def age(self):
        with self._lock:
            if self._captured_at is None:
                return None
            return self.clock() - self._captured_at
