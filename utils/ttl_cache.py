"""Thread-safe TTL cache for aggregated search results."""

import threading
import time
from typing import Callable, Generic, TypeVar

from utils.logger import get_logger

logger = get_logger(__name__)

V = TypeVar("V")


class InMemoryTTLCache(Generic[V]):
    """
    Thread-safe in-memory cache with a fixed TTL (Time To Live).

    Expired entries are evicted lazily on read and by cleanup(), which a
    background sweeper can run periodically (start_sweeper). There is no size
    bound: memory is limited only by TTL expiry, so key cardinality must stay
    modest (one entry per distinct lower-cased query).
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache with TTL.

        Args:
            ttl_seconds: Time to live in seconds for cached entries
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self._cache: dict[str, tuple[V, float]] = {}
        self._lock = threading.Lock()
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._sweeper: threading.Thread | None = None
        self._stop_sweeper = threading.Event()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> V | None:
        """
        Get cached value if it exists and has not expired.

        Returns:
            Cached value if present and valid, None otherwise
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() < expires_at:
                return value
            del self._cache[key]
            return None

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._cache[key] = (value, self._clock() + self._ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._cache.clear()

    def cleanup(self) -> int:
        """
        Evict every entry whose expiry is at or before now.

        Returns:
            Number of entries evicted
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._cache.items() if expires_at <= now]
            for key in expired:
                del self._cache[key]
        if expired:
            logger.debug(f"Cache cleanup evicted {len(expired)} entries")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    # ------------------------------------------------------------------
    # Periodic sweeper
    # ------------------------------------------------------------------

    def start_sweeper(self, interval_seconds: float = 60.0) -> None:
        """Run cleanup() every interval_seconds on a daemon thread."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return

        self._stop_sweeper.clear()

        def _run():
            while not self._stop_sweeper.wait(interval_seconds):
                try:
                    self.cleanup()
                except Exception as e:
                    logger.error(f"Cache sweep failed: {e}", exc_info=True)

        self._sweeper = threading.Thread(target=_run, name="ttl-cache-sweeper", daemon=True)
        self._sweeper.start()

    def stop_sweeper(self) -> None:
        self._stop_sweeper.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=1.0)
            self._sweeper = None

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_alive()
