"""
Expiring Response Cache
=======================

In-memory key/value store with per-entry expiration, used by
``Client.get`` to keep responses keyed by request URL.
"""

import threading
import time
from typing import Any, Dict, Optional, Tuple

from relax.core.logger import get_logger

logger = get_logger(__name__)

# Pass as ``expiration`` to keep an entry until it is deleted
NO_EXPIRATION = -1.0

DEFAULT_EXPIRATION = 300.0
DEFAULT_CLEANUP_INTERVAL = 600.0


class ExpiringCache:
    """
    In-memory cache with TTL support.

    Entries carry an absolute expiry time. Expired entries are never
    returned by ``get()`` and are swept from memory on writes, at most
    once per ``cleanup_interval``.

    Thread Safety:
        This class is thread-safe for concurrent read/write operations.
        Uses ``threading.Lock`` internally to protect the store.

    Args:
        default_expiration: Default time-to-live in seconds (default: 300).
            A value <= 0 keeps entries forever.
        cleanup_interval: Seconds between sweeps of expired entries
            (default: 600). A value <= 0 disables sweeping.

    Example:
        >>> cache = ExpiringCache(default_expiration=60)
        >>> cache.set_default("https://api.example.com/a", response)
        >>> cache.get("https://api.example.com/a")
    """

    def __init__(
        self,
        default_expiration: float = DEFAULT_EXPIRATION,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL,
    ):
        self.default_expiration = default_expiration
        self.cleanup_interval = cleanup_interval
        self._items: Dict[str, Tuple[Optional[float], Any]] = {}
        self._lock = threading.Lock()
        self._last_cleanup = time.monotonic()

    def _expires_at(self, expiration: Optional[float]) -> Optional[float]:
        if expiration is None:
            expiration = self.default_expiration
        if expiration <= 0:
            return None
        return time.monotonic() + expiration

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value if it exists and hasn't expired.

        Args:
            key: Cache key.

        Returns:
            Cached value or None if not found/expired.
        """
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at is not None and time.monotonic() > expires_at:
                return None
            return value

    def set(self, key: str, value: Any, expiration: Optional[float] = None) -> None:
        """
        Store a value in the cache, replacing any existing entry.

        Args:
            key: Cache key.
            value: Value to cache.
            expiration: Time-to-live in seconds. None uses the default
                expiration, ``NO_EXPIRATION`` keeps the entry forever.
        """
        expires_at = self._expires_at(expiration)
        with self._lock:
            self._maybe_clean()
            self._items[key] = (expires_at, value)

    def set_default(self, key: str, value: Any) -> None:
        """Store a value using the default expiration."""
        self.set(key, value)

    def delete(self, key: str) -> bool:
        """
        Delete a cached value.

        Args:
            key: Cache key.

        Returns:
            True if deleted, False if not found.
        """
        with self._lock:
            return self._items.pop(key, None) is not None

    def clear(self) -> int:
        """
        Clear all cached entries.

        Returns:
            Number of entries cleared.
        """
        with self._lock:
            count = len(self._items)
            self._items.clear()
        return count

    def delete_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            return self._delete_expired()

    def _delete_expired(self) -> int:
        now = time.monotonic()
        expired = [
            key
            for key, (expires_at, _) in self._items.items()
            if expires_at is not None and now > expires_at
        ]
        for key in expired:
            del self._items[key]
        self._last_cleanup = now
        if expired:
            logger.debug(f"Removed {len(expired)} expired cache entries")
        return len(expired)

    def _maybe_clean(self) -> None:
        """Sweep expired entries once the cleanup interval has elapsed."""
        if self.cleanup_interval <= 0:
            return
        if time.monotonic() - self._last_cleanup >= self.cleanup_interval:
            self._delete_expired()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
