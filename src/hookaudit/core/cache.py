"""LRU cache for audit results.

This module provides caching for audit results to avoid re-parsing and
re-walking scripts that are audited repeatedly (e.g. the same hook shipped
by every release of a package). Uses LRU eviction policy.
"""

import hashlib
import threading
from collections import OrderedDict
from collections.abc import Iterable
from typing import Any, Optional


def cache_key(script: str, trusted_commands: Iterable[str]) -> str:
    """Build the cache key for a script audited against a trust catalog.

    The same script can produce different findings under different catalogs,
    so both are part of the key.

    Example:
        >>> cache_key("echo hi", {"echo"}) == cache_key("echo hi", ["echo"])
        True
    """
    digest = hashlib.sha256()
    digest.update(script.encode("utf-8", errors="surrogatepass"))
    digest.update(b"\0")
    digest.update("\0".join(sorted(trusted_commands)).encode("utf-8"))
    return digest.hexdigest()


class AuditCache:
    """Thread-safe LRU cache for audit results.

    Example:
        >>> cache = AuditCache(max_size=100)
        >>> key = cache_key(script, catalog)
        >>> cache.set(key, result)
        >>> cache.get(key) == result  # True
    """

    def __init__(self, max_size: int = 256):
        """Initialize AuditCache with configurable size.

        Args:
            max_size: Maximum number of entries to cache (must be > 0)

        Raises:
            ValueError: If max_size is not positive
        """
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")

        self.max_size = max_size
        self._cache: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Retrieve a cached result and mark it as recently used."""
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
                return self._cache[key]
            return None

    def set(self, key: str, result: Any) -> None:
        """Store a result, evicting the least recently used entry when full.

        Check and update happen together under the lock.
        """
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
                self._cache[key] = result
            else:
                if len(self._cache) >= self.max_size:
                    self._cache.popitem(last=False)
                self._cache[key] = result

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._cache)
