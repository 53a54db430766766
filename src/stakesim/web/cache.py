"""In-memory TTL cache for validator lookups."""

import logging
import threading
from typing import Any

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class CacheService:
    """TTLCache with prefix invalidation, shared by threadpool-run routes.

    cachetools caches are not thread-safe, so every access goes through one lock.
    """

    def __init__(self, ttl: int = 300, maxsize: int = 1024):
        self._ttl = ttl
        self._memory = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._memory.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._memory[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._memory.pop(key, None)

    def clear_prefix(self, prefix: str) -> None:
        """Delete all keys matching a prefix."""
        with self._lock:
            keys_to_delete = [k for k in self._memory if k.startswith(prefix)]
            for k in keys_to_delete:
                self._memory.pop(k, None)
        logger.debug("Cache: cleared %d keys with prefix %s", len(keys_to_delete), prefix)

    def __len__(self) -> int:
        with self._lock:
            return len(self._memory)
