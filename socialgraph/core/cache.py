"""In-process TTL cache of adjacency id sets."""

import logging
import threading
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300
DEFAULT_MAXSIZE = 10_000


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int
    misses: int
    size: int
    maxsize: int
    ttl: float
    stale_fills: int = 0


class AdjacencyCache:
    """
    Read accelerator for following/follower id sets.

    Entries are keyed by user id and expire after ``ttl`` seconds or on an
    explicit ``invalidate`` call. The cache is advisory: callers must never
    use it to decide a write, only to skip a read.

    Every ``invalidate`` bumps the user's version. A reader takes the
    version before hitting the store and passes it back to ``set_*``; the
    fill is dropped if an invalidation happened in between, so a set read
    before a write can never overwrite it.

    Usage:
        version = cache.version(user_id)
        ids = store.target_ids(user_id)
        cache.set_following(user_id, ids, version=version)
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        maxsize: int = DEFAULT_MAXSIZE,
        timer=None,
    ) -> None:
        """
        Initialize cache.

        Args:
            ttl: Time-to-live in seconds (default 300 = 5 min)
            maxsize: Maximum number of users per direction
            timer: Optional clock for TTL accounting (tests)
        """
        kwargs = {"timer": timer} if timer is not None else {}
        self._following: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, **kwargs)
        self._followers: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, **kwargs)
        # Versions outlive the entries they guard
        self._versions: TTLCache = TTLCache(maxsize=maxsize * 2, ttl=ttl, **kwargs)
        self._generation = 0
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._ttl = ttl
        self._hits = 0
        self._misses = 0
        self._stale_fills = 0

    def _get(self, table: TTLCache, user_id: str) -> Optional[FrozenSet[str]]:
        with self._lock:
            value = table.get(user_id)
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
            return value

    def _set(
        self,
        table: TTLCache,
        user_id: str,
        ids: Iterable[str],
        version: Optional[int],
    ) -> FrozenSet[str]:
        value = frozenset(ids)
        with self._lock:
            if version is not None and self._versions.get(user_id, 0) != version:
                self._stale_fills += 1
                logger.debug(f"Dropped stale adjacency fill for {user_id}")
                return value
            table[user_id] = value
        return value

    def version(self, user_id: str) -> int:
        """Current invalidation version of ``user_id`` (0 if never invalidated)."""
        with self._lock:
            return self._versions.get(user_id, 0)

    def get_following(self, user_id: str) -> Optional[FrozenSet[str]]:
        return self._get(self._following, user_id)

    def set_following(
        self,
        user_id: str,
        ids: Iterable[str],
        version: Optional[int] = None,
    ) -> FrozenSet[str]:
        return self._set(self._following, user_id, ids, version)

    def get_followers(self, user_id: str) -> Optional[FrozenSet[str]]:
        return self._get(self._followers, user_id)

    def set_followers(
        self,
        user_id: str,
        ids: Iterable[str],
        version: Optional[int] = None,
    ) -> FrozenSet[str]:
        return self._set(self._followers, user_id, ids, version)

    def invalidate(self, *user_ids: str) -> None:
        """Drop both directions of the cached adjacency for each user."""
        with self._lock:
            for user_id in user_ids:
                self._generation += 1
                self._versions[user_id] = self._generation
                self._following.pop(user_id, None)
                self._followers.pop(user_id, None)
        logger.debug(f"Invalidated adjacency cache for {list(user_ids)}")

    def clear(self) -> None:
        with self._lock:
            self._following.clear()
            self._followers.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._following) + len(self._followers),
                maxsize=self._maxsize,
                ttl=self._ttl,
                stale_fills=self._stale_fills,
            )
