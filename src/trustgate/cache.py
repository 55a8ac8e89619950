"""In-memory cache layer for registry lookups and credentials.

This module provides a process-scoped async cache with per-entry absolute
expiration and tag-based bulk eviction. One instance is created at startup
and passed to every component that caches remote lookups.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime, timedelta
from typing import Any, Optional, TypeVar

from trustgate.models import CacheEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(UTC)


class ApplicationCache:
    """Async key/value cache with expiration and tags.

    Entries are only refreshed on demand: an expired entry is dropped the
    next time it is read and the factory runs again. Concurrent misses for
    the same key are not de-duplicated, so a factory may run more than once;
    every factory used with this cache is a side-effect-free read.

    A factory that raises, or whose task is cancelled, leaves no entry
    behind, so failures are never cached.

    Attributes:
        clock: Callable returning the current UTC time.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        """Initialize the cache.

        Args:
            clock: Optional clock used to compute expiry. Defaults to the
                system clock in UTC.
        """
        self.clock = clock or utc_now
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self._get_entry(key) is not None

    def _get_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self.clock() >= entry.expires_at:
            # Lazily evict on read
            self._entries.pop(key, None)
            return None

        return entry

    def get(self, key: str) -> Optional[Any]:
        """Retrieve a cached value.

        Args:
            key: Cache key.

        Returns:
            The cached value, or None on a miss or if the entry has expired.
        """
        entry = self._get_entry(key)
        return entry.value if entry is not None else None

    def set(
        self,
        key: str,
        value: Any,
        expiration: timedelta,
        tags: Iterable[str] = (),
    ) -> CacheEntry:
        """Store a value in the cache.

        Args:
            key: Cache key.
            value: Value to store.
            expiration: Time until the entry expires. Must be positive.
            tags: Tags that can later be used to evict the entry.

        Returns:
            The stored CacheEntry.

        Raises:
            ValueError: If expiration is not positive.
        """
        if expiration <= timedelta(0):
            raise ValueError("Cache entry expiration must be positive")

        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=self.clock() + expiration,
            tags=frozenset(tags),
        )
        self._entries[key] = entry
        return entry

    async def get_or_create(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        expiration: timedelta,
        tags: Iterable[str] = (),
    ) -> T:
        """Return the cached value for a key, creating it on a miss.

        Args:
            key: Cache key.
            factory: Coroutine function producing the value on a miss.
            expiration: Time until a newly created entry expires.
            tags: Tags applied to a newly created entry.

        Returns:
            The cached or newly created value.
        """
        entry = self._get_entry(key)
        if entry is not None:
            logger.debug("Cache hit for %s", key)
            return entry.value

        logger.debug("Cache miss for %s", key)

        # Only store once the factory has completed successfully
        value = await factory()
        self.set(key, value, expiration, tags)
        return value

    def remove(self, key: str) -> bool:
        """Remove a single entry.

        Returns:
            True if an entry was removed.
        """
        return self._entries.pop(key, None) is not None

    def remove_by_tag(self, tag: str) -> int:
        """Evict every entry carrying the given tag.

        Args:
            tag: Tag such as "all", "npm" or "github".

        Returns:
            Number of entries evicted.
        """
        keys = [key for key, entry in self._entries.items() if tag in entry.tags]
        for key in keys:
            del self._entries[key]

        logger.info("Evicted %d cache entries tagged '%s'", len(keys), tag)
        return len(keys)

    def purge_expired(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries dropped.
        """
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache information:
                - count: Number of live entries
                - tags: Number of live entries per tag
        """
        self.purge_expired()

        tags: dict[str, int] = {}
        for entry in self._entries.values():
            for tag in entry.tags:
                tags[tag] = tags.get(tag, 0) + 1

        return {
            "count": len(self._entries),
            "tags": dict(sorted(tags.items())),
        }
