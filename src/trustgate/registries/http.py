from collections.abc import Awaitable, Callable
from typing import Any, Optional

from trustgate.cache import ApplicationCache
from trustgate.http import HttpClient
from trustgate.registries.base import CACHE_EXPIRATION, PackageRegistry


class HttpRegistry(HttpClient, PackageRegistry):
    """Base class for registries that query a public HTTP API.

    Manages a shared aiohttp.ClientSession and caches lookups in the
    application cache under the registry's tags.

    Attributes:
        cache: The application cache.
        cache_tags: Tags applied to every entry this registry caches.
    """

    cache_tags: tuple[str, ...] = ("all",)

    def __init__(self, cache: ApplicationCache, base_url: str, timeout: float = 10.0) -> None:
        """Initialize the HttpRegistry.

        Args:
            cache: Application cache for lookups.
            base_url: Base URL of the registry API.
            timeout: Total timeout in seconds for each request.
        """
        super().__init__(base_url=base_url, timeout=timeout)
        self.cache = cache

    async def _cached(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Optional[Any]:
        return await self.cache.get_or_create(key, factory, CACHE_EXPIRATION, self.cache_tags)
