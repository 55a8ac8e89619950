"""Shared aiohttp session handling for registry and API clients."""

import logging
from collections.abc import Container
from typing import Any, Optional

import aiohttp

logger = logging.getLogger(__name__)

USER_AGENT = "trustgate/0.1.0"


class HttpClient:
    """Base class for components that make HTTP requests.

    Manages a shared aiohttp.ClientSession for connection pooling and reuse.
    Use as an async context manager or call close() when done.

    Attributes:
        base_url: Base URL that relative paths are joined to.
        timeout: Total timeout in seconds for each request.
    """

    def __init__(self, base_url: str = "", timeout: float = 10.0) -> None:
        """Initialize the HttpClient.

        Args:
            base_url: Base URL for relative request paths.
            timeout: Total timeout in seconds for each request.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            The shared aiohttp ClientSession.
        """
        if self._session is None or self._session.closed:
            self._session = self._create_session()
        return self._session

    def _create_session(self) -> aiohttp.ClientSession:
        """Create a new aiohttp.ClientSession.

        Subclasses can override this to provide custom session configuration.

        Returns:
            A new aiohttp.ClientSession instance.
        """
        connector = aiohttp.TCPConnector(ttl_dns_cache=300)
        return aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _get_json(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
        not_found: Container[int] = (404,),
    ) -> Optional[Any]:
        """GET a JSON document.

        Args:
            path: Absolute URL or path relative to base_url.
            params: Optional query string parameters.
            headers: Optional extra request headers.
            not_found: Status codes that mean the resource does not exist.

        Returns:
            The decoded JSON body, or None if the status is in not_found.

        Raises:
            aiohttp.ClientResponseError: For any other unsuccessful status.
            aiohttp.ClientError: For network errors.
        """
        url = self._url(path)
        logger.debug("GET %s", url)

        session = await self._get_session()
        async with session.get(url, params=params, headers=headers) as response:
            if response.status in not_found:
                logger.debug("%s returned %d, treating as not found", url, response.status)
                return None

            response.raise_for_status()
            return await response.json(content_type=None)

    async def close(self) -> None:
        """Close the aiohttp session.

        Should be called when done using the client to release resources.
        """
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HttpClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
