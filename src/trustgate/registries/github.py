"""Helpers shared by the registries backed by the GitHub API."""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, Optional

import aiohttp

from trustgate.cache import ApplicationCache
from trustgate.errors import GraphQLError, NotFoundError, TrustgateError
from trustgate.github import GitHubClient
from trustgate.registries.base import CACHE_EXPIRATION, PackageRegistry

logger = logging.getLogger(__name__)


def parse_repository_slug(slug: str) -> Optional[tuple[str, str]]:
    """Parse an "owner/name" slug.

    Returns:
        Tuple of (owner, name), or None if the slug is not two non-empty parts.
    """
    parts = slug.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


async def cached_exists(
    cache: ApplicationCache,
    key: str,
    resource: Callable[[], Awaitable[Any]],
    tags: Iterable[str],
) -> bool:
    """Return whether a GitHub resource exists, caching the answer.

    Args:
        cache: Application cache.
        key: Cache key for the answer.
        resource: Coroutine function fetching the resource.
        tags: Cache tags.

    Returns:
        True if the resource was fetched, False if GitHub returned 404.
    """

    async def exists() -> bool:
        try:
            await resource()
            return True
        except NotFoundError:
            return False

    return await cache.get_or_create(key, exists, CACHE_EXPIRATION, tags)


async def are_owners_corroborated(client: GitHubClient, owners: Sequence[str]) -> bool:
    """Corroborate a single GitHub owner as a recognized publisher.

    Only an owner list of exactly one login is considered. GraphQL errors,
    such as an unknown login, and failed requests mean the owner is not
    corroborated.
    """
    if len(owners) != 1:
        return False

    login = owners[0]

    try:
        return await client.is_github_star(login)
    except GraphQLError as e:
        logger.debug("Could not corroborate GitHub user %s: %s", login, e)
        return False
    except (aiohttp.ClientError, TimeoutError, TrustgateError) as e:
        logger.warning("Failed to query GitHub for user %s: %s", login, e)
        return False


class GitHubPackageRegistry(PackageRegistry):
    """Base class for registries that resolve owners through the GitHub API.

    Attributes:
        client: Authenticated GitHub client.
        cache: The application cache.
    """

    def __init__(self, client: GitHubClient, cache: ApplicationCache) -> None:
        self.client = client
        self.cache = cache

    async def are_owners_trusted(self, owners: Sequence[str]) -> bool:
        return await are_owners_corroborated(self.client, owners)
