"""NuGet registry.

Discovers the search service from the NuGet V3 service index and resolves
the owners of a package from its search result.
"""

import logging
import re
from datetime import timedelta
from typing import Any, Optional

from trustgate.cache import ApplicationCache
from trustgate.models import DependencyEcosystem, RepositoryId
from trustgate.registries.http import HttpRegistry

logger = logging.getLogger(__name__)

SEARCH_QUERY_SERVICE = "SearchQueryService/3.5.0"
SERVICE_INDEX_CACHE_KEY = "nuget-service-index"
SERVICE_INDEX_EXPIRATION = timedelta(hours=1)

# Major with up to three further numeric parts, then optional SemVer 2.0
# pre-release labels and build metadata.
NUGET_VERSION_PATTERN = re.compile(
    r"^\d+(\.\d+){0,3}"
    r"(-[0-9A-Za-z-]+(\.[0-9A-Za-z-]+)*)?"
    r"(\+[0-9A-Za-z-]+(\.[0-9A-Za-z-]+)*)?$"
)


def is_valid_nuget_version(version: str) -> bool:
    """Return whether a string is a version NuGet would accept."""
    return bool(NUGET_VERSION_PATTERN.match(version))


def find_version(hit: dict[str, Any], version: str) -> Optional[str]:
    """Locate the requested version in a NuGet search result.

    Tries an exact case-insensitive match, then the single listed version
    that carries build metadata and starts with the requested version, and
    finally the result's latest version.

    Args:
        hit: A search result from the NuGet search service.
        version: The requested version.

    Returns:
        The matching version with any build metadata stripped, or None when
        several versions share the same stripped prefix and none is exact.
    """
    listed = [
        item.get("version") or ""
        for item in hit.get("versions") or []
    ]

    for candidate in listed:
        if candidate.casefold() == version.casefold():
            return candidate

    with_metadata = [
        candidate.split("+")[0]
        for candidate in listed
        if candidate.startswith(version) and "+" in candidate
    ]

    if len(with_metadata) == 1:
        return with_metadata[0]
    if len(with_metadata) > 1:
        logger.debug("Found %d versions of %s matching %s", len(with_metadata), hit.get("id"), version)
        return None

    return hit.get("version")


class NuGetPackageRegistry(HttpRegistry):
    """Registry for packages published to nuget.org."""

    cache_tags = ("all", "nuget")

    def __init__(
        self,
        cache: ApplicationCache,
        base_url: str = "https://api.nuget.org",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(cache, base_url, timeout)

    @property
    def ecosystem(self) -> DependencyEcosystem:
        return DependencyEcosystem.NUGET

    async def get_package_owners(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> list[str]:
        if not is_valid_nuget_version(version):
            logger.warning('The version string "%s" is not a valid NuGet package version.', version)
            return []

        # https://learn.microsoft.com/en-us/nuget/api/search-query-service-resource#versioning
        search_url = await self._get_resource_url(SEARCH_QUERY_SERVICE)

        if search_url is None:
            logger.warning("No %s resource found in the NuGet service index", SEARCH_QUERY_SERVICE)
            return []

        # https://learn.microsoft.com/en-us/nuget/api/search-query-service-resource#search-for-packages
        response = await self._get_json(
            search_url,
            params={
                "q": f"PackageId:{id}",
                "prerelease": "true",
                "semVerLevel": "2.0.0",
                "take": "1",
            },
        )

        hits = (response or {}).get("data") or []
        hit = next(
            (item for item in hits if (item.get("id") or "").casefold() == id.casefold()),
            None,
        )

        if hit is None:
            return []

        found = find_version(hit, version)

        if found is None or found.casefold() != version.casefold():
            return []

        # https://learn.microsoft.com/en-us/nuget/api/search-query-service-resource#search-result
        owners = hit.get("owners")

        if isinstance(owners, str):
            return [owners]
        if isinstance(owners, list):
            return [owner for owner in owners if isinstance(owner, str)]

        return []

    async def _get_resource_url(self, resource_type: str) -> Optional[str]:
        index = await self.cache.get_or_create(
            SERVICE_INDEX_CACHE_KEY,
            lambda: self._get_json("/v3/index.json"),
            SERVICE_INDEX_EXPIRATION,
            self.cache_tags,
        )

        for resource in (index or {}).get("resources") or []:
            if resource.get("@type") == resource_type:
                url = resource.get("@id") or ""
                if url.startswith(("http://", "https://")):
                    return url
                return None

        return None
