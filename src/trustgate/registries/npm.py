"""npm registry.

Resolves the npm user who published a package version from the registry's
version metadata document.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

from trustgate.cache import ApplicationCache
from trustgate.models import DependencyEcosystem, RepositoryId
from trustgate.registries.http import HttpRegistry

logger = logging.getLogger(__name__)


class NpmPackageRegistry(HttpRegistry):
    """Registry for packages published to npm.

    The owner is the "_npmUser" that published the version, and is only
    returned if the registry answered for exactly the requested name and
    version, so that redirects and aliases cannot smuggle in a different
    package.
    """

    cache_tags = ("all", "npm")

    def __init__(
        self,
        cache: ApplicationCache,
        base_url: str = "https://registry.npmjs.org",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(cache, base_url, timeout)

    @property
    def ecosystem(self) -> DependencyEcosystem:
        return DependencyEcosystem.NPM

    async def get_package_owners(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> list[str]:
        package = await self._cached(
            f"npm:{id}@{version}",
            lambda: self._get_package(id, version),
        )

        if not package:
            return []

        name = (package.get("_npmUser") or {}).get("name")

        if (
            isinstance(name, str)
            and name.strip()
            and package.get("name") == id
            and package.get("version") == version
        ):
            return [name]

        logger.debug("No npm publisher found for %s@%s", id, version)
        return []

    async def _get_package(self, id: str, version: str) -> Optional[dict[str, Any]]:
        # https://github.com/npm/registry/blob/main/docs/responses/package-metadata.md
        path = f"/{quote(id, safe='@')}/{quote(version, safe='')}"

        # 405 is returned if the version is not x.y.z (e.g. 1.0)
        return await self._get_json(path, not_found=(404, 405))
