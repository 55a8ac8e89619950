"""PyPI registry.

Resolves the maintainer of a release from the PyPI JSON API, and verifies
release provenance using the PyPI integrity API.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote, urlparse

from trustgate.cache import ApplicationCache
from trustgate.models import DependencyEcosystem, RepositoryId
from trustgate.registries.http import HttpRegistry

logger = logging.getLogger(__name__)

GITHUB_REPOSITORY_URL_KEY = "GitHub: repo"


class PyPIPackageRegistry(HttpRegistry):
    """Registry for packages published to PyPI.

    Both the release metadata and the provenance document are cached
    independently for an hour.
    """

    cache_tags = ("all", "pip")

    def __init__(
        self,
        cache: ApplicationCache,
        base_url: str = "https://pypi.org",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(cache, base_url, timeout)

    @property
    def ecosystem(self) -> DependencyEcosystem:
        return DependencyEcosystem.PIP

    async def get_package_owners(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> list[str]:
        project = await self._get_project_cached(id, version)
        info = (project or {}).get("info") or {}

        name = info.get("name") or ""
        maintainer = info.get("maintainer") or ""

        if (
            name.strip()
            and maintainer.strip()
            and name == id
            and info.get("version") == version
        ):
            return [maintainer]

        return []

    async def get_package_attestation(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> Optional[bool]:
        """Verify that every attestation was published from the project's GitHub repository.

        Returns:
            None if there are no attestation bundles, True if every bundle's
            publisher is GitHub and names the repository in the project's
            "GitHub: repo" URL, otherwise False.
        """
        attestation = await self._get_attestation_cached(id, version)
        bundles = (attestation or {}).get("attestation_bundles") or []

        if not bundles:
            return None

        project = await self._get_project_cached(id, version)
        project_urls = ((project or {}).get("info") or {}).get("project_urls") or {}
        repository_url = project_urls.get(GITHUB_REPOSITORY_URL_KEY)

        slug = self._github_slug(repository_url)
        if slug is None:
            logger.debug("%s %s has attestations but no GitHub repository URL", id, version)
            return False

        return all(
            (bundle.get("publisher") or {}).get("kind") == "GitHub"
            and (bundle.get("publisher") or {}).get("repository") == slug
            for bundle in bundles
        )

    @staticmethod
    def _github_slug(url: Optional[str]) -> Optional[str]:
        if not url:
            return None

        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or parsed.netloc != "github.com":
            return None

        return parsed.path.strip("/")

    async def _get_project_cached(self, id: str, version: str) -> Optional[dict[str, Any]]:
        return await self._cached(
            f"pypi:{id}@{version}",
            lambda: self._get_project(id, version),
        )

    async def _get_attestation_cached(self, id: str, version: str) -> Optional[dict[str, Any]]:
        return await self._cached(
            f"pypi-attestation:{id}@{version}",
            lambda: self._get_attestation(id, version),
        )

    async def _get_project(self, id: str, version: str) -> Optional[dict[str, Any]]:
        # https://docs.pypi.org/api/json/#get-a-release
        escaped_id = quote(id, safe="")
        escaped_version = quote(version, safe="")
        return await self._get_json(f"/pypi/{escaped_id}/{escaped_version}/json")

    async def _get_attestation(self, id: str, version: str) -> Optional[dict[str, Any]]:
        # https://docs.pypi.org/api/integrity/#get-provenance-for-file
        escaped_id = quote(id, safe="")
        escaped_version = quote(version, safe="")
        return await self._get_json(
            f"/integrity/{escaped_id}/{escaped_version}/"
            f"{escaped_id}-{escaped_version}.tar.gz/provenance"
        )
