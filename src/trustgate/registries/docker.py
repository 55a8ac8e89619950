"""Docker image registry.

Images published by Microsoft to the Microsoft Artifact Registry are owned by
"mcr.microsoft.com"; any other image is owned by the first segment of its
repository path.
"""

from typing import Any, Optional

from trustgate.cache import ApplicationCache
from trustgate.models import DependencyEcosystem, RepositoryId
from trustgate.registries.http import HttpRegistry

MICROSOFT_ARTIFACT_REGISTRY = "mcr.microsoft.com"


class DockerPackageRegistry(HttpRegistry):
    """Registry for container images."""

    cache_tags = ("all", "mar")

    def __init__(
        self,
        cache: ApplicationCache,
        base_url: str = f"https://{MICROSOFT_ARTIFACT_REGISTRY}",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(cache, base_url, timeout)

    @property
    def ecosystem(self) -> DependencyEcosystem:
        return DependencyEcosystem.DOCKER

    async def get_package_owners(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> list[str]:
        if await self.is_microsoft_image(id):
            return [MICROSOFT_ARTIFACT_REGISTRY]

        owner = id.split("/")[0]
        return [owner] if owner else []

    async def is_microsoft_image(self, id: str) -> bool:
        """Return whether the Microsoft Artifact Registry lists Microsoft as the image publisher."""
        return await self._cached(f"mar:{id}", lambda: self._is_microsoft_image(id))

    async def _is_microsoft_image(self, id: str) -> bool:
        entry: Optional[dict[str, Any]] = await self._get_json(
            f"/api/v1/catalog/{id}/details", params={"reg": "mar"}
        )
        return (entry or {}).get("publisher") == "Microsoft"
