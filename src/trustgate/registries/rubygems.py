"""RubyGems registry."""

from typing import Any, Optional
from urllib.parse import quote

from trustgate.cache import ApplicationCache
from trustgate.models import DependencyEcosystem, RepositoryId
from trustgate.registries.http import HttpRegistry


class RubyGemsPackageRegistry(HttpRegistry):
    """Registry for gems published to rubygems.org.

    Owners are the gem's owner handles, oldest account first.
    """

    cache_tags = ("all", "ruby")

    def __init__(
        self,
        cache: ApplicationCache,
        base_url: str = "https://rubygems.org",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(cache, base_url, timeout)

    @property
    def ecosystem(self) -> DependencyEcosystem:
        return DependencyEcosystem.RUBY

    async def get_package_owners(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> list[str]:
        owners = await self._cached(f"rubygems:{id}", lambda: self._get_owners(id))

        if not owners:
            return []

        ordered = sorted(
            (owner for owner in owners if (owner.get("handle") or "").strip()),
            key=lambda owner: owner.get("id") or 0,
        )

        handles: list[str] = []
        seen: set[str] = set()
        for owner in ordered:
            handle = owner["handle"]
            if handle.casefold() not in seen:
                seen.add(handle.casefold())
                handles.append(handle)

        return handles

    async def _get_owners(self, id: str) -> Optional[list[dict[str, Any]]]:
        # https://guides.rubygems.org/rubygems-org-api/#owner-methods
        return await self._get_json(f"/api/v1/gems/{quote(id, safe='')}/owners.json")
