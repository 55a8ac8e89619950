"""Git submodule registry."""

from typing import Any

from trustgate.errors import NotFoundError
from trustgate.models import DependencyEcosystem, RepositoryId
from trustgate.registries.base import CACHE_EXPIRATION
from trustgate.registries.github import GitHubPackageRegistry

CACHE_TAGS = ("all", "github-submodule")


class GitSubmodulePackageRegistry(GitHubPackageRegistry):
    """Registry for git submodules of the repository being evaluated.

    The id is the submodule's path. Its owner is the submodule's git URL
    without the trailing repository name, for example
    "https://github.com/owner" for "https://github.com/owner/repo.git".
    """

    @property
    def ecosystem(self) -> DependencyEcosystem:
        return DependencyEcosystem.SUBMODULES

    async def get_package_owners(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> list[str]:
        items = await self.cache.get_or_create(
            f"git-submodule:{repository.owner}/{repository.name}:{id}",
            lambda: self._get_contents(repository, id),
            CACHE_EXPIRATION,
            CACHE_TAGS,
        )

        if len(items) == 1 and items[0].get("submodule_git_url"):
            url: str = items[0]["submodule_git_url"]
            return ["/".join(url.split("/")[:-1])]

        return []

    async def _get_contents(self, repository: RepositoryId, path: str) -> list[dict[str, Any]]:
        try:
            return await self.client.get_contents(repository.owner, repository.name, path)
        except NotFoundError:
            return []
