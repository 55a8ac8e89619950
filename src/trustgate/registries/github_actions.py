"""GitHub Actions registry.

An action is owned by the owner of its repository, provided the referenced
tag or commit exists in that repository.
"""

from trustgate.models import DependencyEcosystem, RepositoryId
from trustgate.registries.github import GitHubPackageRegistry, cached_exists, parse_repository_slug

CACHE_TAGS = ("all", "github-actions")


def candidate_tags(version: str) -> list[str]:
    """Return the tag names to look for, most likely first.

    Action tags are usually prefixed with "v", but the version extracted from
    an update is often just the number, so the prefixed tag is tried first.
    """
    if version.startswith("v"):
        return [version, version[1:]]
    return [f"v{version}", version]


class GitHubActionsPackageRegistry(GitHubPackageRegistry):
    """Registry for GitHub Actions referenced as "owner/name"."""

    @property
    def ecosystem(self) -> DependencyEcosystem:
        return DependencyEcosystem.GITHUB_ACTIONS

    async def get_package_owners(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> list[str]:
        slug = parse_repository_slug(id)

        if slug is None:
            return []

        owner, name = slug

        for tag in candidate_tags(version):
            if await cached_exists(
                self.cache,
                f"{owner}/{name}@ref:{tag}",
                lambda tag=tag: self.client.get_reference(owner, name, f"tags/{tag}"),
                CACHE_TAGS,
            ):
                return [owner]

        # Not a tag, so maybe a pinned commit
        if await cached_exists(
            self.cache,
            f"{owner}/{name}@commit:{version}",
            lambda: self.client.get_commit(owner, name, version),
            CACHE_TAGS,
        ):
            return [owner]

        return []
