from trustgate.models import DependencyEcosystem, RepositoryId
from trustgate.registries.github import GitHubPackageRegistry, cached_exists, parse_repository_slug

CACHE_TAGS = ("all", "github-release")


class GitHubReleasePackageRegistry(GitHubPackageRegistry):
    """Registry for dependencies on the releases of a GitHub repository.

    The id is the "owner/name" of the repository and the version is the
    release's tag. The owner is the repository owner if the release exists.
    """

    @property
    def ecosystem(self) -> DependencyEcosystem:
        return DependencyEcosystem.GITHUB_RELEASE

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

        exists = await cached_exists(
            self.cache,
            f"{owner}/{name}@release:{version}",
            lambda: self.client.get_release_by_tag(owner, name, version),
            CACHE_TAGS,
        )

        return [owner] if exists else []
