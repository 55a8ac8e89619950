"""Package registries for resolving the owners of dependencies.

This module provides one registry per dependency ecosystem, and a factory
that builds the complete set.
"""

from collections.abc import Mapping

from trustgate.cache import ApplicationCache
from trustgate.github import GitHubClient
from trustgate.models import DependencyEcosystem
from trustgate.registries.base import PackageRegistry
from trustgate.registries.docker import DockerPackageRegistry
from trustgate.registries.github_actions import GitHubActionsPackageRegistry
from trustgate.registries.github_release import GitHubReleasePackageRegistry
from trustgate.registries.npm import NpmPackageRegistry
from trustgate.registries.nuget import NuGetPackageRegistry
from trustgate.registries.pypi import PyPIPackageRegistry
from trustgate.registries.rubygems import RubyGemsPackageRegistry
from trustgate.registries.submodules import GitSubmodulePackageRegistry


def create_registries(
    cache: ApplicationCache,
    github: GitHubClient,
    timeout: float = 10.0,
) -> dict[DependencyEcosystem, PackageRegistry]:
    """Create a registry for every dependency ecosystem.

    Args:
        cache: Application cache shared by the registries.
        github: Authenticated client for the GitHub-backed registries.
        timeout: Total timeout in seconds for registry HTTP requests.

    Returns:
        Mapping of every DependencyEcosystem to its registry.
    """
    registries: list[PackageRegistry] = [
        NpmPackageRegistry(cache, timeout=timeout),
        PyPIPackageRegistry(cache, timeout=timeout),
        RubyGemsPackageRegistry(cache, timeout=timeout),
        NuGetPackageRegistry(cache, timeout=timeout),
        DockerPackageRegistry(cache, timeout=timeout),
        GitHubActionsPackageRegistry(github, cache),
        GitHubReleasePackageRegistry(github, cache),
        GitSubmodulePackageRegistry(github, cache),
    ]

    return {registry.ecosystem: registry for registry in registries}


def get_registry(
    registries: Mapping[DependencyEcosystem, PackageRegistry],
    ecosystem: DependencyEcosystem,
) -> PackageRegistry:
    """Get the registry for an ecosystem.

    Raises:
        KeyError: If no registry handles the ecosystem.
    """
    try:
        return registries[ecosystem]
    except KeyError:
        raise KeyError(f"No package registry for ecosystem {ecosystem.value!r}") from None


__all__ = [
    "PackageRegistry",
    "DockerPackageRegistry",
    "GitHubActionsPackageRegistry",
    "GitHubReleasePackageRegistry",
    "GitSubmodulePackageRegistry",
    "NpmPackageRegistry",
    "NuGetPackageRegistry",
    "PyPIPackageRegistry",
    "RubyGemsPackageRegistry",
    "create_registries",
    "get_registry",
]
