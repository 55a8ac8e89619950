import pytest

from trustgate.github import GitHubClient
from trustgate.models import DependencyEcosystem
from trustgate.registries import (
    GitHubActionsPackageRegistry,
    NuGetPackageRegistry,
    create_registries,
    get_registry,
)


@pytest.fixture
def registries(cache):
    return create_registries(cache, GitHubClient(), timeout=5.0)


def test_every_ecosystem_has_a_registry(registries):
    assert set(registries) == set(DependencyEcosystem)

    for ecosystem, registry in registries.items():
        assert registry.ecosystem is ecosystem


def test_get_registry(registries):
    assert isinstance(get_registry(registries, DependencyEcosystem.NUGET), NuGetPackageRegistry)
    assert isinstance(
        get_registry(registries, DependencyEcosystem.GITHUB_ACTIONS),
        GitHubActionsPackageRegistry,
    )


def test_timeout_is_applied(registries):
    assert get_registry(registries, DependencyEcosystem.NUGET).timeout == 5.0


def test_missing_registry():
    with pytest.raises(KeyError, match="github-release"):
        get_registry({}, DependencyEcosystem.GITHUB_RELEASE)
