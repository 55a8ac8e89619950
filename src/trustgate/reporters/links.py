"""Links to the public pages of dependencies."""

from typing import NamedTuple

from trustgate.models import DependencyEcosystem
from trustgate.registries.docker import MICROSOFT_ARTIFACT_REGISTRY


class PackageLink(NamedTuple):
    """Display name of an ecosystem and the URL of a page within it."""

    name: str
    url: str


def _url(hostname: str, path: str) -> str:
    return f"https://{hostname}/{path.lstrip('/')}"


def get_package_link(ecosystem: DependencyEcosystem, id: str, version: str) -> PackageLink:
    """Return the link to the page of a dependency version.

    Examples:
        >>> get_package_link(DependencyEcosystem.NPM, "react", "18.2.0").url
        'https://www.npmjs.com/package/react/v/18.2.0'
    """
    if ecosystem is DependencyEcosystem.DOCKER:
        if id.startswith("dotnet/"):
            return PackageLink("Docker", _url(MICROSOFT_ARTIFACT_REGISTRY, f"artifact/mar/{id}/tags"))
        return PackageLink("Docker", _url("hub.docker.com", f"r/{id}/tags"))
    if ecosystem is DependencyEcosystem.GITHUB_ACTIONS:
        return PackageLink("GitHub Actions", _url("github.com", id))
    if ecosystem is DependencyEcosystem.GITHUB_RELEASE:
        return PackageLink("GitHub", _url("github.com", f"{id}/releases/tag/{version}"))
    if ecosystem is DependencyEcosystem.NPM:
        return PackageLink("npm", _url("www.npmjs.com", f"package/{id}/v/{version}"))
    if ecosystem is DependencyEcosystem.NUGET:
        return PackageLink("NuGet", _url("www.nuget.org", f"packages/{id}/{version}"))
    if ecosystem is DependencyEcosystem.PIP:
        return PackageLink("PyPI", _url("pypi.org", f"project/{id}/{version}/"))
    if ecosystem is DependencyEcosystem.RUBY:
        return PackageLink("Ruby", _url("rubygems.org", f"gems/{id}/versions/{version}"))
    return PackageLink("Git Submodule", "")
