"""Base interface for package registries.

Registries resolve who published a specific version of a dependency, and
optionally whether the version carries a provenance attestation, using the
public API of the dependency's ecosystem.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import timedelta
from typing import Optional

from trustgate.models import DependencyEcosystem, RepositoryId

CACHE_EXPIRATION = timedelta(hours=1)


class PackageRegistry(ABC):
    """Abstract base class for package registries.

    An empty owner list means the owner could not be established, and the
    dependency must be treated as untrusted. Registries never guess.
    """

    @property
    @abstractmethod
    def ecosystem(self) -> DependencyEcosystem:
        """Return the ecosystem this registry handles."""
        ...

    @abstractmethod
    async def get_package_owners(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> list[str]:
        """Resolve the owners of a package version.

        Args:
            repository: Repository whose event is being evaluated.
            id: Ecosystem-specific package identifier.
            version: Package version.

        Returns:
            Owner names as reported by the registry (possibly empty).
        """
        ...

    async def get_package_attestation(
        self,
        repository: RepositoryId,
        id: str,
        version: str,
    ) -> Optional[bool]:
        """Return whether the package version has a trusted attestation.

        Returns:
            None if no attestation data is available, False if an attestation
            exists but does not prove the expected provenance, True otherwise.
        """
        return None

    async def are_owners_trusted(self, owners: Sequence[str]) -> bool:
        """Return whether the registry itself vouches for the owners.

        By default registries vouch for nobody.
        """
        return False

    async def close(self) -> None:
        """Release any resources held by the registry."""
