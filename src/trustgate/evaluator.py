"""Decide whether dependency updates come from trusted sources.

A dependency version is trusted if any of the following hold, checked in
order:

1. Its id matches one of the trusted dependency patterns.
2. Publishers are configured for its ecosystem, and the package registry
   reports an owner that is one of them or that the registry itself vouches
   for.
3. The package registry has a provenance attestation for the version.
4. An operator has trusted the exact version in the trust store.
"""

import asyncio
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional

from trustgate.config import TrustedEntitiesOptions
from trustgate.models import DependencyEcosystem, PackageReference, RepositoryId
from trustgate.registries import get_registry
from trustgate.registries.base import PackageRegistry
from trustgate.trust_store import TrustStore

logger = logging.getLogger(__name__)

REASON_DEPENDENCY = "dependency"
REASON_PUBLISHER = "publisher"
REASON_REGISTRY = "registry"
REASON_ATTESTATION = "attestation"
REASON_TRUST_STORE = "trust-store"


@dataclass
class TrustDecision:
    """The verdict for one dependency version.

    Attributes:
        reference: The dependency that was evaluated.
        trusted: Whether the dependency is trusted.
        reason: Which check trusted the dependency, if any.
        owners: Owners reported by the package registry, if it was asked.
        attestation: The registry's attestation verdict, if it was asked.
        error: Description of the failure, if evaluation failed.
    """

    reference: PackageReference
    trusted: bool
    reason: Optional[str] = None
    owners: list[str] = field(default_factory=list)
    attestation: Optional[bool] = None
    error: Optional[str] = None


class TrustEvaluator:
    """Evaluates dependency versions against registries and the trust store.

    Attributes:
        registries: Package registry for every ecosystem.
        trust_store: Store of operator-approved dependency versions.
        trusted_entities: Statically trusted dependencies and publishers.
    """

    def __init__(
        self,
        registries: Mapping[DependencyEcosystem, PackageRegistry],
        trust_store: TrustStore,
        trusted_entities: Optional[TrustedEntitiesOptions] = None,
    ) -> None:
        self.registries = registries
        self.trust_store = trust_store
        self.trusted_entities = trusted_entities or TrustedEntitiesOptions()
        self._patterns = [re.compile(p) for p in self.trusted_entities.dependencies]

    def is_trusted_by_name(self, id: str) -> bool:
        return any(pattern.search(id) for pattern in self._patterns)

    async def evaluate(self, repository: RepositoryId, reference: PackageReference) -> TrustDecision:
        """Evaluate a single dependency version.

        Args:
            repository: Repository the update was made to.
            reference: The dependency version to evaluate.

        Returns:
            The TrustDecision for the dependency.

        Raises:
            aiohttp.ClientError: If a registry could not be queried.
        """
        ecosystem, id, version = reference.ecosystem, reference.id, reference.version

        if self.is_trusted_by_name(id):
            logger.info("Dependency %s is trusted by name for %s", id, repository)
            return TrustDecision(reference, True, REASON_DEPENDENCY)

        if not version.strip():
            logger.info("Dependency %s has no version and is not trusted", id)
            return TrustDecision(reference, False)

        registry = get_registry(self.registries, ecosystem)
        owners: list[str] = []

        publishers = self.trusted_entities.publishers.get(ecosystem) or []
        if publishers:
            owners = await registry.get_package_owners(repository, id, version)

            if any(owner in publishers for owner in owners):
                logger.info("Dependency %s@%s is published by a trusted owner", id, version)
                return TrustDecision(reference, True, REASON_PUBLISHER, owners)

            if await registry.are_owners_trusted(owners):
                logger.info(
                    "Dependency %s@%s is published by an owner trusted by the %s registry",
                    id,
                    version,
                    ecosystem.value,
                )
                return TrustDecision(reference, True, REASON_REGISTRY, owners)

            logger.info("Dependency %s@%s is not published by a trusted owner", id, version)

        attestation = await registry.get_package_attestation(repository, id, version)
        if attestation is True:
            logger.info("Dependency %s@%s has a trusted attestation", id, version)
            return TrustDecision(reference, True, REASON_ATTESTATION, owners, attestation)

        if await self.trust_store.is_trusted(ecosystem, id, version):
            logger.info("Dependency %s@%s is trusted by the trust store", id, version)
            return TrustDecision(reference, True, REASON_TRUST_STORE, owners, attestation)

        logger.info("Dependency %s@%s is not trusted", id, version)
        return TrustDecision(reference, False, None, owners, attestation)

    async def is_trusted(self, repository: RepositoryId, reference: PackageReference) -> bool:
        """Return whether a dependency version is trusted.

        Raises:
            aiohttp.ClientError: If a registry could not be queried.
        """
        decision = await self.evaluate(repository, reference)
        return decision.trusted

    async def evaluate_batch(
        self,
        repository: RepositoryId,
        references: Sequence[PackageReference],
    ) -> list[TrustDecision]:
        """Evaluate several dependency versions concurrently.

        A dependency whose evaluation fails is reported as untrusted rather
        than failing the whole batch.

        Returns:
            A TrustDecision per reference, in the same order.
        """
        results = await asyncio.gather(
            *(self.evaluate(repository, reference) for reference in references),
            return_exceptions=True,
        )

        decisions: list[TrustDecision] = []
        for reference, result in zip(references, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.warning(
                    "Failed to evaluate trust for %s %s@%s: %s",
                    reference.ecosystem.value,
                    reference.id,
                    reference.version,
                    result,
                )
                decisions.append(TrustDecision(reference, False, error=str(result) or type(result).__name__))
            else:
                decisions.append(result)

        return decisions
