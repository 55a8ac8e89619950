"""Core data models for trustgate.

This module defines the value types shared by the credential, registry,
trust store and deployment rule components.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class DependencyEcosystem(str, Enum):
    """Package distribution systems that trustgate can evaluate.

    Each member maps to exactly one package registry implementation.
    """

    NPM = "npm"
    PIP = "pip"
    RUBY = "ruby"
    NUGET = "nuget"
    DOCKER = "docker"
    GITHUB_ACTIONS = "github-actions"
    GITHUB_RELEASE = "github-release"
    SUBMODULES = "submodules"

    @classmethod
    def parse(cls, value: str) -> "DependencyEcosystem":
        """Parse an ecosystem from its value or member name.

        Args:
            value: A value such as "github-actions" or a name such as "NuGet".

        Returns:
            The matching DependencyEcosystem.

        Raises:
            ValueError: If the value does not name a known ecosystem.
        """
        normalized = value.strip().lower().replace("_", "-")
        for member in cls:
            if normalized in (member.value, member.name.lower().replace("_", "-")):
                return member
        raise ValueError(f"Unknown dependency ecosystem '{value}'")


@dataclass(frozen=True)
class RepositoryId:
    """A GitHub repository identified by its owner login and name.

    Attributes:
        owner: Login of the repository owner.
        name: Name of the repository.
    """

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, slug: str) -> "RepositoryId":
        """Create a RepositoryId from an "owner/name" slug.

        Raises:
            ValueError: If the slug is not exactly two non-empty segments.
        """
        parts = slug.split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"'{slug}' is not a repository in the form owner/name")
        return cls(owner=parts[0], name=parts[1])

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class PackageReference:
    """Immutable reference to a specific version of a dependency.

    Attributes:
        ecosystem: The ecosystem the dependency belongs to.
        id: Ecosystem-specific identifier (e.g. "actions/checkout", "requests").
        version: Version string (e.g. "v3", "2.31.0").
    """

    ecosystem: DependencyEcosystem
    id: str
    version: str


@dataclass
class TrustedDependency:
    """A dependency version recorded in the trust store.

    Attributes:
        id: Dependency identifier.
        version: Dependency version.
        trusted_at: When an operator last trusted the dependency.
    """

    id: str
    version: str
    trusted_at: Optional[datetime] = None


class AuthenticationScheme(str, Enum):
    """How a credential token is presented to GitHub."""

    BEARER = "bearer"
    OAUTH = "oauth"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class Credentials:
    """A short-lived credential for calling GitHub.

    Credentials are never persisted. Only the token string is cached, and
    always for less time than the token is valid.

    Attributes:
        token: The token, or an empty string for anonymous access.
        scheme: How the token is sent in the Authorization header.
    """

    token: str
    scheme: AuthenticationScheme = AuthenticationScheme.OAUTH

    @classmethod
    def anonymous(cls) -> "Credentials":
        return cls(token="", scheme=AuthenticationScheme.ANONYMOUS)

    @property
    def authorization_header(self) -> Optional[str]:
        """Return the value of the Authorization header, if any."""
        if self.scheme is AuthenticationScheme.ANONYMOUS or not self.token:
            return None
        if self.scheme is AuthenticationScheme.BEARER:
            return f"Bearer {self.token}"
        return f"token {self.token}"

    def __repr__(self) -> str:
        return f"Credentials(scheme={self.scheme.value!r}, token=***)"


@dataclass
class CacheEntry:
    """A value held by the application cache.

    Attributes:
        key: Cache key.
        value: Cached value.
        expires_at: Absolute expiration time (UTC).
        tags: Tags used for bulk eviction.
    """

    key: str
    value: Any
    expires_at: datetime
    tags: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class RuleVerdict:
    """Outcome of evaluating a deployment rule chain.

    Attributes:
        approved: True if every enabled rule approved the deployment.
        denied_rule_name: Name of the first rule that denied it, if any.
    """

    approved: bool
    denied_rule_name: Optional[str] = None


DEPLOYMENT_PROTECTION_RULE = "deployment_protection_rule"


@dataclass
class WebhookEvent:
    """A normalized GitHub webhook event.

    Attributes:
        event: Value of the X-GitHub-Event header (e.g. "check_suite").
        action: The "action" field of the payload, if present.
        payload: The parsed JSON payload.
    """

    event: str
    action: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_deployment_protection_rule_requested(self) -> bool:
        return self.event == DEPLOYMENT_PROTECTION_RULE and self.action == "requested"
