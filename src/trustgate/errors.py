"""Exceptions raised by trustgate."""

from typing import Any, Optional


class TrustgateError(Exception):
    """Base class for trustgate errors."""


class NotFoundError(TrustgateError):
    """A remote resource does not exist (HTTP 404).

    Registries convert this into "no owner" rather than letting it escape.
    """

    def __init__(self, url: str) -> None:
        super().__init__(f"Resource not found: {url}")
        self.url = url


class CredentialsError(TrustgateError):
    """GitHub credentials could not be created.

    Raised for a missing or invalid App private key, or when GitHub refuses
    to issue an installation token. This is a configuration problem and is
    never retried or cached.
    """


class GraphQLError(TrustgateError):
    """A GitHub GraphQL response contained errors."""

    def __init__(self, errors: list[dict[str, Any]], query: Optional[str] = None) -> None:
        messages = "; ".join(str(e.get("message", e)) for e in errors) or "unknown error"
        super().__init__(f"GraphQL query failed: {messages}")
        self.errors = errors
        self.query = query
