"""GitHub credentials for the App, its installation and a static user token.

Tokens are cached for less time than they are valid, so a token handed out
by the cache can always be used before GitHub rejects it as expired.
"""

import base64
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from trustgate.cache import ApplicationCache
from trustgate.config import GitHubOptions
from trustgate.errors import CredentialsError
from trustgate.http import HttpClient
from trustgate.models import AuthenticationScheme, Credentials

logger = logging.getLogger(__name__)

TOKEN_LIFETIME = timedelta(minutes=10)
TOKEN_SKEW = timedelta(minutes=1)

# Refresh before the token expires or clock skew makes GitHub reject it
CACHE_EXPIRATION = TOKEN_LIFETIME - TOKEN_SKEW
CACHE_TAGS = ("all", "github")

APP_CACHE_KEY = "github:app-credentials"


def _b64url(data: Union[str, bytes]) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


@dataclass(frozen=True)
class AppPrincipal:
    """Authenticate as the GitHub App itself."""


@dataclass(frozen=True)
class InstallationPrincipal:
    """Authenticate as an installation of the GitHub App."""

    installation_id: int


@dataclass(frozen=True)
class UserPrincipal:
    """Authenticate with the configured personal access token."""


Principal = Union[AppPrincipal, InstallationPrincipal, UserPrincipal]


class PrivateKeyProvider:
    """Long-lived holder of the App's PEM-encoded RSA private key.

    Only the key material is kept. Every call to load() returns a new key
    object, so a signing operation never reuses a key that another
    operation has finished with.
    """

    def __init__(self, pem: str) -> None:
        self._pem = pem.encode("utf-8") if pem else b""

    def load(self) -> rsa.RSAPrivateKey:
        """Load a fresh RSA private key object.

        Raises:
            CredentialsError: If no key is configured or it is not an RSA key.
        """
        if not self._pem.strip():
            raise CredentialsError("No GitHub App private key is configured")

        try:
            key = serialization.load_pem_private_key(self._pem, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CredentialsError(f"The GitHub App private key is invalid: {e}") from e

        if not isinstance(key, rsa.RSAPrivateKey):
            raise CredentialsError("The GitHub App private key is not an RSA key")

        return key


class CredentialStore(ABC):
    """Source of credentials for one principal."""

    @abstractmethod
    async def get_credentials(self) -> Credentials:
        ...


class AppCredentialStore(CredentialStore):
    """Creates JSON Web Tokens that authenticate as the GitHub App.

    See https://docs.github.com/apps/creating-github-apps/authenticating-with-a-github-app/generating-a-json-web-token-jwt-for-a-github-app
    """

    def __init__(
        self,
        app_id: str,
        key_provider: PrivateKeyProvider,
        cache: ApplicationCache,
    ) -> None:
        self.app_id = app_id
        self.key_provider = key_provider
        self.cache = cache

    async def get_credentials(self) -> Credentials:
        async def create() -> str:
            return self.create_jwt()

        token = await self.cache.get_or_create(
            APP_CACHE_KEY,
            create,
            CACHE_EXPIRATION,
            CACHE_TAGS,
        )
        return Credentials(token=token, scheme=AuthenticationScheme.BEARER)

    def create_jwt(self) -> str:
        """Create and sign a new App JWT.

        Raises:
            CredentialsError: If the App id or private key is not usable.
        """
        if not self.app_id:
            raise CredentialsError("No GitHub App id is configured")

        now = self.cache.clock()
        header = {"alg": "RS256", "typ": "JWT"}
        claims = {
            "iat": int((now - TOKEN_SKEW).timestamp()),
            "exp": int((now + TOKEN_LIFETIME).timestamp()),
            "iss": self.app_id,
        }

        signing_input = ".".join(
            [
                _b64url(json.dumps(header, separators=(",", ":"))),
                _b64url(json.dumps(claims, separators=(",", ":"))),
            ]
        )

        key = self.key_provider.load()
        signature = key.sign(signing_input.encode("ascii"), padding.PKCS1v15(), hashes.SHA256())

        logger.debug("Created JWT for GitHub App %s expiring at %d", self.app_id, claims["exp"])
        return f"{signing_input}.{_b64url(signature)}"


class InstallationCredentialStore(HttpClient, CredentialStore):
    """Exchanges the App JWT for an installation access token.

    See https://docs.github.com/rest/apps/apps#create-an-installation-access-token-for-an-app
    """

    def __init__(
        self,
        installation_id: int,
        app_store: AppCredentialStore,
        cache: ApplicationCache,
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(base_url=api_url, timeout=timeout)
        self.installation_id = installation_id
        self.app_store = app_store
        self.cache = cache

    @property
    def cache_key(self) -> str:
        return f"github:installation-credentials:{self.installation_id}"

    async def get_credentials(self) -> Credentials:
        token = await self.cache.get_or_create(
            self.cache_key,
            self._create_installation_token,
            CACHE_EXPIRATION,
            CACHE_TAGS,
        )
        return Credentials(token=token, scheme=AuthenticationScheme.OAUTH)

    async def _create_installation_token(self) -> str:
        app_credentials = await self.app_store.get_credentials()

        url = self._url(f"/app/installations/{self.installation_id}/access_tokens")
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": app_credentials.authorization_header or "",
        }

        session = await self._get_session()
        async with session.post(url, headers=headers) as response:
            if response.status in (401, 403, 404):
                raise CredentialsError(
                    f"GitHub refused to create a token for installation "
                    f"{self.installation_id} (HTTP {response.status})"
                )
            response.raise_for_status()
            data = await response.json(content_type=None)

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise CredentialsError(
                f"GitHub did not return a token for installation {self.installation_id}"
            )

        logger.info("Created access token for installation %s", self.installation_id)
        return token


class UserCredentialStore(CredentialStore):
    """Wraps a static personal access token."""

    def __init__(self, access_token: str = "") -> None:
        self._access_token = access_token

    async def get_credentials(self) -> Credentials:
        if self._access_token:
            return Credentials(token=self._access_token, scheme=AuthenticationScheme.OAUTH)
        return Credentials.anonymous()


class CredentialProvider:
    """Produces credentials for the App, an installation or the user.

    Installation stores are created on first use and share the App store,
    so every installation token is minted from the same cached JWT.
    """

    def __init__(
        self,
        options: GitHubOptions,
        cache: ApplicationCache,
        timeout: float = 10.0,
    ) -> None:
        self.options = options
        self.cache = cache
        self.timeout = timeout
        self.app = AppCredentialStore(
            options.app_id,
            PrivateKeyProvider(options.private_key),
            cache,
        )
        self.user = UserCredentialStore(options.access_token)
        self._installations: dict[int, InstallationCredentialStore] = {}

    def installation(self, installation_id: Optional[int] = None) -> InstallationCredentialStore:
        """Get the credential store for an installation.

        Args:
            installation_id: Installation id. Defaults to the configured one.

        Raises:
            CredentialsError: If no installation id is given or configured.
        """
        if installation_id is None:
            installation_id = self.options.installation_id
        if installation_id is None:
            raise CredentialsError("No GitHub App installation id is configured")

        store = self._installations.get(installation_id)
        if store is None:
            store = InstallationCredentialStore(
                installation_id,
                self.app,
                self.cache,
                api_url=self.options.api_url,
                timeout=self.timeout,
            )
            self._installations[installation_id] = store
        return store

    async def get_credentials(self, principal: Principal) -> Credentials:
        """Get credentials for a principal.

        Args:
            principal: AppPrincipal, InstallationPrincipal or UserPrincipal.

        Returns:
            Bearer credentials for the App, OAuth credentials for an
            installation, or the user's token (anonymous if unset).
        """
        if isinstance(principal, AppPrincipal):
            return await self.app.get_credentials()
        if isinstance(principal, InstallationPrincipal):
            return await self.installation(principal.installation_id).get_credentials()
        if isinstance(principal, UserPrincipal):
            return await self.user.get_credentials()
        raise TypeError(f"Unsupported principal {principal!r}")

    async def close(self) -> None:
        for store in self._installations.values():
            await store.close()

    async def __aenter__(self) -> "CredentialProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
