"""Pytest configuration and fixtures."""

import logging
from datetime import UTC, datetime, timedelta

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from trustgate.cache import ApplicationCache
from trustgate.models import RepositoryId


class FakeClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    """Return a clock fixed at a Wednesday that is not a public holiday."""
    return FakeClock(datetime(2025, 6, 11, 9, 30, tzinfo=UTC))


@pytest.fixture
def cache(clock: FakeClock) -> ApplicationCache:
    """Return an empty cache driven by the fake clock."""
    return ApplicationCache(clock=clock)


@pytest.fixture
def repository() -> RepositoryId:
    return RepositoryId("octo-org", "octo-app")


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    """Return a PEM-encoded RSA private key for signing App JWTs."""
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(autouse=True)
def restore_log_level():
    """Undo log level changes made by CLI commands."""
    logger = logging.getLogger("trustgate")
    level = logger.level
    yield
    logger.setLevel(level)
