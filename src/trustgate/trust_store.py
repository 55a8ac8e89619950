"""Durable store of dependency versions trusted by an operator.

Dependencies whose owners cannot be established automatically can be trusted
explicitly for a specific version. Trust is keyed case-insensitively by
ecosystem, id and version, so trusting the same dependency again only updates
when it was trusted.
"""

import asyncio
import contextlib
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

from trustgate.cache import Clock, utc_now
from trustgate.models import DependencyEcosystem, TrustedDependency

logger = logging.getLogger(__name__)


def get_keys(ecosystem: DependencyEcosystem, id: str, version: str) -> tuple[str, str]:
    """Return the (partition, row) keys of a dependency version.

    Examples:
        >>> get_keys(DependencyEcosystem.GITHUB_ACTIONS, "actions/checkout", "v4")
        ('GITHUB-ACTIONS', 'ACTIONS~CHECKOUT@V4')
    """
    partition = ecosystem.value.upper()
    row = f"{id.upper().replace('/', '~')}@{version.upper()}"
    return partition, row


class TrustStore(ABC):
    """Abstract base class for trust stores."""

    @abstractmethod
    async def trust(self, ecosystem: DependencyEcosystem, id: str, version: str) -> None:
        """Trust a dependency version. Trusting it again updates when it was trusted."""
        ...

    @abstractmethod
    async def distrust(self, ecosystem: DependencyEcosystem, id: str, version: str) -> None:
        """Remove trust for a dependency version, if present."""
        ...

    @abstractmethod
    async def is_trusted(self, ecosystem: DependencyEcosystem, id: str, version: str) -> bool:
        """Return whether a dependency version is trusted."""
        ...

    @abstractmethod
    async def get_trust(self, ecosystem: DependencyEcosystem) -> list[TrustedDependency]:
        """List the trusted dependency versions of an ecosystem in no particular order."""
        ...

    @abstractmethod
    async def distrust_all(self) -> int:
        """Remove trust for every dependency.

        Returns:
            Number of entries removed.
        """
        ...


class SqliteTrustStore(TrustStore):
    """Trust store persisted in a SQLite database.

    Every operation runs a single short transaction on a worker thread, so
    the event loop is never blocked by disk I/O.

    Attributes:
        db_path: Path to the SQLite database file.
        clock: Callable returning the current UTC time.
    """

    def __init__(self, db_path: Path, clock: Optional[Clock] = None) -> None:
        """Initialize the trust store, creating the database if needed.

        Args:
            db_path: Path to the SQLite database.
            clock: Optional clock used for the time dependencies are trusted.
        """
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = db_path
        self.clock = clock or utc_now
        self._init_database()

    @contextlib.contextmanager
    def _connect(self):
        """Open a connection, committing on success and always closing it."""
        conn = sqlite3.connect(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_database(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS trust_store (
                    ecosystem TEXT NOT NULL,
                    dependency_key TEXT NOT NULL,
                    dependency_id TEXT NOT NULL,
                    dependency_version TEXT NOT NULL,
                    trusted_at TEXT NOT NULL,
                    PRIMARY KEY (ecosystem, dependency_key)
                )
                """
            )

    async def trust(self, ecosystem: DependencyEcosystem, id: str, version: str) -> None:
        await asyncio.to_thread(self._trust, ecosystem, id, version)
        logger.info("Trusted %s %s@%s", ecosystem.value, id, version)

    async def distrust(self, ecosystem: DependencyEcosystem, id: str, version: str) -> None:
        await asyncio.to_thread(self._distrust, ecosystem, id, version)
        logger.info("Distrusted %s %s@%s", ecosystem.value, id, version)

    async def is_trusted(self, ecosystem: DependencyEcosystem, id: str, version: str) -> bool:
        return await asyncio.to_thread(self._is_trusted, ecosystem, id, version)

    async def get_trust(self, ecosystem: DependencyEcosystem) -> list[TrustedDependency]:
        return await asyncio.to_thread(self._get_trust, ecosystem)

    async def distrust_all(self) -> int:
        count = await asyncio.to_thread(self._distrust_all)
        logger.info("Distrusted all %d dependencies", count)
        return count

    def _trust(self, ecosystem: DependencyEcosystem, id: str, version: str) -> None:
        partition, row = get_keys(ecosystem, id, version)
        trusted_at = self.clock().isoformat()

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trust_store
                (ecosystem, dependency_key, dependency_id, dependency_version, trusted_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (ecosystem, dependency_key) DO UPDATE SET
                    dependency_id = excluded.dependency_id,
                    dependency_version = excluded.dependency_version,
                    trusted_at = excluded.trusted_at
                """,
                (partition, row, id, version, trusted_at),
            )

    def _distrust(self, ecosystem: DependencyEcosystem, id: str, version: str) -> None:
        partition, row = get_keys(ecosystem, id, version)

        with self._connect() as conn:
            conn.execute(
                "DELETE FROM trust_store WHERE ecosystem = ? AND dependency_key = ?",
                (partition, row),
            )

    def _is_trusted(self, ecosystem: DependencyEcosystem, id: str, version: str) -> bool:
        partition, row = get_keys(ecosystem, id, version)

        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT 1 FROM trust_store WHERE ecosystem = ? AND dependency_key = ?",
                (partition, row),
            )
            return cursor.fetchone() is not None

    def _get_trust(self, ecosystem: DependencyEcosystem) -> list[TrustedDependency]:
        partition = ecosystem.value.upper()

        with self._connect() as conn:
            cursor = conn.execute(
                """
                SELECT dependency_id, dependency_version, trusted_at
                FROM trust_store
                WHERE ecosystem = ?
                """,
                (partition,),
            )
            rows = cursor.fetchall()

        return [
            TrustedDependency(
                id=id,
                version=version,
                trusted_at=datetime.fromisoformat(trusted_at),
            )
            for id, version, trusted_at in rows
        ]

    def _distrust_all(self) -> int:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM trust_store")
            return cursor.rowcount
