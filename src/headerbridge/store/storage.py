"""Durable storage for the serialized dataset state."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiosqlite

from ..config import settings
from ..exceptions import PersistenceError

logger = logging.getLogger(__name__)

# Well-known key holding the full dataset state
STATE_KEY = "headerbridge_data"


class StateStorage(ABC):
    """Key/blob storage used by the dataset store."""

    async def initialize(self):
        """Prepare the backend."""
        pass

    @abstractmethod
    async def read(self, key: str) -> Optional[str]:
        """Return the payload stored under ``key``, or None."""
        pass

    @abstractmethod
    async def write(self, key: str, payload: str) -> None:
        """Overwrite the payload stored under ``key``."""
        pass

    @abstractmethod
    async def clear(self, key: str) -> None:
        """Remove the payload stored under ``key``."""
        pass

    async def close(self):
        """Release backend resources."""
        pass


class InMemoryStateStorage(StateStorage):
    """Process-local storage, for tests and throwaway sessions."""

    def __init__(self):
        self.blobs: dict[str, str] = {}

    async def read(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    async def write(self, key: str, payload: str) -> None:
        self.blobs[key] = payload

    async def clear(self, key: str) -> None:
        self.blobs.pop(key, None)


class SQLiteStateStorage(StateStorage):
    """Stores state blobs in a single SQLite table."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or settings.database_path)
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Initialize the database and create the table if it doesn't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(str(self.db_path))
            await self._connection.executescript(
                """
                CREATE TABLE IF NOT EXISTS state_blobs (
                    key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            await self._connection.commit()
        except (OSError, aiosqlite.Error) as e:
            raise PersistenceError(f"Could not open state database {self.db_path}: {e}") from e
        logger.info(f"SQLiteStateStorage initialized at {self.db_path}")

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def read(self, key: str) -> Optional[str]:
        connection = self._require_connection()
        try:
            async with connection.execute(
                "SELECT payload FROM state_blobs WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not read '{key}': {e}") from e
        return row[0] if row else None

    async def write(self, key: str, payload: str) -> None:
        connection = self._require_connection()
        try:
            await connection.execute(
                """
                INSERT OR REPLACE INTO state_blobs (key, payload, updated_at)
                VALUES (?, ?, ?)
                """,
                (key, payload, datetime.now(timezone.utc).isoformat()),
            )
            await connection.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not write '{key}': {e}") from e

    async def clear(self, key: str) -> None:
        connection = self._require_connection()
        try:
            await connection.execute("DELETE FROM state_blobs WHERE key = ?", (key,))
            await connection.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not clear '{key}': {e}") from e

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise PersistenceError("SQLiteStateStorage is not initialized")
        return self._connection
