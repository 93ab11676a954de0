"""Key-value stores backing settings and the event ledger."""

import logging
from pathlib import Path
from typing import Protocol

import aiosqlite

from beetbell.engine.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal store contract. Failures raise PersistenceError."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store. Used by tests and STORE_BACKEND=memory."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(data or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass


class SqliteStore:
    """SQLite-backed store (single kv table)."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection."""
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        logger.info(f"Connected to database at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise PersistenceError("Database not connected")
        return self._db

    async def get(self, key: str) -> str | None:
        try:
            async with self.db.execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
                return row["value"] if row else None
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to read {key!r}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self.db.execute(
                """
                INSERT INTO kv (key, value, updated_at)
                VALUES (?, ?, strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )
            await self.db.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to write {key!r}: {e}") from e


def create_store(backend: str, db_path: Path) -> MemoryStore | SqliteStore:
    """Build the store named by STORE_BACKEND."""
    if backend == "memory":
        logger.warning("Using in-memory store, state will not survive a restart")
        return MemoryStore()
    return SqliteStore(db_path)
