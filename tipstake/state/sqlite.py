"""
SQLite State Store for TipStake

Durable single-table key-value store backed by aiosqlite. Values are stored
as JSON text; a batch of writes is applied inside one SQLite transaction.
"""
import json
import os
from typing import Any, Iterable, Optional, Tuple

import aiosqlite

from ..exceptions import StoreError
from ..logger import get_logger
from .store import StateStore

logger = get_logger(__name__)


class SQLiteStateStore(StateStore):
    """SQLite-backed StateStore"""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.connection: Optional[aiosqlite.Connection] = None

    @staticmethod
    async def create(db_path: str) -> "SQLiteStateStore":
        """Create and initialize the SQLite store"""
        self = SQLiteStateStore(db_path)

        if db_path != ":memory:":
            directory = os.path.dirname(db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

        self.connection = await aiosqlite.connect(db_path)

        # Enable WAL mode for better concurrency
        await self.connection.execute("PRAGMA journal_mode=WAL")
        await self.connection.execute("PRAGMA synchronous=NORMAL")

        await self._init_schema()

        logger.info(f"SQLite state store initialized: {db_path}")
        return self

    async def _init_schema(self):
        """Initialize database schema"""
        await self.connection.execute("""
            CREATE TABLE IF NOT EXISTS state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await self.connection.commit()

    def _require_connection(self) -> aiosqlite.Connection:
        if self.connection is None:
            raise StoreError("SQLite state store is not open")
        return self.connection

    async def get(self, key: str) -> Optional[Any]:
        conn = self._require_connection()
        async with conn.execute("SELECT value FROM state WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    async def apply(self, writes: Iterable[Tuple[str, Any]]) -> None:
        conn = self._require_connection()
        try:
            for key, value in writes:
                if value is None:
                    await conn.execute("DELETE FROM state WHERE key = ?", (key,))
                else:
                    await conn.execute(
                        """
                        INSERT INTO state (key, value) VALUES (?, ?)
                        ON CONFLICT(key) DO UPDATE SET
                            value = excluded.value,
                            updated_at = CURRENT_TIMESTAMP
                        """,
                        (key, json.dumps(value, sort_keys=True)),
                    )
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            logger.error(f"Failed to apply state writes: {e}")
            raise StoreError(f"Failed to apply state writes: {e}") from e

    async def close(self) -> None:
        if self.connection is not None:
            await self.connection.close()
            self.connection = None
            logger.info(f"SQLite state store closed: {self.db_path}")
