"""
city_explorer/core/database.py
Store handle with an explicit lifecycle.
  • open()  at startup  → connects and creates every table in SCHEMAS
  • close() at shutdown
The handle is passed to the gateway; nothing reaches for a global connection.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import aiosqlite

from city_explorer.core.errors import StorageError
from city_explorer.core.schema import SCHEMAS

log = logging.getLogger("database")


class Database:
    def __init__(self, path: Union[str, Path]):
        self.path = str(path)
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageError("Database is not open. Call open() first.")
        return self._conn

    async def open(self) -> None:
        if self._conn is not None:
            return
        try:
            self._conn = await aiosqlite.connect(self.path)
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute("PRAGMA foreign_keys = ON")
            for schema in SCHEMAS.values():
                for stmt in schema.create_statements():
                    await self._conn.execute(stmt)
            await self._conn.commit()
        except aiosqlite.Error as ex:
            raise StorageError(f"Could not open database at {self.path}: {ex}") from ex
        log.info(f"Database open at {self.path} ({len(SCHEMAS)} tables)")

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            log.info("Database closed")

    async def ping(self) -> bool:
        """Lightweight connectivity probe for /health."""
        if self._conn is None:
            return False
        try:
            async with self._conn.execute("SELECT 1") as cursor:
                await cursor.fetchone()
            return True
        except aiosqlite.Error as ex:
            log.warning(f"Database ping failed: {ex}")
            return False
