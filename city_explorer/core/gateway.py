"""
city_explorer/core/gateway.py
═══════════════════════════════════════════════════════════════════════════════
Resource-agnostic reads and writes against the store.

  read(descriptor)          SELECT * FROM <table> WHERE <key>=?1, newest generation first
  write(descriptor, record) INSERT INTO <table> (<cols>) VALUES (?1, ?2, ...)
                            + RETURNING id for locations
  delete(descriptor)        DELETE FROM <table> WHERE <key>=?1

One round trip per call, no retries.  Store failures surface as
StorageError carrying the statement; "not found" is an empty list.
Freshness and upstream fetching live elsewhere.
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from typing import Any, Optional, Sequence

import aiosqlite

from city_explorer.core.database import Database
from city_explorer.core.descriptor import ResourceDescriptor, ResourceType
from city_explorer.core.errors import StorageError
from city_explorer.core.records import CacheRecord, record_from_row
from city_explorer.core.schema import schema_for

log = logging.getLogger("gateway")


def _placeholders(count: int) -> str:
    """1-based positional parameters: 3 → '?1, ?2, ?3'."""
    return ", ".join(f"?{i}" for i in range(1, count + 1))


class StorageGateway:
    def __init__(self, db: Database):
        self._db = db

    # ── Statement builders ────────────────────────────────────────────────────

    @staticmethod
    def select_statement(descriptor: ResourceDescriptor) -> str:
        schema = schema_for(descriptor.resource_type)
        return f"SELECT * FROM {schema.table} WHERE {schema.key_column}=?1 ORDER BY created_at DESC, id"

    @staticmethod
    def insert_statement(descriptor: ResourceDescriptor, fields: Sequence[tuple[str, Any]]) -> str:
        schema  = schema_for(descriptor.resource_type)
        columns = ", ".join(schema.column_for(name) for name, _ in fields)
        sql = f"INSERT INTO {schema.table} ({columns}) VALUES ({_placeholders(len(fields))})"
        if schema.returns_id:
            sql += " RETURNING id"
        return sql

    @staticmethod
    def delete_statement(descriptor: ResourceDescriptor) -> str:
        schema = schema_for(descriptor.resource_type)
        return f"DELETE FROM {schema.table} WHERE {schema.key_column}=?1"

    # ── Execution ─────────────────────────────────────────────────────────────

    async def _execute(self, sql: str, params: Sequence[Any]) -> tuple[list, int]:
        conn = self._db.connection
        try:
            async with conn.execute(sql, tuple(params)) as cursor:
                rows     = await cursor.fetchall()
                rowcount = cursor.rowcount
            await conn.commit()
        except aiosqlite.Error as ex:
            raise StorageError(f"Statement failed: {ex}", statement=sql) from ex
        return rows, rowcount

    async def read(self, descriptor: ResourceDescriptor) -> list[CacheRecord]:
        sql = self.select_statement(descriptor)
        rows, _ = await self._execute(sql, [descriptor.key_value])
        log.debug(f"read {descriptor.cache_key}: {len(rows)} rows")
        return [record_from_row(descriptor.resource_type, row) for row in rows]

    async def write(self, descriptor: ResourceDescriptor, record: CacheRecord) -> CacheRecord:
        if record.resource_type is not descriptor.resource_type:
            raise StorageError(
                f"{type(record).__name__} record cannot be written as {descriptor.resource_type.value}"
            )
        fields = record.fields_for_storage()
        sql    = self.insert_statement(descriptor, fields)
        rows, _ = await self._execute(sql, [value for _, value in fields])

        if schema_for(descriptor.resource_type).returns_id:
            new_id: Optional[int] = rows[0]["id"] if rows else None
            if new_id is None:
                raise StorageError("Insert did not return a generated id", statement=sql)
            record.id = new_id
            log.debug(f"write {descriptor.cache_key}: id={new_id}")
        else:
            log.debug(f"write {descriptor.cache_key}")
        return record

    async def location_exists(self, location_id: int) -> bool:
        """Dependent rows need their owning location to exist first."""
        schema = schema_for(ResourceType.LOCATION)
        rows, _ = await self._execute(f"SELECT 1 FROM {schema.table} WHERE id=?1", [location_id])
        return bool(rows)

    async def delete(self, descriptor: ResourceDescriptor) -> int:
        sql = self.delete_statement(descriptor)
        _, count = await self._execute(sql, [descriptor.key_value])
        return count
