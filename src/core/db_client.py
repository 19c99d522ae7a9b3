"""SQLite persistence for entity schemas (CRUD over EntitySchema descriptors)."""

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from uuid import UUID

import aiosqlite

from src.core.config import settings
from src.core.errors import DatabaseError, RecordNotFoundError
from src.core.logging import log_with_context, span
from src.core.schema import EntitySchema, SchemaRegistry
from src.domain.record import Record


logger = logging.getLogger(__name__)


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


def _quote(identifier: str) -> str:
    return f'"{identifier}"'


@asynccontextmanager
async def connect(*, db_path: str | None = None) -> AsyncIterator[aiosqlite.Connection]:
    """Open a connection with rows addressable by column name."""
    path = get_db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(str(path)) as conn:
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode = WAL")
        yield conn


async def init_db(*, registry: SchemaRegistry, db_path: str | None = None) -> None:
    """Create a table for every registered entity (idempotent)."""
    with span("db_client.init_db"):
        try:
            async with connect(db_path=db_path) as conn:
                for schema in registry:
                    await conn.execute(schema.create_table_sql())
                await conn.commit()
        except aiosqlite.Error as e:
            log_with_context(logger, "error", "init_db_failed", error=str(e))
            msg = f"Failed to initialize database: {e}"
            raise DatabaseError(msg) from e

        logger.info(
            "Database initialized",
            extra={"tables": [schema.table for schema in registry], "db_path": str(get_db_path(db_path))},
        )


async def create_record(*, schema: EntitySchema, data: Mapping[str, Any], db_path: str | None = None) -> Record:
    """Validate and insert a new record, returning it with its generated id."""
    record = schema.build(data)
    row = schema.to_row(record)

    columns_str = ", ".join(_quote(column) for column in row)
    placeholders_str = ", ".join("?" for _ in row)
    query = f"INSERT INTO {_quote(schema.table)} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - identifiers come from the schema

    with span("db_client.create_record"):
        try:
            async with connect(db_path=db_path) as conn:
                await conn.execute(query, list(row.values()))
                await conn.commit()
        except aiosqlite.Error as e:
            log_with_context(logger, "error", "create_record_failed", table=schema.table, error=str(e))
            msg = f"Failed to create record in {schema.table}: {e}"
            raise DatabaseError(msg) from e

    logger.info("Created record", extra={"table": schema.table, "record_id": str(record.id)})
    return record


async def _fetch_record(conn: aiosqlite.Connection, schema: EntitySchema, record_id: UUID | str) -> Record:
    query = f"SELECT * FROM {_quote(schema.table)} WHERE id = ?"  # noqa: S608 - identifiers come from the schema
    cursor = await conn.execute(query, (str(record_id),))
    row = await cursor.fetchone()
    if row is None:
        msg = f"Record not found in {schema.table}: {record_id}"
        raise RecordNotFoundError(msg)
    return schema.from_row(dict(row))


async def get_record(*, schema: EntitySchema, record_id: UUID | str, db_path: str | None = None) -> Record:
    """Fetch a single record by ID, raising RecordNotFoundError if absent."""
    with span("db_client.get_record"):
        try:
            async with connect(db_path=db_path) as conn:
                return await _fetch_record(conn, schema, record_id)
        except aiosqlite.Error as e:
            log_with_context(logger, "error", "get_record_failed", table=schema.table, record_id=str(record_id), error=str(e))
            msg = f"Failed to get record from {schema.table}: {e}"
            raise DatabaseError(msg) from e


async def update_record(
    *,
    schema: EntitySchema,
    record_id: UUID | str,
    data: Mapping[str, Any],
    db_path: str | None = None,
) -> Record:
    """Apply changes to a stored record and return the updated record.

    The read and the write share one IMMEDIATE transaction, so concurrent
    updates of the same record are applied one after the other.
    """
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    with span("db_client.update_record"):
        try:
            async with connect(db_path=db_path) as conn:
                await conn.execute("BEGIN IMMEDIATE")
                current = await _fetch_record(conn, schema, record_id)
                record = schema.update(current, data)
                row = schema.to_row(record)
                del row["id"], row["createdAt"]

                set_clause = ", ".join(f"{_quote(column)} = ?" for column in row)
                query = f"UPDATE {_quote(schema.table)} SET {set_clause} WHERE id = ?"  # noqa: S608 - identifiers come from the schema
                await conn.execute(query, [*row.values(), str(record.id)])
                await conn.commit()
        except aiosqlite.Error as e:
            log_with_context(logger, "error", "update_record_failed", table=schema.table, record_id=str(record_id), error=str(e))
            msg = f"Failed to update record in {schema.table}: {e}"
            raise DatabaseError(msg) from e

    logger.info("Updated record", extra={"table": schema.table, "record_id": str(record.id)})
    return record


async def list_records(
    *,
    schema: EntitySchema,
    page: int = 1,
    per_page: int | None = None,
    db_path: str | None = None,
) -> list[Record]:
    """List records oldest first, one page at a time."""
    per_page = per_page or settings.default_per_page
    offset = (page - 1) * per_page
    query = f'SELECT * FROM {_quote(schema.table)} ORDER BY "createdAt" ASC, id ASC LIMIT ? OFFSET ?'  # noqa: S608 - identifiers come from the schema

    with span("db_client.list_records"):
        try:
            async with connect(db_path=db_path) as conn:
                cursor = await conn.execute(query, (per_page, offset))
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            log_with_context(logger, "error", "list_records_failed", table=schema.table, error=str(e))
            msg = f"Failed to list records from {schema.table}: {e}"
            raise DatabaseError(msg) from e

    records = [schema.from_row(dict(row)) for row in rows]
    logger.info("Listed records", extra={"table": schema.table, "count": len(records)})
    return records
