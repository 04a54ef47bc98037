"""
SQLite implementation of the document store.

All collections share one ``documents`` table keyed by (collection, id).
Each row carries a version that is bumped on every write; atomic blocks
re-check the versions they read inside ``BEGIN IMMEDIATE`` before writing.
"""

import asyncio
import json
import re
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeVar

import aiosqlite
from pydantic_core import to_jsonable_python

from src.config import get_logger
from src.core.exceptions import (
    DatabaseError,
    DocumentNotFoundError,
    StockflowError,
    StoreUnavailableError,
    WriteConflictError,
)
from src.core.interfaces.document_store import (
    Document,
    IAtomicHandle,
    IDocumentStore,
    QueryFilter,
    collection_name,
)
from src.infrastructure.storage.atomic_handle import StagedAtomicHandle
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
)
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database

logger = get_logger(__name__)

T = TypeVar("T")

FIELD_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

SQL_OPERATORS = {
    "==": "=",
    "!=": "!=",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
}


def json_path(field: str) -> str:
    """JSON path for a dotted field name."""
    if not FIELD_PATTERN.match(field):
        raise ValueError(f"Invalid field name: {field!r}")
    return f"$.{field}"


def build_where(
    collection: str, filters: Sequence[QueryFilter]
) -> tuple[str, list[Any]]:
    """Translate filters into a WHERE clause and parameters."""
    clauses = ["collection = ?"]
    params: list[Any] = [collection]

    for query_filter in filters:
        path = json_path(query_filter.field)
        value = to_jsonable_python(query_filter.value)
        if query_filter.op == "in":
            values = list(value)
            if not values:
                clauses.append("0")
                continue
            placeholders = ", ".join("?" for _ in values)
            clauses.append(f"json_extract(data_json, ?) IN ({placeholders})")
            params.extend([path, *values])
        else:
            clauses.append(f"json_extract(data_json, ?) {SQL_OPERATORS[query_filter.op]} ?")
            params.extend([path, value])

    return " AND ".join(clauses), params


class _SQLiteAtomicHandle(StagedAtomicHandle):
    def __init__(self, store: "SQLiteDocumentStore"):
        super().__init__()
        self._store = store

    async def _load(self, collection: str, doc_id: str) -> tuple[int, Document | None]:
        pool = await self._store._get_pool()
        async with pool.acquire() as conn:
            return await self._store._fetch(conn, collection, doc_id)


class SQLiteDocumentStore(IDocumentStore):
    """SQLite document store with optimistic, version-checked transactions."""

    def __init__(self, pool: ConnectionPool | None = None, migrate: bool = True):
        self._pool = pool
        # Injected pools are closed directly; the shared pool goes through close_pool
        self._injected_pool = pool is not None
        self._migrate = migrate
        self._ready = False
        self._init_lock = asyncio.Lock()

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = await get_pool()
        if not self._ready:
            async with self._init_lock:
                if not self._ready:
                    if self._migrate:
                        await self._run_migrations(self._pool)
                    self._ready = True
        return self._pool

    @staticmethod
    async def _run_migrations(pool: ConnectionPool) -> None:
        try:
            results = await initialize_database(pool.db_path)
        except aiosqlite.Error as e:
            raise StoreUnavailableError("migrate", str(e)) from e
        failed = [r for r in results if not r.success]
        if failed:
            raise DatabaseError("migrate", failed[0].error or "migration failed")

    @asynccontextmanager
    async def _errors(self, operation: str) -> AsyncIterator[None]:
        """Map driver errors onto the storage error taxonomy."""
        try:
            yield
        except StockflowError:
            raise
        except aiosqlite.OperationalError as e:
            logger.error("store_unavailable", operation=operation, error=str(e))
            raise StoreUnavailableError(operation, str(e)) from e
        except aiosqlite.Error as e:
            logger.error("store_error", operation=operation, error=str(e))
            raise DatabaseError(operation, str(e)) from e

    @staticmethod
    async def _fetch(
        conn: aiosqlite.Connection, collection: str, doc_id: str
    ) -> tuple[int, Document | None]:
        cursor = await conn.execute(
            "SELECT version, data_json FROM documents WHERE collection = ? AND id = ?",
            (collection, doc_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return 0, None
        return row["version"], json.loads(row["data_json"])

    @staticmethod
    async def _upsert(
        conn: aiosqlite.Connection, collection: str, doc_id: str, doc: Document
    ) -> None:
        await conn.execute(
            """
            INSERT INTO documents (collection, id, version, data_json, updated_at)
            VALUES (?, ?, 1, ?, datetime('now'))
            ON CONFLICT (collection, id) DO UPDATE SET
                version = documents.version + 1,
                data_json = excluded.data_json,
                updated_at = excluded.updated_at
            """,
            (collection, doc_id, json.dumps(doc)),
        )

    async def get(self, collection: str, doc_id: str) -> Document | None:
        async with self._errors("get"):
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                _, doc = await self._fetch(conn, collection_name(collection), doc_id)
                return doc

    async def put(self, collection: str, doc_id: str, fields: Document) -> None:
        async with self._errors("put"):
            pool = await self._get_pool()
            async with pool.transaction() as conn:
                await self._upsert(conn, collection_name(collection), doc_id, fields)

    async def update_fields(
        self, collection: str, doc_id: str, partial: Document
    ) -> None:
        name = collection_name(collection)
        async with self._errors("update_fields"):
            pool = await self._get_pool()
            async with pool.transaction() as conn:
                _, current = await self._fetch(conn, name, doc_id)
                if current is None:
                    raise DocumentNotFoundError(name, doc_id)
                current.update(partial)
                await self._upsert(conn, name, doc_id, current)

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        where, params = build_where(collection_name(collection), filters)
        sql = f"SELECT data_json FROM documents WHERE {where}"
        if order_by:
            sql += " ORDER BY json_extract(data_json, ?)" + (" DESC" if descending else "")
            params.append(json_path(order_by))
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        async with self._errors("query"):
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                cursor = await conn.execute(sql, params)
                rows = await cursor.fetchall()
                return [json.loads(row["data_json"]) for row in rows]

    async def run_atomic(self, fn: Callable[[IAtomicHandle], Awaitable[T]]) -> T:
        handle = _SQLiteAtomicHandle(self)
        async with self._errors("run_atomic"):
            result = await fn(handle)
            if not handle.writes:
                return result

            pool = await self._get_pool()
            async with pool.transaction() as conn:
                for (collection, doc_id), version in handle.read_versions.items():
                    current, _ = await self._fetch(conn, collection, doc_id)
                    if current != version:
                        logger.debug(
                            "write_conflict_detected",
                            collection=collection,
                            doc_id=doc_id,
                            read_version=version,
                            current_version=current,
                        )
                        raise WriteConflictError(collection, doc_id)

                committed = {}
                for key in handle.written_keys():
                    _, committed[key] = await self._fetch(conn, *key)

                for (collection, doc_id), doc in handle.final_documents(committed).items():
                    await self._upsert(conn, collection, doc_id, doc)

        return result

    async def close(self) -> None:
        if self._pool is not None:
            if self._injected_pool:
                await self._pool.close()
            else:
                await close_pool()
        self._pool = None
        self._ready = False
