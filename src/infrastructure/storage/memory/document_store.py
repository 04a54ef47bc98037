"""
In-memory implementation of the document store.

Documents are kept as JSON-compatible dicts with a per-document version.
Every read yields to the event loop so concurrent atomic blocks really
interleave, and commits validate read versions under a lock.
"""

import asyncio
import copy
from collections import defaultdict
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from pydantic_core import to_jsonable_python

from src.config import get_logger
from src.core.exceptions import (
    DocumentNotFoundError,
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

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING = object()


def get_field(doc: Document, path: str) -> Any:
    """Resolve a dotted field path; returns ``_MISSING`` if absent."""
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def matches(doc: Document, query_filter: QueryFilter) -> bool:
    """Evaluate one filter against a document."""
    actual = get_field(doc, query_filter.field)
    if actual is _MISSING:
        return False
    expected = to_jsonable_python(query_filter.value)
    op = query_filter.op

    try:
        if op == "==":
            return actual == expected
        if op == "!=":
            return actual != expected
        if op == "in":
            return actual in expected
        if actual is None:
            return False
        if op == "<":
            return actual < expected
        if op == "<=":
            return actual <= expected
        if op == ">":
            return actual > expected
        if op == ">=":
            return actual >= expected
    except TypeError:
        return False
    return False


def sort_key(doc: Document, field: str) -> tuple[bool, Any]:
    value = get_field(doc, field)
    missing = value is _MISSING or value is None
    return (missing, None if missing else value)


class _MemoryAtomicHandle(StagedAtomicHandle):
    def __init__(self, store: "InMemoryDocumentStore"):
        super().__init__()
        self._store = store

    async def _load(self, collection: str, doc_id: str) -> tuple[int, Document | None]:
        await asyncio.sleep(0)
        self._store._check_available("read")
        return self._store._get_versioned(collection, doc_id)


class InMemoryDocumentStore(IDocumentStore):
    """Versioned in-memory document store with optimistic transactions."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, tuple[int, Document]]] = defaultdict(dict)
        self._lock = asyncio.Lock()
        self.available = True

    def _check_available(self, operation: str) -> None:
        if not self.available:
            raise StoreUnavailableError(operation, "in-memory store marked unavailable")

    def _get_versioned(self, collection: str, doc_id: str) -> tuple[int, Document | None]:
        entry = self._collections[collection].get(doc_id)
        if entry is None:
            return 0, None
        version, doc = entry
        return version, copy.deepcopy(doc)

    def _store(self, collection: str, doc_id: str, doc: Document) -> None:
        version, _ = self._get_versioned(collection, doc_id)
        self._collections[collection][doc_id] = (version + 1, copy.deepcopy(doc))

    async def get(self, collection: str, doc_id: str) -> Document | None:
        await asyncio.sleep(0)
        self._check_available("get")
        _, doc = self._get_versioned(collection_name(collection), doc_id)
        return doc

    async def put(self, collection: str, doc_id: str, fields: Document) -> None:
        self._check_available("put")
        async with self._lock:
            self._store(collection_name(collection), doc_id, fields)

    async def update_fields(
        self, collection: str, doc_id: str, partial: Document
    ) -> None:
        self._check_available("update_fields")
        name = collection_name(collection)
        async with self._lock:
            _, current = self._get_versioned(name, doc_id)
            if current is None:
                raise DocumentNotFoundError(name, doc_id)
            current.update(copy.deepcopy(partial))
            self._store(name, doc_id, current)

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        await asyncio.sleep(0)
        self._check_available("query")
        docs = [
            copy.deepcopy(doc)
            for _, doc in self._collections[collection_name(collection)].values()
        ]
        docs = [d for d in docs if all(matches(d, f) for f in filters)]
        if order_by:
            docs.sort(key=lambda d: sort_key(d, order_by), reverse=descending)
        if limit is not None:
            docs = docs[:limit]
        return docs

    async def run_atomic(self, fn: Callable[[IAtomicHandle], Awaitable[T]]) -> T:
        self._check_available("run_atomic")
        handle = _MemoryAtomicHandle(self)
        result = await fn(handle)

        async with self._lock:
            self._check_available("commit")
            for (collection, doc_id), version in handle.read_versions.items():
                current, _ = self._get_versioned(collection, doc_id)
                if current != version:
                    logger.debug(
                        "write_conflict_detected",
                        collection=collection,
                        doc_id=doc_id,
                        read_version=version,
                        current_version=current,
                    )
                    raise WriteConflictError(collection, doc_id)

            # Build every final document before applying any
            final = handle.final_documents(
                {key: self._get_versioned(*key)[1] for key in handle.written_keys()}
            )
            for (collection, doc_id), doc in final.items():
                self._store(collection, doc_id, doc)

        return result

    async def close(self) -> None:
        self._collections.clear()
