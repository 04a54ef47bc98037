"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.document_store import (
    QUERY_OPERATORS,
    Collection,
    Document,
    IAtomicHandle,
    IDocumentStore,
    QueryFilter,
    collection_name,
)

__all__ = [
    # Storage interfaces
    "IDocumentStore",
    "IAtomicHandle",
    "Collection",
    "Document",
    "QueryFilter",
    "QUERY_OPERATORS",
    "collection_name",
]
