"""Storage infrastructure implementations."""

from src.config import get_logger, get_settings
from src.core.exceptions import ConfigurationError
from src.core.interfaces.document_store import IDocumentStore
from src.infrastructure.storage.memory import InMemoryDocumentStore
from src.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteDocumentStore,
    close_pool,
    get_pool,
)

logger = get_logger(__name__)

# Singleton instance
_document_store: IDocumentStore | None = None


async def get_document_store() -> IDocumentStore:
    """Get singleton document store for the configured backend."""
    global _document_store
    if _document_store is None:
        backend = get_settings().storage.backend
        if backend == "memory":
            _document_store = InMemoryDocumentStore()
        elif backend == "sqlite":
            _document_store = SQLiteDocumentStore()
        else:
            raise ConfigurationError(f"Unknown storage backend: {backend}")
        logger.info("document_store_created", backend=backend)
    return _document_store


async def close_document_store() -> None:
    """Close and forget the singleton document store."""
    global _document_store
    if _document_store is not None:
        await _document_store.close()
        _document_store = None


__all__ = [
    # Stores
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
    # Connection pool
    "ConnectionPool",
    "get_pool",
    "close_pool",
    # Factory functions
    "get_document_store",
    "close_document_store",
]
