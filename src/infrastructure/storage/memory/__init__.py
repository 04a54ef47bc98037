"""In-memory storage implementation."""

from src.infrastructure.storage.memory.document_store import InMemoryDocumentStore

__all__ = ["InMemoryDocumentStore"]
