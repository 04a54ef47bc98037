"""Abstract interface for the document store backing the engine."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")

Document = dict[str, Any]


class Collection(str, Enum):
    """Document collections used by the engine."""

    PRODUCTS = "products"
    PURCHASE_HISTORY = "purchaseHistory"
    TRANSACTIONS = "transactions"
    RETURNS = "returns"


def collection_name(collection: str) -> str:
    """Plain string name for a collection given as str or ``Collection``."""
    if isinstance(collection, Enum):
        return str(collection.value)
    return collection


QUERY_OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "in")


@dataclass(frozen=True)
class QueryFilter:
    """Single field predicate for ``IDocumentStore.query``."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in QUERY_OPERATORS:
            raise ValueError(f"Unsupported query operator: {self.op}")


class IAtomicHandle(ABC):
    """
    Reads and writes inside one ``run_atomic`` block.

    Reads record the version of every document seen; writes are buffered
    and applied together on commit.
    """

    @abstractmethod
    async def read(self, collection: str, doc_id: str) -> Document | None:
        """Read a document, or None if it does not exist."""
        pass

    @abstractmethod
    def write(self, collection: str, doc_id: str, fields: Document) -> None:
        """Stage a full document write (create or replace)."""
        pass

    @abstractmethod
    def update(self, collection: str, doc_id: str, partial: Document) -> None:
        """Stage a merge of ``partial`` into an existing document."""
        pass


class IDocumentStore(ABC):
    """Interface for document persistence with optimistic transactions."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Document | None:
        """Get a document by id."""
        pass

    @abstractmethod
    async def put(self, collection: str, doc_id: str, fields: Document) -> None:
        """Create or replace a document."""
        pass

    @abstractmethod
    async def update_fields(
        self, collection: str, doc_id: str, partial: Document
    ) -> None:
        """Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        """List documents matching all filters."""
        pass

    @abstractmethod
    async def run_atomic(self, fn: Callable[[IAtomicHandle], Awaitable[T]]) -> T:
        """
        Run ``fn`` as one all-or-nothing transaction.

        Makes a single attempt. If any document read through the handle
        changed before commit, nothing is written.

        Raises:
            WriteConflictError: On a detected concurrent modification
            StoreUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release store resources."""
        pass
