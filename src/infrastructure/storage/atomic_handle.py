"""
Buffered atomic handle shared by the document store adapters.

The handle records the version of every document it reads and stages
writes in order. Stores validate the recorded versions and apply the
staged writes in one commit step.
"""

import copy
from abc import abstractmethod
from dataclasses import dataclass

from src.core.exceptions import DocumentNotFoundError
from src.core.interfaces.document_store import Document, IAtomicHandle, collection_name

DocKey = tuple[str, str]


@dataclass
class StagedWrite:
    """One buffered write: a full put or a top-level field merge."""

    collection: str
    doc_id: str
    fields: Document
    merge: bool = False

    @property
    def key(self) -> DocKey:
        return (self.collection, self.doc_id)


def apply_write(current: Document | None, write: StagedWrite) -> Document | None:
    """Result of applying ``write`` on top of ``current``.

    A merge onto a missing document yields None; stores reject that on commit.
    """
    if not write.merge:
        return copy.deepcopy(write.fields)
    if current is None:
        return None
    merged = copy.deepcopy(current)
    merged.update(copy.deepcopy(write.fields))
    return merged


class StagedAtomicHandle(IAtomicHandle):
    """Version-recording handle with read-your-writes semantics."""

    def __init__(self) -> None:
        self.read_versions: dict[DocKey, int] = {}
        self.writes: list[StagedWrite] = []
        self._snapshots: dict[DocKey, Document | None] = {}

    @abstractmethod
    async def _load(self, collection: str, doc_id: str) -> tuple[int, Document | None]:
        """Load (version, document) from the store; version 0 means absent."""
        pass

    async def read(self, collection: str, doc_id: str) -> Document | None:
        key = (collection_name(collection), doc_id)
        if key not in self.read_versions:
            version, doc = await self._load(*key)
            self.read_versions[key] = version
            self._snapshots[key] = doc

        doc = copy.deepcopy(self._snapshots[key])
        for write in self.writes:
            if write.key == key:
                doc = apply_write(doc, write)
        return doc

    def write(self, collection: str, doc_id: str, fields: Document) -> None:
        self.writes.append(StagedWrite(collection_name(collection), doc_id, fields))

    def update(self, collection: str, doc_id: str, partial: Document) -> None:
        self.writes.append(
            StagedWrite(collection_name(collection), doc_id, partial, merge=True)
        )

    def written_keys(self) -> list[DocKey]:
        """Distinct written keys in first-write order."""
        return list(dict.fromkeys(write.key for write in self.writes))

    def final_documents(
        self, current: dict[DocKey, Document | None]
    ) -> dict[DocKey, Document]:
        """
        Apply staged writes on top of the committed documents.

        ``current`` must hold the committed state of every written key.

        Raises:
            DocumentNotFoundError: If a merge targets a missing document
        """
        final = dict(current)
        for write in self.writes:
            doc = apply_write(final[write.key], write)
            if doc is None:
                raise DocumentNotFoundError(write.collection, write.doc_id)
            final[write.key] = doc
        return {key: final[key] for key in self.written_keys()}  # type: ignore[misc]
