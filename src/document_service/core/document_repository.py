"""In-memory document repository with snapshot persistence."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from ..infrastructure.persistence.snapshot_store import RepositoryState, SnapshotStore
from ..models.document import Document, DocumentFormat, DocumentPayload
from .id_allocator import IdAllocator

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentRepository:
    """Keyed document store owning id allocation and all mutations.

    Mutations change the in-memory map without suspending, then await a
    snapshot save. A failed save is logged by the store and the mutation
    stands; the next successful save writes the full state again.
    """

    def __init__(self, store: SnapshotStore, state: Optional[RepositoryState] = None):
        """Initialize repository.

        Args:
            store: Snapshot store written after every mutation
            state: Initial contents, usually from ``store.load()``
        """
        state = state or RepositoryState()
        self.store = store
        self._documents: Dict[int, Document] = {doc.id: doc for doc in state.documents}
        self._ids = IdAllocator(state.next_id)

    @classmethod
    async def open(cls, store: SnapshotStore) -> "DocumentRepository":
        """Build a repository from whatever the store holds on disk."""
        return cls(store, await store.load())

    async def create(self, payload: DocumentPayload) -> Document:
        """Store a new document built from a validated payload.

        Args:
            payload: Validated payload; missing title and format get defaults

        Returns:
            Created document
        """
        document_id = self._ids.next()
        now = _utcnow()
        document = Document(
            id=document_id,
            title=payload.title or f"Document {document_id}",
            content=payload.content,
            format=payload.format or DocumentFormat.MARKDOWN,
            created_at=now,
            updated_at=now
        )
        self._documents[document_id] = document

        await self._persist()
        logger.info(f"Created document {document_id} ({document.format.value})")
        return document

    def get(self, document_id: int) -> Optional[Document]:
        """Get document by ID."""
        return self._documents.get(document_id)

    def list(self) -> List[Document]:
        """All documents in insertion order."""
        return list(self._documents.values())

    async def update(self, document_id: int, payload: DocumentPayload) -> Optional[Document]:
        """Update document.

        Content is always replaced; title and format only when supplied.

        Args:
            document_id: Document ID
            payload: Validated payload

        Returns:
            Updated document if found, None otherwise
        """
        current = self._documents.get(document_id)
        if current is None:
            return None

        # updatedAt has to move forward even on a coarse clock
        now = max(_utcnow(), current.updated_at + timedelta(microseconds=1))
        updated = current.model_copy(update={
            "title": payload.title or current.title,
            "content": payload.content,
            "format": payload.format or current.format,
            "updated_at": now,
        })
        self._documents[document_id] = updated

        await self._persist()
        logger.info(f"Updated document {document_id}")
        return updated

    async def delete(self, document_id: int) -> bool:
        """Delete document; its id is never handed out again.

        Returns:
            True if deleted, False if not found
        """
        if self._documents.pop(document_id, None) is None:
            return False

        await self._persist()
        logger.info(f"Deleted document {document_id}")
        return True

    def state(self) -> RepositoryState:
        """Copy of the current contents and id counter."""
        return RepositoryState(documents=self.list(), next_id=self._ids.peek())

    async def _persist(self) -> bool:
        return await self.store.save(self.state())

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents
