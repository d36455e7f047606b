"""Document operations exposed to the transport layer.

Every operation returns a result rather than raising, so callers can map
each error kind to a response without catching anything.
"""

import logging
from typing import Any, List, Optional

from ..models.document import Document
from .document_repository import DocumentRepository
from .ingestion import FileIngester
from .results import Err, ErrorKind, Invalid, Ok, Result
from .validation import validate_payload

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Document not found"


class DocumentService:
    """Validation-fronted access to a document repository."""

    def __init__(self, repository: DocumentRepository, ingester: Optional[FileIngester] = None):
        """Initialize document service.

        Args:
            repository: Repository owned by this service's caller
            ingester: Upload adapter; defaults to the 10 MiB limit without archiving
        """
        self.repository = repository
        self.ingester = ingester or FileIngester()

    async def create_document(self, raw: Any) -> Result[Document]:
        """Validate a payload and store it as a new document."""
        checked = validate_payload(raw)
        if isinstance(checked, Invalid):
            return Err(ErrorKind.INVALID_PAYLOAD, checked.reason)
        return Ok(await self.repository.create(checked.payload))

    async def get_document(self, document_id: int) -> Result[Document]:
        document = self.repository.get(document_id)
        if document is None:
            return Err(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        return Ok(document)

    async def list_documents(self) -> Result[List[Document]]:
        return Ok(self.repository.list())

    async def update_document(self, document_id: int, raw: Any) -> Result[Document]:
        """Validate a payload and apply it to an existing document.

        Validation runs before the existence check, so a bad payload for a
        missing id reports InvalidPayload.
        """
        checked = validate_payload(raw)
        if isinstance(checked, Invalid):
            return Err(ErrorKind.INVALID_PAYLOAD, checked.reason)

        document = await self.repository.update(document_id, checked.payload)
        if document is None:
            return Err(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        return Ok(document)

    async def delete_document(self, document_id: int) -> Result[int]:
        """Delete a document; the confirmation value is the retired id."""
        if not await self.repository.delete(document_id):
            return Err(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        return Ok(document_id)

    async def ingest_file(
        self,
        data: Optional[bytes],
        filename: Optional[str],
        declared_type: Optional[str] = None
    ) -> Result[Document]:
        """Create a document from an uploaded file.

        Args:
            data: Raw file bytes
            filename: Original filename, used as the title
            declared_type: Content type declared by the client

        Returns:
            Created document, or Err(UnsupportedFileType / InvalidPayload)
        """
        prepared = await self.ingester.ingest(data, filename, declared_type)
        if isinstance(prepared, Err):
            return prepared

        result = await self.create_document(prepared.value)
        if isinstance(result, Ok):
            logger.info(f"Ingested {filename!r} as document {result.value.id}")
        return result
