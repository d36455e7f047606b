"""Document CRUD and upload endpoints."""

import logging
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, File, Request, UploadFile
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ...core.document_service import DocumentService
from ...core.results import Err, ErrorKind
from ...api.dependencies import get_document_service
from ...models.requests import (
    DocumentEnvelope,
    DocumentListEnvelope,
    MessageResponse,
    ErrorResponse
)

router = APIRouter(prefix="/api", tags=["documents"])
logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.INVALID_PAYLOAD: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNSUPPORTED_FILE_TYPE: 415,
}

INTERNAL_ERROR = "Internal server error"
MALFORMED_BODY = "request body is not valid JSON"


def error_response(err: Err) -> JSONResponse:
    """Map a failed result onto its HTTP status."""
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(err.kind, 500),
        content=ErrorResponse(error=err.message, kind=err.kind.value).model_dump()
    )


def internal_error(action: str, exc: Exception) -> JSONResponse:
    logger.error(f"Failed to {action}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=ErrorResponse(error=INTERNAL_ERROR).model_dump())


async def malformed_body_handler(request: Request, exc: RequestValidationError):
    """Answer unparseable JSON bodies under /api with InvalidPayload.

    Every other validation error keeps FastAPI's default 422 response.
    """
    if request.url.path.startswith(router.prefix) and any(
        error.get("type") == "json_invalid" for error in exc.errors()
    ):
        return error_response(Err(ErrorKind.INVALID_PAYLOAD, MALFORMED_BODY))
    return await request_validation_exception_handler(request, exc)


@router.post(
    "/documents",
    response_model=DocumentEnvelope,
    summary="Create Document",
    description="""
Create a new markdown or LaTeX document.

**Request Example**:
```json
{
  "title": "Lecture notes",
  "content": "# Week 1\\n\\nIntroduction",
  "format": "markdown"
}
```

`content` is required (an empty string is allowed). `title` defaults to
`Document <id>` and `format` defaults to `markdown`.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid document payload"},
        500: {"model": ErrorResponse, "description": "Internal server error"}
    }
)
async def create_document(
    payload: Any = Body(None),
    service: DocumentService = Depends(get_document_service)
):
    """Create a new document."""
    try:
        result = await service.create_document(payload)
    except Exception as e:
        return internal_error("create document", e)
    if isinstance(result, Err):
        return error_response(result)
    return DocumentEnvelope(document=result.value)


@router.get(
    "/documents",
    response_model=DocumentListEnvelope,
    summary="List Documents",
    description="Every stored document, in creation order. No pagination or filtering."
)
async def list_documents(service: DocumentService = Depends(get_document_service)):
    """List all documents."""
    try:
        result = await service.list_documents()
    except Exception as e:
        return internal_error("list documents", e)
    return DocumentListEnvelope(documents=result.value)


@router.get(
    "/documents/{document_id}",
    response_model=DocumentEnvelope,
    summary="Get Document",
    responses={404: {"model": ErrorResponse, "description": "Document not found"}}
)
async def get_document(document_id: int, service: DocumentService = Depends(get_document_service)):
    """Get document by ID."""
    try:
        result = await service.get_document(document_id)
    except Exception as e:
        return internal_error("get document", e)
    if isinstance(result, Err):
        return error_response(result)
    return DocumentEnvelope(document=result.value)


@router.put(
    "/documents/{document_id}",
    response_model=DocumentEnvelope,
    summary="Update Document",
    description="""
Replace a document's content.

`content` is always replaced. `title` and `format` are only replaced when
supplied. `id` and `createdAt` never change; `updatedAt` is refreshed.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid document payload"},
        404: {"model": ErrorResponse, "description": "Document not found"}
    }
)
async def update_document(
    document_id: int,
    payload: Any = Body(None),
    service: DocumentService = Depends(get_document_service)
):
    """Update document."""
    try:
        result = await service.update_document(document_id, payload)
    except Exception as e:
        return internal_error("update document", e)
    if isinstance(result, Err):
        return error_response(result)
    return DocumentEnvelope(document=result.value)


@router.delete(
    "/documents/{document_id}",
    response_model=MessageResponse,
    summary="Delete Document",
    description="Permanently delete a document. Its id is never reassigned.",
    responses={404: {"model": ErrorResponse, "description": "Document not found"}}
)
async def delete_document(document_id: int, service: DocumentService = Depends(get_document_service)):
    """Delete document."""
    try:
        result = await service.delete_document(document_id)
    except Exception as e:
        return internal_error("delete document", e)
    if isinstance(result, Err):
        return error_response(result)
    return MessageResponse(message="Document deleted")


@router.post(
    "/upload",
    response_model=DocumentEnvelope,
    summary="Upload Document",
    description="""
Create a document from an uploaded file (multipart field `file`).

Accepted: `text/plain`, `text/markdown`, `application/x-tex`, or any file
named `*.md` / `*.tex`, up to 10 MiB. Files ending in `.md` are stored as
markdown; everything else as LaTeX. The filename becomes the title.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "No file provided"},
        415: {"model": ErrorResponse, "description": "File too large or type not allowed"}
    }
)
async def upload_document(
    file: Optional[UploadFile] = File(None),
    service: DocumentService = Depends(get_document_service)
):
    """Create a document from an uploaded file."""
    try:
        if file is None:
            result = await service.ingest_file(None, None)
        else:
            # One byte past the limit is enough to know the file is too large
            data = await file.read(service.ingester.max_bytes + 1)
            result = await service.ingest_file(data, file.filename, file.content_type)
    except Exception as e:
        return internal_error("process upload", e)
    if isinstance(result, Err):
        return error_response(result)
    return DocumentEnvelope(document=result.value)
