"""Response envelopes for API endpoints."""

from typing import List, Optional
from pydantic import BaseModel, Field

from .document import Document


class DocumentEnvelope(BaseModel):
    """Response wrapping a single document."""
    success: bool = True
    document: Document


class DocumentListEnvelope(BaseModel):
    """Response wrapping every stored document."""
    success: bool = True
    documents: List[Document]


class MessageResponse(BaseModel):
    """Plain confirmation response."""
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""
    success: bool = False
    error: str
    kind: Optional[str] = Field(None, description="Error kind, absent for internal errors")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    service: str
    version: str
    document_count: int
    snapshot_path: str
