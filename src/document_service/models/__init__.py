"""Data models for Document Service."""

from .document import Document, DocumentFormat, DocumentPayload
from .requests import (
    DocumentEnvelope,
    DocumentListEnvelope,
    MessageResponse,
    ErrorResponse,
    HealthResponse
)

__all__ = [
    "Document",
    "DocumentFormat",
    "DocumentPayload",
    "DocumentEnvelope",
    "DocumentListEnvelope",
    "MessageResponse",
    "ErrorResponse",
    "HealthResponse",
]
