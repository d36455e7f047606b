"""Shared API dependencies."""

from fastapi import Request

from ..core.document_service import DocumentService


def get_document_service(request: Request) -> DocumentService:
    """Document service built by the application lifespan."""
    return request.app.state.document_service
