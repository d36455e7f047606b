"""Shared fixtures for Document Service tests."""

import pytest

from document_service.core.document_repository import DocumentRepository
from document_service.core.document_service import DocumentService
from document_service.core.ingestion import FileIngester
from document_service.infrastructure.persistence import SnapshotStore


@pytest.fixture
def snapshot_path(tmp_path):
    """Snapshot location inside a directory that does not exist yet."""
    return tmp_path / "data" / "documents.json"


@pytest.fixture
def store(snapshot_path):
    return SnapshotStore(snapshot_path)


@pytest.fixture
def repository(store):
    """Empty repository writing to the temporary snapshot."""
    return DocumentRepository(store)


@pytest.fixture
def service(repository):
    return DocumentService(repository, FileIngester())
