"""Unit tests for snapshot persistence."""

import json
import logging
import os
from datetime import datetime, timezone

import pytest

from document_service.infrastructure.persistence import RepositoryState, SnapshotStore
from document_service.models.document import Document, DocumentFormat

CREATED = datetime(2026, 3, 1, 9, 30, 15, 250000, tzinfo=timezone.utc)
UPDATED = datetime(2026, 3, 2, 17, 0, 0, tzinfo=timezone.utc)


def make_document(document_id, **fields):
    values = {
        "id": document_id,
        "title": f"Document {document_id}",
        "content": "text",
        "format": DocumentFormat.MARKDOWN,
        "created_at": CREATED,
        "updated_at": UPDATED,
    }
    values.update(fields)
    return Document(**values)


@pytest.mark.unit
class TestLoad:
    """Test startup loading, including the fallbacks"""

    @pytest.mark.asyncio
    async def test_missing_file_gives_empty_state(self, store):
        state = await store.load()
        assert state.documents == []
        assert state.next_id == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        "{not json",
        "",
        "[]",
        '{"documents": [[1]], "nextId": 2}',
        '{"documents": [[2, {"id": 3, "title": "t", "content": "c"}]], "nextId": 4}',
        '{"documents": [], "nextId": "seven"}',
        '{"documents": [], "nextId": -1}',
    ])
    async def test_corrupt_snapshot_gives_empty_state(self, store, snapshot_path, raw, caplog):
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text(raw, encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            state = await store.load()

        assert state == RepositoryState()
        assert "StartupLoadFailure" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        b'{"documents": [], "nextId": 3}\xff\xfe',
        b"\x80\x81\x82",
    ])
    async def test_undecodable_snapshot_gives_empty_state(self, store, snapshot_path, raw, caplog):
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_bytes(raw)

        with caplog.at_level(logging.WARNING):
            state = await store.load()

        assert state == RepositoryState()
        assert "StartupLoadFailure" in caplog.text

    @pytest.mark.asyncio
    async def test_naive_timestamps_loaded_as_utc(self, store, snapshot_path):
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text(json.dumps({
            "documents": [[1, {
                "id": 1,
                "title": "t",
                "content": "c",
                "createdAt": "2026-01-05T10:00:00",
                "updatedAt": "2026-01-05T10:00:00",
            }]],
            "nextId": 2,
        }), encoding="utf-8")

        state = await store.load()

        document = state.documents[0]
        assert document.created_at == datetime(2026, 1, 5, 10, tzinfo=timezone.utc)
        assert document.updated_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_reads_camelcase_pair_layout(self, store, snapshot_path):
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text(json.dumps({
            "documents": [
                [2, {
                    "id": 2,
                    "title": "Notas",
                    "content": "# Hola",
                    "format": "markdown",
                    "createdAt": "2026-01-05T10:00:00.000Z",
                    "updatedAt": "2026-01-06T11:30:00.000Z",
                }],
            ],
            "nextId": 5,
        }), encoding="utf-8")

        state = await store.load()

        assert state.next_id == 5
        assert [doc.id for doc in state.documents] == [2]
        assert state.documents[0].updated_at == datetime(2026, 1, 6, 11, 30, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_missing_documents_key_loads_empty(self, store, snapshot_path):
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text('{"nextId": 9}', encoding="utf-8")

        state = await store.load()
        assert state.documents == []
        assert state.next_id == 9

    @pytest.mark.asyncio
    async def test_stale_counter_raised_above_stored_ids(self, store):
        await store.save(RepositoryState(documents=[make_document(7)], next_id=8))
        data = json.loads(store.path.read_text(encoding="utf-8"))
        del data["nextId"]
        store.path.write_text(json.dumps(data), encoding="utf-8")

        state = await store.load()
        assert state.next_id == 8


@pytest.mark.unit
class TestSave:
    """Test atomic full-state writes"""

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        state = RepositoryState(
            documents=[
                make_document(1, title="Notes"),
                make_document(4, content="\\begin{document}\\end{document}", format=DocumentFormat.LATEX),
            ],
            next_id=6,
        )

        assert await store.save(state) is True
        assert await store.load() == state

    @pytest.mark.asyncio
    async def test_file_layout(self, store, snapshot_path):
        await store.save(RepositoryState(documents=[make_document(3)], next_id=4))

        data = json.loads(snapshot_path.read_text(encoding="utf-8"))
        assert data["nextId"] == 4
        key, body = data["documents"][0]
        assert key == 3
        assert set(body) == {"id", "title", "content", "format", "createdAt", "updatedAt"}
        assert body["format"] == "markdown"

    @pytest.mark.asyncio
    async def test_overwrites_previous_snapshot(self, store):
        await store.save(RepositoryState(documents=[make_document(1), make_document(2)], next_id=3))
        await store.save(RepositoryState(documents=[make_document(2)], next_id=3))

        state = await store.load()
        assert [doc.id for doc in state.documents] == [2]

    @pytest.mark.asyncio
    async def test_no_temp_file_left_behind(self, store):
        await store.save(RepositoryState())
        assert store.path.exists()
        assert not store.temp_path.exists()

    @pytest.mark.asyncio
    async def test_unwritable_location_is_logged(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = SnapshotStore(blocker / "documents.json")

        with caplog.at_level(logging.ERROR):
            assert await store.save(RepositoryState()) is False
        assert "PersistenceFailure" in caplog.text

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_snapshot(self, store, monkeypatch):
        await store.save(RepositoryState(documents=[make_document(1)], next_id=2))

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        assert await store.save(RepositoryState(next_id=2)) is False
        monkeypatch.undo()

        state = await store.load()
        assert [doc.id for doc in state.documents] == [1]
        assert not store.temp_path.exists()
