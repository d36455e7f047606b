"""Snapshot Store

Full-state persistence of the document repository to a single JSON file.
The file holds every stored document plus the next-id counter:

    {"documents": [[1, {...}], [3, {...}]], "nextId": 4}

Every save rewrites the whole file. Saves are serialized through one lock
and land through a temporary file plus atomic rename, so a crash mid-write
leaves the previous snapshot in place.
"""

import asyncio
import contextlib
import json
import logging
import os
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, Field

from ...core.results import ErrorKind
from ...models.document import Document

logger = logging.getLogger(__name__)


class RepositoryState(BaseModel):
    """Everything needed to rebuild a repository."""
    documents: List[Document] = Field(default_factory=list)
    next_id: int = Field(default=1, ge=1)


class SnapshotStore:
    """Loads and saves repository snapshots on local disk.

    Deployment scenarios:
    - Development: ./data/documents.json
    - Docker: a mounted volume under data_dir

    Note:
        Blocking file I/O runs in a worker thread so the event loop keeps
        serving requests while a save is in flight.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize snapshot store.

        Args:
            path: Snapshot file location; parent directories are created on save
        """
        self.path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    async def load(self) -> RepositoryState:
        """Read the snapshot from disk.

        A missing, unreadable or corrupt snapshot never fails startup; it is
        logged and treated as an empty repository.

        Returns:
            Restored state, or an empty state with the counter at 1
        """
        try:
            raw = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"No snapshot at {self.path}, starting with an empty repository")
            return RepositoryState()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                f"{ErrorKind.STARTUP_LOAD_FAILURE.value}: cannot read {self.path}: {e}"
            )
            return RepositoryState()

        try:
            state = self.parse(raw)
        except (ValueError, TypeError) as e:
            logger.warning(
                f"{ErrorKind.STARTUP_LOAD_FAILURE.value}: corrupt snapshot {self.path}: {e}"
            )
            return RepositoryState()

        logger.info(f"Loaded {len(state.documents)} documents from {self.path}")
        return state

    async def save(self, state: RepositoryState) -> bool:
        """Write the full state to disk, replacing the previous snapshot.

        The state is serialized immediately, before waiting for the writer
        lock, so each save records the repository as it was when called.
        Waiting saves are released in call order.

        Args:
            state: Repository state to persist

        Returns:
            True if the snapshot was written, False if the failure was logged
        """
        try:
            serialized = self.serialize(state)
        except (ValueError, TypeError) as e:
            logger.error(f"{ErrorKind.PERSISTENCE_FAILURE.value}: cannot serialize state: {e}")
            return False

        async with self._lock:
            try:
                await asyncio.to_thread(self._write_atomic, serialized)
            except OSError as e:
                logger.error(
                    f"{ErrorKind.PERSISTENCE_FAILURE.value}: cannot write {self.path}: {e}"
                )
                return False

        logger.debug(f"Saved {len(state.documents)} documents to {self.path}")
        return True

    def _write_atomic(self, serialized: str) -> None:
        tmp = self.temp_path
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(serialized)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise

    @staticmethod
    def serialize(state: RepositoryState) -> str:
        """Render state in the snapshot file layout."""
        data = {
            "documents": [[doc.id, doc.to_dict()] for doc in state.documents],
            "nextId": state.next_id,
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    @staticmethod
    def parse(raw: str) -> RepositoryState:
        """Rebuild state from snapshot text.

        Raises:
            ValueError: If the text is not a well-formed snapshot
        """
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("snapshot root must be an object")

        documents: List[Document] = []
        seen = set()
        for entry in data.get("documents") or []:
            if not isinstance(entry, list) or len(entry) != 2:
                raise ValueError(f"malformed snapshot entry: {entry!r}")
            key, body = entry
            document = Document.model_validate(body)
            if key != document.id:
                raise ValueError(f"snapshot key {key!r} does not match document id {document.id}")
            if document.id in seen:
                raise ValueError(f"duplicate document id {document.id}")
            seen.add(document.id)
            documents.append(document)

        next_id = data.get("nextId") or 1
        if isinstance(next_id, bool) or not isinstance(next_id, int) or next_id < 1:
            raise ValueError(f"invalid nextId: {next_id!r}")

        # A counter at or below a stored id would hand that id out again
        highest = max(seen, default=0)
        if next_id <= highest:
            logger.warning(f"Snapshot nextId {next_id} is not above id {highest}, raising it")
            next_id = highest + 1

        return RepositoryState(documents=documents, next_id=next_id)
