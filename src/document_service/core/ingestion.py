"""File ingestion: turns an uploaded file into a create payload.

Format is inferred from the filename suffix only; file contents are never
sniffed. The payload returned here still goes through the validation
pipeline before it reaches the repository.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..models.document import DocumentFormat
from .results import Err, ErrorKind, Ok, Result

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB
ACCEPTED_CONTENT_TYPES = frozenset({"text/plain", "text/markdown", "application/x-tex"})
ACCEPTED_SUFFIXES = (".md", ".tex")


def normalize_content_type(declared_type: Optional[str]) -> str:
    """Strip parameters and case from a MIME type ("Text/Plain; charset=utf-8" -> "text/plain")."""
    if not declared_type:
        return ""
    return declared_type.split(";", 1)[0].strip().lower()


def infer_format(filename: str) -> DocumentFormat:
    """``.md`` means markdown; every other accepted file is LaTeX."""
    if filename.endswith(".md"):
        return DocumentFormat.MARKDOWN
    return DocumentFormat.LATEX


def is_accepted(filename: str, declared_type: Optional[str]) -> bool:
    """Accept on declared type or on filename suffix, whichever matches."""
    return (
        normalize_content_type(declared_type) in ACCEPTED_CONTENT_TYPES
        or filename.endswith(ACCEPTED_SUFFIXES)
    )


class FileIngester:
    """Checks uploads against the size and type limits and builds payloads."""

    def __init__(
        self,
        max_bytes: int = MAX_UPLOAD_BYTES,
        archive_dir: Optional[Union[str, Path]] = None
    ):
        """Initialize file ingester.

        Args:
            max_bytes: Largest accepted upload
            archive_dir: Where raw uploads are copied; None disables the copy
        """
        self.max_bytes = max_bytes
        self.archive_dir = Path(archive_dir) if archive_dir else None

    async def ingest(
        self,
        data: Optional[bytes],
        filename: Optional[str],
        declared_type: Optional[str] = None
    ) -> Result[Dict[str, Any]]:
        """Turn an uploaded file into a raw create payload.

        Args:
            data: Raw file bytes
            filename: Original filename as sent by the client
            declared_type: Content type declared by the client

        Returns:
            Ok with ``{title, content, format}``, or Err(UnsupportedFileType)
            when the file is too large or of a type that is not accepted
        """
        if data is None or not filename:
            return Err(ErrorKind.INVALID_PAYLOAD, "No file was provided")

        if len(data) > self.max_bytes:
            logger.warning(f"Rejected upload {filename!r}: {len(data)} bytes exceeds {self.max_bytes}")
            return Err(
                ErrorKind.UNSUPPORTED_FILE_TYPE,
                f"File exceeds the {self.max_bytes} byte upload limit"
            )

        if not is_accepted(filename, declared_type):
            logger.warning(f"Rejected upload {filename!r}: type {declared_type!r} not allowed")
            return Err(ErrorKind.UNSUPPORTED_FILE_TYPE, "File type not allowed")

        if self.archive_dir is not None:
            await self.archive(data, filename)

        return Ok({
            "title": filename,
            "content": data.decode("utf-8", errors="replace"),
            "format": infer_format(filename).value,
        })

    async def archive(self, data: bytes, filename: str) -> Optional[Path]:
        """Keep a copy of the raw upload as ``<epoch-millis>-<name>``.

        The copy is not part of the repository's state; failing to write it
        is logged and ingestion carries on.
        """
        target = self.archive_dir / f"{int(time.time() * 1000)}-{Path(filename).name}"
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as e:
            logger.error(f"Could not archive upload {filename!r} to {target}: {e}")
            return None
        return target

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
