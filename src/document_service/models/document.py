"""Document data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentFormat(str, Enum):
    """Source format tag carried by every document."""
    MARKDOWN = "markdown"
    LATEX = "latex"


class DocumentPayload(BaseModel):
    """Field set accepted by create and update once it has passed validation.

    ``title`` and ``format`` are None when the caller did not supply them.
    """
    model_config = ConfigDict(frozen=True)

    content: str
    title: Optional[str] = None
    format: Optional[DocumentFormat] = None


class Document(BaseModel):
    """Stored document.

    Serialized with camelCase timestamps (``createdAt``/``updatedAt``), which is
    the layout of both the HTTP responses and the snapshot file.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., ge=1)
    title: str
    content: str
    format: DocumentFormat = DocumentFormat.MARKDOWN
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Snapshots written by hand may carry naive timestamps
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_dict(self) -> dict:
        """Convert document to a JSON-ready dictionary."""
        return self.model_dump(mode="json", by_alias=True)
