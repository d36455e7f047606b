"""Validation pipeline for create and update payloads.

Pure functions only: nothing here touches disk or the repository.
"""

from typing import Any

from ..models.document import DocumentFormat, DocumentPayload
from .results import Invalid, Valid, ValidationResult

ALLOWED_FORMATS = tuple(fmt.value for fmt in DocumentFormat)

CONTENT_REQUIRED = "content is required and must be a string"
FORMAT_NOT_ALLOWED = 'format must be "markdown" or "latex"'
PAYLOAD_NOT_OBJECT = "payload must be a JSON object"


def _present(value: Any) -> bool:
    # null and "" both count as "not supplied"
    return value is not None and value != ""


def validate_payload(raw: Any) -> ValidationResult:
    """Check a raw create/update payload.

    Rules, in order:
        1. ``content`` must be present and be a string (empty is fine).
        2. ``format``, when present, must be ``markdown`` or ``latex``.

    ``title`` is freeform; a non-string title is treated as absent.

    Args:
        raw: Decoded request body

    Returns:
        Valid wrapping a DocumentPayload, or Invalid with the reason
    """
    if not isinstance(raw, dict):
        return Invalid(PAYLOAD_NOT_OBJECT)

    content = raw.get("content")
    if not isinstance(content, str):
        return Invalid(CONTENT_REQUIRED)

    fmt = raw.get("format")
    if _present(fmt):
        if not isinstance(fmt, str) or fmt not in ALLOWED_FORMATS:
            return Invalid(FORMAT_NOT_ALLOWED)
        fmt = DocumentFormat(fmt)
    else:
        fmt = None

    title = raw.get("title")
    if not isinstance(title, str) or not _present(title):
        title = None

    return Valid(DocumentPayload(content=content, title=title, format=fmt))
