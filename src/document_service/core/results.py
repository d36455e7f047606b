"""Result types returned by the document core instead of raised errors."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from ..models.document import DocumentPayload

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Every way a document operation can fail.

    Only the first three ever reach a caller. ``PERSISTENCE_FAILURE`` and
    ``STARTUP_LOAD_FAILURE`` label log events for non-fatal storage problems.
    """
    INVALID_PAYLOAD = "InvalidPayload"
    NOT_FOUND = "NotFound"
    UNSUPPORTED_FILE_TYPE = "UnsupportedFileType"
    PERSISTENCE_FAILURE = "PersistenceFailure"
    STARTUP_LOAD_FAILURE = "StartupLoadFailure"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class Valid:
    """Payload accepted by the validation pipeline."""
    payload: DocumentPayload


@dataclass(frozen=True)
class Invalid:
    """Payload rejected by the validation pipeline."""
    reason: str


ValidationResult = Union[Valid, Invalid]
