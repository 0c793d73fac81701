"""Offset validation shared across buffer services."""

from __future__ import annotations

from .document import Document


class BufferValidationError(RuntimeError):
    """Raised when an edit addresses offsets outside the document."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset


def ensure_offset(document: Document, offset: int) -> int:
    if offset < 0 or offset > len(document):
        raise BufferValidationError("Offset out of range", offset=offset)
    return offset


def clamp_offset(document: Document, offset: int) -> int:
    return max(0, min(offset, len(document)))


def clamp_range(document: Document, start: int, end: int) -> tuple[int, int] | None:
    """Clamp both ends to the document; ``None`` when the range is inverted."""

    if end < start:
        return None
    return clamp_offset(document, start), clamp_offset(document, end)
