"""Buffer abstractions: offset-addressed document, edits, and host mirrors."""

from .buffer import Buffer, Transaction
from .document import Document
from .sync import BufferMirror, EditListener
from .validation import (
    BufferValidationError,
    clamp_offset,
    clamp_range,
    ensure_offset,
)

__all__ = [
    "Buffer",
    "BufferMirror",
    "BufferValidationError",
    "Document",
    "EditListener",
    "Transaction",
    "clamp_offset",
    "clamp_range",
    "ensure_offset",
]
