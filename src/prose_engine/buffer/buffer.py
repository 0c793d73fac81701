"""Buffer façade combining document text, tags, cursor, and edit listeners."""

from __future__ import annotations

from bisect import bisect_left
from contextlib import AbstractContextManager
from typing import ContextManager, List, Optional, Sequence

from prose_engine.runtime import telemetry
from prose_engine.tags import TagStore

from .document import Document
from .sync import BufferMirror, EditListener
from .validation import BufferValidationError, clamp_offset, ensure_offset


class Buffer:
    """Owns a :class:`Document` plus the tags keyed into it.

    Every edit shifts tags and soft-newline marks with the text, then calls
    the registered listeners with the ``(start, end)`` range of the new text.
    Listeners run synchronously, in registration order, before the edit
    returns.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[Document] = None,
        tags: Optional[TagStore] = None,
    ) -> None:
        self.name = name
        self.document = document if document is not None else Document()
        self.tags = tags if tags is not None else TagStore()
        self.cursor = 0
        self._soft_newlines: List[int] = []
        self._listeners: List[EditListener] = []
        self.logger = telemetry.get_logger("prose_engine.buffer")

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Buffer":
        return cls(name=name, document=Document(text))

    @property
    def text(self) -> str:
        return self.document.text

    def add_listener(self, listener: EditListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EditListener) -> None:
        self._listeners.remove(listener)

    def set_cursor(self, offset: int) -> int:
        self.cursor = clamp_offset(self.document, offset)
        return self.cursor

    def soft_newlines(self) -> tuple[int, ...]:
        return tuple(self._soft_newlines)

    def is_soft_newline(self, offset: int) -> bool:
        index = bisect_left(self._soft_newlines, offset)
        return index < len(self._soft_newlines) and self._soft_newlines[index] == offset

    def mark_soft_newline(self, offset: int) -> None:
        if self.document.char_at(offset) != "\n":
            raise BufferValidationError("Soft mark must sit on a newline", offset=offset)
        if not self.is_soft_newline(offset):
            self._soft_newlines.insert(bisect_left(self._soft_newlines, offset), offset)

    def mirror(
        self,
        *,
        prose_lines: Sequence[bool] = (),
        attributes: Optional[dict[str, str]] = None,
    ) -> BufferMirror:
        return BufferMirror(
            text=self.document.text,
            cursor=self.cursor,
            prose_lines=tuple(prose_lines),
            attributes=dict(attributes or {}),
        )

    def replace_range(self, start: int, end: int, text: str, *, label: str) -> int:
        """Replace ``[start, end)`` with ``text``; return the new end offset."""

        ensure_offset(self.document, start)
        ensure_offset(self.document, end)
        if end < start:
            raise BufferValidationError("Edit range is inverted", offset=end)

        with Transaction(self, label) as tx:
            delta = len(text) - (end - start)
            self.document.replace(start, end, text)
            self.tags.shift(start, end, delta)
            self._shift_soft_newlines(start, end, delta)
            new_end = start + len(text)
            if self.cursor >= end:
                self.cursor += delta
            elif self.cursor > start:
                self.cursor = new_end
            tx.notify(start, new_end)
        return new_end

    def insert_text(self, text: str, *, offset: Optional[int] = None) -> int:
        position = self.cursor if offset is None else offset
        return self.replace_range(position, position, text, label="insert_text")

    def delete_range(self, start: int, end: int) -> int:
        return self.replace_range(start, end, "", label="delete_range")

    def _shift_soft_newlines(self, start: int, end: int, delta: int) -> None:
        marks = self._soft_newlines
        lo = bisect_left(marks, start)
        hi = bisect_left(marks, end, lo=lo)
        self._soft_newlines = marks[:lo] + [offset + delta for offset in marks[hi:]]

    def _notify(self, start: int, end: int) -> None:
        for listener in list(self._listeners):
            listener(start, end)


class Transaction(AbstractContextManager["Transaction"]):
    """Wraps one edit in a telemetry span and fans out listener calls."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._handle: Optional[telemetry.SpanHandle] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            logger_name="prose_engine.buffer",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._handle = self._span_cm.__enter__()
        return self

    def notify(self, start: int, end: int) -> None:
        if self._handle is not None:
            self._handle.add_metadata("range", (start, end))
            self._handle.add_metadata("version", self.buffer.document.version)
        self.buffer._notify(start, end)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False
