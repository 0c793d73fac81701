"""Adapter boundary types for syncing buffers with host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the current buffer state."""

    text: str
    cursor: int
    prose_lines: tuple[bool, ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)

    def lines(self) -> list[str]:
        return self.text.split("\n")


class EditListener(Protocol):
    """Callback fired after every buffer edit with the changed range."""

    def __call__(self, start: int, end: int) -> None: ...
