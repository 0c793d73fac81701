"""Offset-addressed text storage with line helpers."""

from __future__ import annotations

from dataclasses import dataclass

_BLANKS = " \t"


@dataclass(slots=True)
class Document:
    """Mutable text addressed by character offsets.

    Lines are derived from ``\\n`` characters. Every line helper takes an
    offset anywhere on the line and answers for the line containing it; the
    document may or may not end with a trailing newline.
    """

    text: str = ""
    version: int = 0

    def __len__(self) -> int:
        return len(self.text)

    def char_at(self, pos: int) -> str:
        if 0 <= pos < len(self.text):
            return self.text[pos]
        return ""

    def slice(self, start: int, end: int) -> str:
        return self.text[start:end]

    def replace(self, start: int, end: int, text: str) -> None:
        """Replace ``[start:end]`` with ``text`` and bump the version."""

        self.text = self.text[:start] + text + self.text[end:]
        self.version += 1

    def line_start(self, pos: int) -> int:
        return self.text.rfind("\n", 0, pos) + 1

    def line_end(self, pos: int) -> int:
        """Offset of the newline ending the line, or ``len`` for the last line."""

        end = self.text.find("\n", pos)
        return len(self.text) if end == -1 else end

    def line_text(self, pos: int) -> str:
        return self.text[self.line_start(pos) : self.line_end(pos)]

    def first_nonblank(self, pos: int) -> int:
        """First offset on the line that is not a space or tab.

        Whitespace-only lines answer with their line-end offset.
        """

        cursor = self.line_start(pos)
        end = self.line_end(pos)
        while cursor < end and self.text[cursor] in _BLANKS:
            cursor += 1
        return cursor

    def indentation(self, pos: int) -> str:
        start = self.line_start(pos)
        return self.text[start : self.first_nonblank(pos)]

    def next_line(self, pos: int) -> int | None:
        if self.is_last_line(pos):
            return None
        return self.line_end(pos) + 1

    def previous_line(self, pos: int) -> int | None:
        if self.is_first_line(pos):
            return None
        return self.line_start(self.line_start(pos) - 1)

    def is_first_line(self, pos: int) -> bool:
        return self.line_start(pos) == 0

    def is_last_line(self, pos: int) -> bool:
        return self.line_end(pos) >= len(self.text)

    def line_number(self, pos: int) -> int:
        """Zero-based line index of ``pos``."""

        return self.text.count("\n", 0, pos)

    def line_offsets(self) -> list[int]:
        offsets = [0]
        cursor = self.text.find("\n")
        while cursor != -1:
            offsets.append(cursor + 1)
            cursor = self.text.find("\n", cursor + 1)
        return offsets

    def column(self, pos: int, *, tab_width: int = 8) -> int:
        prefix = self.text[self.line_start(pos) : pos]
        return len(prefix.expandtabs(tab_width))
