"""Read-only questions answered from the tag store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from prose_engine.buffer import Document, clamp_offset
from prose_engine.syntax import BoundaryPredicate
from prose_engine.tags import Tag, TagStore


@dataclass(frozen=True, slots=True)
class Paragraph:
    start: int  # first line's start offset
    end: int  # last line's end offset (its newline, or the document end)
    prose: bool


def is_prose_line(document: Document, tags: TagStore, pos: int) -> bool:
    """True when the line holding ``pos`` is classified as prose."""

    first = document.first_nonblank(clamp_offset(document, pos))
    return tags.has(first, Tag.PARAGRAPH_START)


def paragraph_bounds(
    document: Document, boundary: BoundaryPredicate, pos: int
) -> Optional[tuple[int, int]]:
    """``(start, end)`` of the paragraph around ``pos``; ``None`` on a separator."""

    pos = clamp_offset(document, pos)
    if boundary.is_separator(pos):
        return None

    start = document.line_start(pos)
    previous = document.previous_line(start)
    while previous is not None and not boundary.is_separator(previous):
        start = previous
        previous = document.previous_line(start)

    last = document.line_start(pos)
    following = document.next_line(last)
    while following is not None and not boundary.is_separator(following):
        last = following
        following = document.next_line(last)
    return start, document.line_end(last)


def iter_paragraphs(
    document: Document,
    tags: TagStore,
    boundary: BoundaryPredicate,
    *,
    start: int = 0,
) -> Iterator[Paragraph]:
    """Yield every paragraph from the line holding ``start`` onwards."""

    pos: Optional[int] = document.line_start(clamp_offset(document, start))
    while pos is not None:
        if boundary.is_separator(pos):
            pos = document.next_line(pos)
            continue
        bounds = paragraph_bounds(document, boundary, pos)
        if bounds is None:
            break
        yield Paragraph(
            start=bounds[0],
            end=bounds[1],
            prose=is_prose_line(document, tags, bounds[0]),
        )
        pos = document.next_line(bounds[1])


def prose_line_flags(document: Document, tags: TagStore) -> tuple[bool, ...]:
    """Per-line prose flags, in line order."""

    return tuple(
        tags.has(document.first_nonblank(offset), Tag.PARAGRAPH_START)
        for offset in document.line_offsets()
    )
