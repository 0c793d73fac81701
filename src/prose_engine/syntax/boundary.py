"""Paragraph-boundary predicate: blank and page-break lines separate paragraphs."""

from __future__ import annotations

from prose_engine.buffer import Document, clamp_offset
from prose_engine.config import DEFAULT_CONFIG, ProseConfig


class BoundaryPredicate:
    """Answers whether the line containing an offset is a separator."""

    def __init__(self, document: Document, config: ProseConfig = DEFAULT_CONFIG) -> None:
        self.document = document
        self.config = config

    def is_separator(self, pos: int) -> bool:
        document = self.document
        pos = clamp_offset(document, pos)
        start = document.line_start(pos)
        line = document.text[start : document.line_end(pos)]
        return self.config.separator_re.match(line) is not None

    def __call__(self, pos: int) -> bool:
        return self.is_separator(pos)
