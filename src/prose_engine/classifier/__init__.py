"""Paragraph classification and the queries built on its tags."""

from .paragraphs import ParagraphClassifier, PassStats, code_opener_pattern
from .query import (
    Paragraph,
    is_prose_line,
    iter_paragraphs,
    paragraph_bounds,
    prose_line_flags,
)

__all__ = [
    "Paragraph",
    "ParagraphClassifier",
    "PassStats",
    "code_opener_pattern",
    "is_prose_line",
    "iter_paragraphs",
    "paragraph_bounds",
    "prose_line_flags",
]
