"""Editing rules that branch on paragraph classification."""

from .context import FillOverride, RuleContext
from .fill import (
    fill_code_comment,
    fill_lines,
    fill_paragraph,
    generic_fill,
    justify_line,
)
from .indent import code_indentation, indent_line, prose_indentation
from .linebreak import break_line

__all__ = [
    "FillOverride",
    "RuleContext",
    "break_line",
    "code_indentation",
    "fill_code_comment",
    "fill_lines",
    "fill_paragraph",
    "generic_fill",
    "indent_line",
    "justify_line",
    "prose_indentation",
]
