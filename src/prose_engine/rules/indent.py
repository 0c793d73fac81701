"""Indentation rule: prose copies its neighbour, code follows bracket depth."""

from __future__ import annotations

from prose_engine.buffer import clamp_offset
from prose_engine.runtime import telemetry

from .context import RuleContext


def indent_line(ctx: RuleContext, pos: int) -> int:
    """Re-indent the line holding ``pos`` and return the adjusted cursor."""

    document = ctx.buffer.document
    pos = clamp_offset(document, pos)
    with telemetry.span(
        "rules::indent_line",
        logger_name="prose_engine.rules",
        metadata={"pos": pos},
    ) as handle:
        if ctx.is_prose_line(pos):
            handle.add_metadata("kind", "prose")
            indent = prose_indentation(ctx, pos)
        else:
            handle.add_metadata("kind", "code")
            indent = code_indentation(ctx, pos)
        if indent is None:
            return pos
        return _apply_indentation(ctx, pos, indent)


def prose_indentation(ctx: RuleContext, pos: int) -> str | None:
    """Paragraph openers keep their indentation; other lines copy the one above."""

    document = ctx.buffer.document
    previous = document.previous_line(pos)
    if previous is None or ctx.boundary.is_separator(previous):
        return None
    return document.indentation(previous)


def code_indentation(ctx: RuleContext, pos: int) -> str | None:
    """Indentation for a structured-expression line.

    Top-level lines go to column zero, lines inside a bracket align one past
    a vector bracket or a nested opener, and body lines of a list indent by
    ``code_indent_offset``. Lines that start inside a string are left alone.
    """

    document = ctx.buffer.document
    config = ctx.config
    line_start = document.line_start(pos)
    state = ctx.oracle.state_at(line_start)
    if state.in_string:
        return None
    if not state.open_brackets:
        return ""

    opener = state.open_brackets[-1]
    column = document.column(opener, tab_width=config.tab_width)
    list_opener = document.char_at(opener) == config.open_brackets[0]
    following = document.char_at(opener + 1)
    nested = bool(following) and following in config.open_brackets
    if not list_opener or nested:
        width = column + 1
    else:
        width = column + config.code_indent_offset
    return " " * width


def _apply_indentation(ctx: RuleContext, pos: int, indent: str) -> int:
    buffer = ctx.buffer
    document = buffer.document
    line_start = document.line_start(pos)
    first = document.first_nonblank(pos)
    if document.slice(line_start, first) == indent:
        return max(pos, first)

    buffer.replace_range(line_start, first, indent, label="indent_line")
    new_first = line_start + len(indent)
    if pos <= first:
        return new_first
    return pos + (new_first - first)
