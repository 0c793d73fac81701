"""Line-break rule: split a line at the cursor."""

from __future__ import annotations

from prose_engine.buffer import clamp_offset
from prose_engine.runtime import telemetry

from .context import RuleContext
from .indent import code_indentation

_BLANKS = " \t"


def break_line(ctx: RuleContext, pos: int, *, soft: bool = False) -> int:
    """Insert a line break at ``pos`` and return the new cursor offset.

    Prose lines drop the blanks around the break and indent the new line like
    the line it was split from. Code lines get a plain newline followed by
    structured-expression indentation. ``soft`` breaks are remembered by the
    buffer so a hard-newline-aware fill may re-join them.
    """

    buffer = ctx.buffer
    document = buffer.document
    pos = clamp_offset(document, pos)
    with telemetry.span(
        "rules::break_line",
        logger_name="prose_engine.rules",
        metadata={"pos": pos, "soft": soft},
    ) as handle:
        prose = ctx.is_prose_line(pos)
        handle.add_metadata("kind", "prose" if prose else "code")
        start, end = _blank_run(ctx, pos)
        if prose:
            indent = document.indentation(pos)
            buffer.replace_range(start, end, "\n" + indent, label="break_line")
            cursor = start + 1 + len(indent)
        else:
            buffer.replace_range(start, end, "\n", label="break_line")
            cursor = _indent_code(ctx, start + 1)
        if soft:
            buffer.mark_soft_newline(start)
        return cursor


def _blank_run(ctx: RuleContext, pos: int) -> tuple[int, int]:
    document = ctx.buffer.document
    text = document.text
    line_start = document.line_start(pos)
    line_end = document.line_end(pos)
    start = pos
    while start > line_start and text[start - 1] in _BLANKS:
        start -= 1
    end = pos
    while end < line_end and text[end] in _BLANKS:
        end += 1
    return start, end


def _indent_code(ctx: RuleContext, line_start: int) -> int:
    buffer = ctx.buffer
    indent = code_indentation(ctx, line_start)
    if indent is None:
        return line_start
    first = buffer.document.first_nonblank(line_start)
    if buffer.document.slice(line_start, first) != indent:
        buffer.replace_range(line_start, first, indent, label="indent_line")
    return line_start + len(indent)
