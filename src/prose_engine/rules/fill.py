"""Fill rule: prose paragraphs re-wrap as text, code only fills its comments."""

from __future__ import annotations

import re
import textwrap
from typing import List, Sequence

from prose_engine.classifier import paragraph_bounds
from prose_engine.buffer import clamp_offset
from prose_engine.runtime import telemetry

from .context import RuleContext


def fill_paragraph(ctx: RuleContext, pos: int, *, justify: bool = False) -> bool:
    """Fill the paragraph around ``pos``; return ``True`` if text changed."""

    document = ctx.buffer.document
    pos = clamp_offset(document, pos)
    bounds = paragraph_bounds(document, ctx.boundary, pos)
    if bounds is None:
        return False

    start, end = bounds
    with telemetry.span(
        "rules::fill_paragraph",
        logger_name="prose_engine.rules",
        metadata={"start": start, "end": end, "justify": justify},
    ) as handle:
        if ctx.is_prose_line(start):
            handle.add_metadata("kind", "prose")
            return generic_fill(ctx, start, end, justify=justify, bypass_override=True)
        handle.add_metadata("kind", "code")
        return fill_code_comment(ctx, pos, justify=justify)


def generic_fill(
    ctx: RuleContext,
    start: int,
    end: int,
    *,
    justify: bool = False,
    bypass_override: bool = False,
) -> bool:
    """Wrap ``[start, end)`` as plain text at ``fill_column``.

    A registered ``fill_override`` takes over unless ``bypass_override`` is
    set.
    """

    if ctx.fill_override is not None and not bypass_override:
        return ctx.fill_override(ctx, start, end, justify)

    buffer = ctx.buffer
    document = buffer.document
    original = document.slice(start, end)
    lines = original.split("\n")
    initial = _leading_blanks(lines[0])
    subsequent = _leading_blanks(lines[1]) if len(lines) > 1 else initial

    filled: List[str] = []
    for index, chunk in enumerate(_hard_chunks(ctx, start, lines)):
        filled.extend(
            fill_lines(
                chunk,
                width=ctx.config.fill_column,
                initial_indent=initial if index == 0 else subsequent,
                subsequent_indent=subsequent,
                justify=justify,
            )
        )

    text = "\n".join(filled)
    if text == original:
        return False
    buffer.replace_range(start, end, text, label="fill_paragraph")
    return True


def fill_lines(
    lines: Sequence[str],
    *,
    width: int,
    initial_indent: str = "",
    subsequent_indent: str = "",
    justify: bool = False,
) -> List[str]:
    """Re-wrap ``lines`` as one run of words."""

    words = " ".join(line.strip() for line in lines).strip()
    if not words:
        return [initial_indent.rstrip()]
    wrapper = textwrap.TextWrapper(
        width=width,
        initial_indent=initial_indent,
        subsequent_indent=subsequent_indent,
        break_long_words=False,
        break_on_hyphens=False,
        expand_tabs=False,
    )
    wrapped = wrapper.wrap(words)
    if justify:
        indents = [initial_indent] + [subsequent_indent] * (len(wrapped) - 1)
        wrapped = [
            justify_line(line, indent, width) if index < len(wrapped) - 1 else line
            for index, (line, indent) in enumerate(zip(wrapped, indents))
        ]
    return wrapped


def justify_line(line: str, indent: str, width: int) -> str:
    """Pad inter-word gaps so ``line`` reaches ``width`` columns."""

    words = line[len(indent) :].split()
    if len(words) < 2:
        return line
    gaps = len(words) - 1
    spaces = width - len(indent) - sum(len(word) for word in words)
    if spaces <= gaps:
        return line
    base, extra = divmod(spaces, gaps)
    parts = [indent]
    for index, word in enumerate(words[:-1]):
        parts.append(word)
        parts.append(" " * (base + (1 if index < extra else 0)))
    parts.append(words[-1])
    return "".join(parts)


def fill_code_comment(ctx: RuleContext, pos: int, *, justify: bool = False) -> bool:
    """Fill the run of line comments around ``pos`` inside a code paragraph."""

    buffer = ctx.buffer
    document = buffer.document
    marker = re.escape(ctx.config.comment_marker)
    prefix_re = re.compile(rf"[ \t]*{marker}+[ \t]*")

    prefix = _comment_prefix(prefix_re, document.line_text(pos))
    if prefix is None:
        return False

    first = document.line_start(pos)
    previous = document.previous_line(first)
    while previous is not None and _comment_prefix(
        prefix_re, document.line_text(previous)
    ) == prefix:
        first = previous
        previous = document.previous_line(first)

    last = document.line_start(pos)
    following = document.next_line(last)
    while following is not None and _comment_prefix(
        prefix_re, document.line_text(following)
    ) == prefix:
        last = following
        following = document.next_line(last)

    end = document.line_end(last)
    original = document.slice(first, end)
    bodies = [line[len(prefix) :] for line in original.split("\n")]
    text = "\n".join(
        fill_lines(
            bodies,
            width=ctx.config.fill_column,
            initial_indent=prefix,
            subsequent_indent=prefix,
            justify=justify,
        )
    )
    if text == original:
        return False
    buffer.replace_range(first, end, text, label="fill_comment")
    return True


def _comment_prefix(prefix_re: re.Pattern[str], line: str) -> str | None:
    match = prefix_re.match(line)
    if match is None:
        return None
    return match.group(0)


def _leading_blanks(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


def _hard_chunks(ctx: RuleContext, start: int, lines: List[str]) -> List[List[str]]:
    """Split paragraph lines after every hard newline when those are honoured."""

    if not ctx.config.use_hard_newlines:
        return [lines]
    buffer = ctx.buffer
    chunks: List[List[str]] = [[]]
    offset = start
    for index, line in enumerate(lines):
        chunks[-1].append(line)
        offset += len(line)
        if index < len(lines) - 1:
            if not buffer.is_soft_newline(offset):
                chunks.append([])
            offset += 1
    return chunks
