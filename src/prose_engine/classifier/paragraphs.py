"""Incremental prose/code classification of paragraphs.

A paragraph is a maximal run of non-separator lines. Its first line decides
the classification from local evidence only: the line's leading characters,
whether it sits at column zero, and (for indented openers) the bracket depth
at its first non-blank character. Continuation lines copy whatever the line
above them carries, which keeps each paragraph uniform.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from prose_engine.buffer import Document, clamp_range
from prose_engine.config import DEFAULT_CONFIG, ProseConfig
from prose_engine.runtime import telemetry
from prose_engine.syntax import BoundaryPredicate, NestingOracle, Tokenizer
from prose_engine.tags import Tag, TagStore

LOGGER_NAME = "prose_engine.classifier"


@dataclass(slots=True)
class PassStats:
    """Counters describing one ``reclassify`` pass."""

    start: int
    end: int
    lines: int = 0
    tagged: int = 0
    changed: int = 0
    extended: int = 0
    invalidated_from: Optional[int] = None
    stopped_at: Optional[int] = None


def code_opener_pattern(config: ProseConfig) -> re.Pattern[str]:
    """Leading text that opens structured-expression syntax.

    A lone quote character at end of line, an optional quote character
    followed by an open bracket, or a line-comment marker.
    """

    quote = re.escape(config.quote_char)
    brackets = re.escape(config.open_brackets)
    comment = re.escape(config.comment_marker)
    return re.compile(rf"{quote}$|{quote}?[{brackets}]|{comment}")


class ParagraphClassifier:
    """Writes ``PARAGRAPH_START`` / ``NON_TERMINATING_NEWLINE`` tags for a range."""

    def __init__(
        self,
        document: Document,
        tags: TagStore,
        *,
        boundary: BoundaryPredicate,
        oracle: NestingOracle,
        tokenizer: Optional[Tokenizer] = None,
        config: ProseConfig = DEFAULT_CONFIG,
    ) -> None:
        self.document = document
        self.tags = tags
        self.boundary = boundary
        self.oracle = oracle
        self.tokenizer = tokenizer
        self.config = config
        self.last_pass: Optional[PassStats] = None
        self._code_opener = code_opener_pattern(config)
        self._closers = set(config.close_brackets) | {" ", "\t"}

    def classify_document(self) -> None:
        self.reclassify(0, len(self.document))

    def reclassify(self, start: int, end: int) -> None:
        """Re-derive tags for every paragraph opened in ``[start, end]``.

        The walk continues past ``end`` until the paragraph in progress is
        finished, then on through later paragraphs until one opens in the
        same nesting state it had before the pass (or the document ends).
        The nesting oracle is invalidated from the first tag that changed,
        and the tokenizer re-scans ``[start, end]`` afterwards.
        """

        bounds = clamp_range(self.document, start, end)
        if bounds is None:
            telemetry.record_event(
                "classifier.rejected_range",
                level="warning",
                data={"start": start, "end": end},
                logger_name=LOGGER_NAME,
            )
            return
        start, end = bounds
        stats = PassStats(start=start, end=end)

        with telemetry.span(
            "classifier::reclassify",
            logger_name=LOGGER_NAME,
            component="classifier",
            metadata={"start": start, "end": end},
        ) as handle:
            self.oracle.retain_from(self.document.line_start(start))
            pos = self._normalize(start, stats)
            while pos is not None:
                if pos > end and self.boundary.is_separator(pos):
                    break
                stats.lines += 1
                self._classify_line(pos, stats)
                pos = self.document.next_line(pos)

            if pos is not None:
                stats.stopped_at = self._follow_through(pos, stats)
            self.oracle.settle(stats.stopped_at)
            if stats.stopped_at is None:
                self.oracle.state_at(len(self.document))

            if self.tokenizer is not None:
                self.tokenizer.rescan(start, end)
            handle.add_metadata("lines", stats.lines)
            handle.add_metadata("extended", stats.extended)
            handle.add_metadata("tagged", stats.tagged)
            handle.add_metadata("changed", stats.changed)
            handle.add_metadata("checkpoints", len(self.oracle.cached_offsets()))

        self.last_pass = stats

    def _normalize(self, start: int, stats: PassStats) -> Optional[int]:
        document = self.document
        line_start = document.line_start(start)
        if start == line_start or document.first_nonblank(start) >= start:
            return line_start
        # The tag slot precedes the edit; only the newline mark may be stale.
        self._reconcile_skipped_line(line_start, stats)
        return document.next_line(start)

    def _follow_through(self, pos: int, stats: PassStats) -> Optional[int]:
        """Walk on from ``pos`` and return the paragraph start where it settled.

        Returns ``None`` when the walk ran off the end of the document.
        """

        document = self.document
        boundary = self.boundary
        current: Optional[int] = pos
        while current is not None:
            previous = document.previous_line(current)
            opens_paragraph = (
                previous is not None
                and boundary.is_separator(previous)
                and not boundary.is_separator(current)
            )
            if opens_paragraph and self.oracle.matches_baseline(current):
                return current
            stats.extended += 1
            self._classify_line(current, stats)
            current = document.next_line(current)
        return None

    def _classify_line(self, line_start: int, stats: PassStats) -> None:
        document = self.document

        if self.boundary.is_separator(line_start):
            self._apply(line_start, None, stats)
            return

        first = document.first_nonblank(line_start)
        previous = document.previous_line(line_start)
        if previous is not None and not self.boundary.is_separator(previous):
            # Continuation lines inherit; their own leading text is not evidence.
            inherited = self.tags.has(
                document.first_nonblank(previous), Tag.PARAGRAPH_START
            )
            if inherited:
                stats.tagged += 1
            self._apply(line_start, first if inherited else None, stats)
            return

        if self._closes_only(first):
            prose = False
        elif previous is None or first == line_start:
            prose = self._looks_like_prose(first)
        elif self.oracle.depth_at(first) == 0:
            prose = self._looks_like_prose(first)
        else:
            prose = False
        if prose:
            stats.tagged += 1
        self._apply(line_start, first if prose else None, stats)

    def _looks_like_prose(self, first: int) -> bool:
        line = self.document.slice(first, self.document.line_end(first))
        return self._code_opener.match(line) is None

    def _closes_only(self, first: int) -> bool:
        line = self.document.slice(first, self.document.line_end(first))
        return bool(line) and set(line) <= self._closers

    def _apply(
        self, line_start: int, paragraph_start: Optional[int], stats: PassStats
    ) -> None:
        """Make the line's tags match the decision, touching only what differs."""

        document = self.document
        tags = self.tags
        line_end = document.line_end(line_start)
        wanted: dict[int, Tag] = {}
        if paragraph_start is not None:
            wanted[paragraph_start] = Tag.PARAGRAPH_START
            if line_end < len(document):
                wanted[line_end] = Tag.NON_TERMINATING_NEWLINE

        changed: list[int] = []
        for offset, tag in list(tags.range(line_start, line_end + 1)):
            if wanted.get(offset) is not tag:
                tags.remove(offset)
                changed.append(offset)
        for offset, tag in wanted.items():
            if tags.put(offset, tag):
                changed.append(offset)

        if changed:
            self._invalidate(min(changed), stats)

    def _reconcile_skipped_line(self, line_start: int, stats: PassStats) -> None:
        if self.boundary.is_separator(line_start):
            self._apply(line_start, None, stats)
            return
        first = self.document.first_nonblank(line_start)
        prose = self.tags.has(first, Tag.PARAGRAPH_START)
        self._apply(line_start, first if prose else None, stats)

    def _invalidate(self, pos: int, stats: PassStats) -> None:
        stats.changed += 1
        if stats.invalidated_from is None or pos < stats.invalidated_from:
            stats.invalidated_from = pos
        self.oracle.invalidate_from(pos)
        telemetry.record_event(
            "classifier.invalidate",
            level="debug",
            data={"from": pos},
            logger_name=LOGGER_NAME,
        )
