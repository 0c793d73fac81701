"""Bracket-nesting oracle with a line-checkpoint cache."""

from __future__ import annotations

from bisect import bisect_right, insort
from dataclasses import dataclass
from typing import Dict, List, Optional

from prose_engine.buffer import Document, clamp_offset
from prose_engine.config import DEFAULT_CONFIG, ProseConfig
from prose_engine.tags import Tag, TagStore


@dataclass(frozen=True, slots=True)
class ScanState:
    """Lexical state before a given offset."""

    open_brackets: tuple[int, ...] = ()
    in_string: bool = False
    in_prose: bool = False
    escaped: bool = False

    @property
    def depth(self) -> int:
        return len(self.open_brackets)

    def equivalent(self, other: "ScanState") -> bool:
        """Same depth and lexical flags, wherever the open brackets sit."""

        return (
            self.depth == other.depth
            and self.in_string == other.in_string
            and self.in_prose == other.in_prose
            and self.escaped == other.escaped
        )


INITIAL_STATE = ScanState()


class NestingOracle:
    """Reports how many brackets enclose an offset.

    Brackets inside strings, line comments, escapes, and prose regions do not
    count. A prose region opens at a ``PARAGRAPH_START`` tag and closes at the
    first newline without ``NON_TERMINATING_NEWLINE``, so results depend on
    the tags; callers must ``invalidate_from`` wherever tags change and
    ``follow_edit`` wherever text changes.

    Besides the live cache the oracle keeps a baseline: line states as they
    were before the latest edit or classification pass, re-keyed to current
    offsets. Comparing the two tells a pass where its effect on later lines
    runs out.
    """

    def __init__(
        self,
        document: Document,
        tags: TagStore,
        config: ProseConfig = DEFAULT_CONFIG,
    ) -> None:
        self.document = document
        self.tags = tags
        self.config = config
        self._checkpoints: Dict[int, ScanState] = {0: INITIAL_STATE}
        self._offsets: List[int] = [0]
        self._baseline: Dict[int, ScanState] = {}
        self._length = len(document)

    def depth_at(self, pos: int) -> int:
        return self.state_at(pos).depth

    def invalidate_from(self, pos: int) -> None:
        """Forget cached states for offsets after ``pos``."""

        index = bisect_right(self._offsets, max(pos, 0))
        for offset in self._offsets[index:]:
            del self._checkpoints[offset]
        del self._offsets[index:]

    def follow_edit(self, start: int, end: int) -> None:
        """Re-key cached states after ``[start, end)`` replaced older text.

        States behind the replaced span move into the baseline, shifted by
        the change in length; states inside it are dropped.
        """

        delta = len(self.document) - self._length
        old_end = end - delta
        self._length = len(self.document)
        carried = dict(self._baseline)
        carried.update(self._checkpoints)
        self._baseline = {
            offset + delta: state
            for offset, state in carried.items()
            if offset >= old_end
        }
        self.invalidate_from(start)

    def retain_from(self, pos: int) -> None:
        """Copy live states after ``pos`` into the baseline before tags change."""

        index = bisect_right(self._offsets, max(pos, 0))
        for offset in self._offsets[index:]:
            self._baseline[offset] = self._checkpoints[offset]

    def matches_baseline(self, pos: int) -> bool:
        """True when the state at line start ``pos`` is what it was before."""

        previous = self._baseline.get(pos)
        if previous is None:
            return False
        return self.state_at(pos).equivalent(previous)

    def settle(self, upto: Optional[int] = None) -> None:
        """Drop baseline states at or before ``upto`` (all of them for ``None``)."""

        if upto is None:
            self._baseline.clear()
            return
        for offset in [offset for offset in self._baseline if offset <= upto]:
            del self._baseline[offset]

    def reset(self) -> None:
        self._checkpoints = {0: INITIAL_STATE}
        self._offsets = [0]
        self._baseline = {}
        self._length = len(self.document)

    def cached_offsets(self) -> tuple[int, ...]:
        return tuple(self._offsets)

    def baseline_offsets(self) -> tuple[int, ...]:
        return tuple(sorted(self._baseline))

    def state_at(self, pos: int) -> ScanState:
        pos = clamp_offset(self.document, pos)
        index = bisect_right(self._offsets, pos) - 1
        origin = self._offsets[index]
        state = self._checkpoints[origin]
        if origin == pos:
            return state
        return self._scan(origin, pos, state)

    def _remember(self, offset: int, state: ScanState) -> None:
        if offset not in self._checkpoints:
            insort(self._offsets, offset)
        self._checkpoints[offset] = state

    def _scan(self, origin: int, pos: int, state: ScanState) -> ScanState:
        text = self.document.text
        tags = self.tags
        config = self.config
        stack = list(state.open_brackets)
        in_string = state.in_string
        in_prose = state.in_prose
        escaped = state.escaped

        index = origin
        while index < pos:
            char = text[index]
            if in_prose:
                if char == "\n" and not tags.has(index, Tag.NON_TERMINATING_NEWLINE):
                    in_prose = False
            elif escaped:
                escaped = False
            elif in_string:
                if char == config.escape_char:
                    escaped = True
                elif char == config.string_delimiter:
                    in_string = False
            elif tags.has(index, Tag.PARAGRAPH_START):
                in_prose = True
            elif char == config.escape_char:
                escaped = True
            elif char == config.string_delimiter:
                in_string = True
            elif char == config.comment_marker:
                newline = text.find("\n", index)
                if newline == -1 or newline >= pos:
                    index = pos
                    break
                index = newline
                continue
            elif char in config.open_brackets:
                stack.append(index)
            elif char in config.close_brackets:
                if stack:
                    stack.pop()

            index += 1
            if char == "\n":
                self._remember(
                    index,
                    ScanState(tuple(stack), in_string, in_prose, escaped),
                )

        return ScanState(tuple(stack), in_string, in_prose, escaped)
