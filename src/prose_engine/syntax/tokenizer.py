"""Lazy line tokenizer for structured-expression syntax.

Tokens never cross a line boundary, so everything before the first line
touched by an edit stays valid while everything after it is re-derived on
demand.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import List

from prose_engine.buffer import Document, clamp_offset
from prose_engine.config import DEFAULT_CONFIG, ProseConfig
from prose_engine.runtime import telemetry
from prose_engine.tags import Tag, TagStore

from .nesting import NestingOracle

QUOTE_CHARS = "'`,@#"


@dataclass(frozen=True, slots=True)
class Token:
    kind: str  # prose, open, close, string, comment, quote, atom
    start: int
    end: int

    def text(self, document: Document) -> str:
        return document.slice(self.start, self.end)


class Tokenizer:
    def __init__(
        self,
        document: Document,
        tags: TagStore,
        oracle: NestingOracle,
        config: ProseConfig = DEFAULT_CONFIG,
    ) -> None:
        self.document = document
        self.tags = tags
        self.oracle = oracle
        self.config = config
        self._tokens: List[Token] = []
        self._starts: List[int] = []
        self._valid_until = 0

    def rescan(self, start: int, end: int) -> List[Token]:
        """Drop tokens from the line holding ``start`` on and re-tokenize to ``end``."""

        document = self.document
        start = clamp_offset(document, start)
        end = clamp_offset(document, max(start, end))
        first_line = document.line_start(start)
        if first_line < self._valid_until:
            cut = bisect_left(self._starts, first_line)
            del self._tokens[cut:]
            del self._starts[cut:]
            self._valid_until = first_line
        self._extend(document.line_end(end))
        telemetry.record_event(
            "tokenizer.rescan",
            level="debug",
            data={"start": start, "end": end},
            logger_name="prose_engine.syntax",
        )
        return self.tokens_in(first_line, document.line_end(end) + 1)

    def tokens(self) -> List[Token]:
        self._extend(len(self.document))
        return list(self._tokens)

    def tokens_in(self, start: int, end: int) -> List[Token]:
        self._extend(min(end, len(self.document)))
        lo = bisect_left(self._starts, start)
        hi = bisect_left(self._starts, end, lo=lo)
        return self._tokens[lo:hi]

    def _extend(self, limit: int) -> None:
        document = self.document
        while self._valid_until <= limit and self._valid_until <= len(document):
            line_start = self._valid_until
            line_end = document.line_end(line_start)
            state = self.oracle.state_at(line_start)
            tokens = self._tokenize_line(
                line_start, line_end, state.in_prose, state.in_string
            )
            for token in tokens:
                self._tokens.append(token)
                self._starts.append(token.start)
            self._valid_until = line_end + 1

    def _tokenize_line(
        self, line_start: int, line_end: int, in_prose: bool, in_string: bool
    ) -> List[Token]:
        text = self.document.text
        config = self.config
        tokens: List[Token] = []
        index = line_start

        if in_prose:
            if line_start < line_end:
                tokens.append(Token("prose", line_start, line_end))
            return tokens
        if in_string:
            index = self._string_end(line_start, line_end)
            tokens.append(Token("string", line_start, index))

        while index < line_end:
            char = text[index]
            if char in " \t\f":
                index += 1
            elif self.tags.has(index, Tag.PARAGRAPH_START):
                tokens.append(Token("prose", index, line_end))
                break
            elif char == config.comment_marker:
                tokens.append(Token("comment", index, line_end))
                break
            elif char == config.string_delimiter:
                end = self._string_end(index + 1, line_end)
                tokens.append(Token("string", index, end))
                index = end
            elif char in config.open_brackets:
                tokens.append(Token("open", index, index + 1))
                index += 1
            elif char in config.close_brackets:
                tokens.append(Token("close", index, index + 1))
                index += 1
            elif char in QUOTE_CHARS:
                tokens.append(Token("quote", index, index + 1))
                index += 1
            else:
                end = self._atom_end(index, line_end)
                tokens.append(Token("atom", index, end))
                index = end
        return tokens

    def _string_end(self, index: int, line_end: int) -> int:
        text = self.document.text
        config = self.config
        while index < line_end:
            char = text[index]
            if char == config.escape_char:
                index += 2
                continue
            index += 1
            if char == config.string_delimiter:
                return index
        return min(index, line_end)

    def _atom_end(self, index: int, line_end: int) -> int:
        text = self.document.text
        config = self.config
        stops = (
            " \t\f" + config.open_brackets + config.close_brackets
        ) + config.string_delimiter
        while index < line_end:
            char = text[index]
            if char == config.escape_char:
                index += 2
                continue
            if char in stops or char == config.comment_marker:
                break
            index += 1
        return min(index, line_end)
