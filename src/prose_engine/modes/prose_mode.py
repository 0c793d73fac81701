"""Mode that keeps paragraph tags current and routes keys to the rules."""

from __future__ import annotations

from typing import Callable, Dict, Optional

from prose_engine.classifier import (
    ParagraphClassifier,
    iter_paragraphs,
    prose_line_flags,
)
from prose_engine.config import ProseConfig
from prose_engine.rules import (
    FillOverride,
    RuleContext,
    break_line,
    fill_paragraph,
    indent_line,
)
from prose_engine.runtime import telemetry
from prose_engine.syntax import BoundaryPredicate, NestingOracle, Tokenizer

from .base_mode import KeyInput, Mode, ModeContext, ModeResult

Command = Callable[[KeyInput], ModeResult]

_INSERT_BLOCKING_MODIFIERS = {"CTRL", "ALT", "META"}


class ProseMode(Mode):
    """Wires the classifier into a buffer's edit notifications.

    The classifier runs first on every edited range, synchronously, before
    any rule or query can observe the tags.
    """

    name = "prose"

    def __init__(
        self,
        context: ModeContext,
        *,
        config: Optional[ProseConfig] = None,
        fill_override: Optional[FillOverride] = None,
    ) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("prose_engine.modes")
        self.config = config or ProseConfig.from_env()
        buffer = context.buffer
        document = buffer.document
        self.boundary = BoundaryPredicate(document, self.config)
        self.oracle = NestingOracle(document, buffer.tags, self.config)
        self.tokenizer = Tokenizer(document, buffer.tags, self.oracle, self.config)
        self.classifier = ParagraphClassifier(
            document,
            buffer.tags,
            boundary=self.boundary,
            oracle=self.oracle,
            tokenizer=self.tokenizer,
            config=self.config,
        )
        self.rules = RuleContext(
            buffer=buffer,
            boundary=self.boundary,
            oracle=self.oracle,
            config=self.config,
            fill_override=fill_override,
        )
        self._attached = False
        self._commands: Dict[str, Command] = {}
        self.bind("TAB", self._indent)
        self.bind("ENTER", self._hard_break)
        self.bind("SHIFT+ENTER", self._soft_break)
        self.bind("ALT+q", self._fill)
        self.bind("ALT+j", self._justify)
        self.bind("BACKSPACE", self._backspace)
        self.bind("LEFT", lambda key: self._move(-1))
        self.bind("RIGHT", lambda key: self._move(1))

    @property
    def buffer(self):
        return self.context.buffer

    def bind(self, token: str, command: Command) -> None:
        self._commands[token] = command

    def unbind(self, token: str) -> None:
        self._commands.pop(token, None)

    def bindings(self) -> tuple[str, ...]:
        return tuple(self._commands)

    def on_enter(self) -> None:
        if self._attached:
            return
        self.buffer.add_listener(self._on_edit)
        self._attached = True
        self.oracle.reset()
        self.classifier.classify_document()
        self.context.bus.emit("prose.attached", {"buffer": self.buffer.name})

    def on_exit(self) -> None:
        if not self._attached:
            return
        self.buffer.remove_listener(self._on_edit)
        self._attached = False
        self.context.bus.emit("prose.detached", {"buffer": self.buffer.name})

    def is_prose_line(self, pos: int) -> bool:
        return self.rules.is_prose_line(pos)

    def prose_lines(self) -> tuple[bool, ...]:
        return prose_line_flags(self.buffer.document, self.buffer.tags)

    def paragraphs(self):
        document = self.buffer.document
        return list(iter_paragraphs(document, self.buffer.tags, self.boundary))

    def handle_key(self, key: KeyInput) -> ModeResult:
        command = self._commands.get(key.token)
        if command is not None:
            with telemetry.span(
                f"mode::{self.name}",
                logger_name="prose_engine.modes",
                component=True,
                metadata={"key": key.token},
            ):
                return command(key)

        if key.text and not _INSERT_BLOCKING_MODIFIERS.intersection(key.modifiers):
            cursor = self.buffer.insert_text(key.text)
            self.buffer.set_cursor(cursor)
            return ModeResult(consumed=True, status="insert")
        return ModeResult(consumed=False)

    def _on_edit(self, start: int, end: int) -> None:
        self.oracle.follow_edit(start, end)
        self.classifier.reclassify(start, end)
        stats = self.classifier.last_pass
        self.context.bus.emit(
            "prose.reclassified",
            {
                "start": start,
                "end": end,
                "changed": stats.changed if stats else 0,
            },
        )

    def _indent(self, key: KeyInput) -> ModeResult:
        del key
        cursor = indent_line(self.rules, self.buffer.cursor)
        self.buffer.set_cursor(cursor)
        return ModeResult(consumed=True, message="indent_line")

    def _hard_break(self, key: KeyInput) -> ModeResult:
        del key
        self.buffer.set_cursor(break_line(self.rules, self.buffer.cursor))
        return ModeResult(consumed=True, message="break_line")

    def _soft_break(self, key: KeyInput) -> ModeResult:
        del key
        self.buffer.set_cursor(break_line(self.rules, self.buffer.cursor, soft=True))
        return ModeResult(consumed=True, message="soft_break_line")

    def _fill(self, key: KeyInput) -> ModeResult:
        del key
        changed = fill_paragraph(self.rules, self.buffer.cursor)
        message = "fill_paragraph" if changed else "fill_unchanged"
        return ModeResult(consumed=True, message=message)

    def _justify(self, key: KeyInput) -> ModeResult:
        del key
        changed = fill_paragraph(self.rules, self.buffer.cursor, justify=True)
        message = "justify_paragraph" if changed else "fill_unchanged"
        return ModeResult(consumed=True, message=message)

    def _backspace(self, key: KeyInput) -> ModeResult:
        del key
        cursor = self.buffer.cursor
        if cursor == 0:
            return ModeResult(consumed=True, status="noop")
        self.buffer.delete_range(cursor - 1, cursor)
        return ModeResult(consumed=True, message="delete_backward")

    def _move(self, delta: int) -> ModeResult:
        self.buffer.set_cursor(self.buffer.cursor + delta)
        return ModeResult(consumed=True, status="move")
