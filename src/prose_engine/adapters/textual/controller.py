"""Minimal Textual adapter that wires ProseMode events into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from prose_engine.buffer import BufferMirror
from prose_engine.modes import KeyInput, ModeResult, ProseMode
from prose_engine.runtime import telemetry

PROSE_MARKER = "¶"
CODE_MARKER = "λ"


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


class TextualProseAdapter:
    """Bridges a ProseMode and its bus events to a Textual-friendly surface."""

    def __init__(self, mode: ProseMode, hooks: TextualUIHooks) -> None:
        self.mode = mode
        self.hooks = hooks
        self._subscribe_events()
        mode.on_enter()
        self._refresh_buffer()

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> ModeResult:
        """Translate a Textual key event into a KeyInput and dispatch it."""

        normalized = tuple(str(mod).upper() for mod in modifiers)
        self._log_state("key ->", key=key, text=text, mods=normalized)
        result = self.mode.handle_key(
            KeyInput(key=_normalize_key_name(key), text=text, modifiers=normalized)
        )
        status = result.message or result.status
        if status:
            self.hooks.update_status(status)
        self._refresh_buffer()
        self._log_state(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            message=result.message,
        )
        return result

    def render_lines(self) -> list[str]:
        """Buffer lines prefixed with a prose or code gutter marker."""

        mirror = self._mirror()
        return [
            f"{PROSE_MARKER if prose else CODE_MARKER} {line}"
            for line, prose in zip(mirror.lines(), mirror.prose_lines)
        ]

    def _subscribe_events(self) -> None:
        bus = self.mode.context.bus
        for event in ("prose.attached", "prose.detached", "prose.reclassified"):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)

    def _mirror(self) -> BufferMirror:
        buffer = self.mode.buffer
        return buffer.mirror(
            prose_lines=self.mode.prose_lines(),
            attributes={"mode": self.mode.name},
        )

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self._mirror())

    def _log_state(self, prefix: str, **fields: object) -> None:
        try:
            snapshot = self._state_metadata()
            snapshot.update({k: v for k, v in fields.items() if v is not None})
            parts = [prefix]
            for key, value in snapshot.items():
                parts.append(f"{key}={value!r}")
            self.hooks.log(" ".join(parts))
        except Exception as exc:
            telemetry.record_event(
                "adapter.log_failed",
                level="warning",
                data={"prefix": prefix, "error": str(exc)},
                logger_name="prose_engine.adapters",
            )

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.mode.buffer
        return {
            "mode": self.mode.name,
            "cursor": buffer.cursor,
            "line": buffer.document.line_number(buffer.cursor),
            "prose": self.mode.is_prose_line(buffer.cursor),
            "buffer": buffer.name,
            "buffer_version": buffer.document.version,
        }


def _normalize_key_name(key: str) -> str:
    aliases = {
        "tab": "TAB",
        "enter": "ENTER",
        "return": "ENTER",
        "backspace": "BACKSPACE",
        "left": "LEFT",
        "right": "RIGHT",
    }
    return aliases.get(key.lower(), key)


__all__ = ["TextualProseAdapter", "TextualUIHooks", "PROSE_MARKER", "CODE_MARKER"]
