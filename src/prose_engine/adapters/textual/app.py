"""Executable Textual app that edits a document under ProseMode."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use prose_engine.adapters.textual.app"
    ) from exc

from prose_engine.buffer import Buffer, BufferMirror
from prose_engine.config import ProseConfig
from prose_engine.modes import ModeContext, ProseMode

from .controller import TextualProseAdapter, TextualUIHooks

_NAMED_KEYS = {
    "enter": "ENTER",
    "return": "ENTER",
    "tab": "TAB",
    "backspace": "BACKSPACE",
    "left": "LEFT",
    "right": "RIGHT",
    "escape": "ESC",
}


def create_mode(text: str = "", *, name: str = "default") -> ProseMode:
    """Build a ProseMode over a fresh buffer holding ``text``."""

    buffer = Buffer.from_text(text, name=name)
    return ProseMode(ModeContext(buffer=buffer), config=ProseConfig.from_env())


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""


class ProseEngineApp(App[None]):
    """Minimal Textual UI showing prose/code classification per line."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
		content-align: left top;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, text: str = "", name: str = "default") -> None:
        super().__init__()
        self._state = UIState()
        self._initial_text = text
        self._buffer_name = name
        self.adapter: TextualProseAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view", markup=False)
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            handle_event=self._handle_event,
        )
        mode = create_mode(self._initial_text, name=self._buffer_name)
        self.adapter = TextualProseAdapter(mode, hooks)

    def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text, modifiers = normalized
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        self._state.buffer_text = mirror.text
        if self._buffer_widget and self.adapter:
            self._buffer_widget.update("\n".join(self.adapter.render_lines()))

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _handle_event(self, name: str, payload: object | None) -> None:
        if name == "prose.reclassified" and isinstance(payload, dict):
            self._update_status(f"{name} changed={payload.get('changed', 0)}")

    @staticmethod
    def _normalize_key(
        event: events.Key,
    ) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
        parts = event.key.split("+")
        key = parts[-1]
        modifiers = tuple(part.upper() for part in parts[:-1])
        if event.key in {"ctrl+c", "ctrl+q"}:
            return None
        if key in _NAMED_KEYS:
            return (_NAMED_KEYS[key], None, modifiers)
        if event.character and event.is_printable and not modifiers:
            return (event.character, event.character, ())
        return (key, None, modifiers)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Edit a document with prose/code paragraph classification."
    )
    parser.add_argument("path", nargs="?", help="File to load into the buffer")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    text = ""
    name = "default"
    if args.path:
        path = Path(args.path)
        text = path.read_text(encoding="utf-8")
        name = path.name
    ProseEngineApp(text=text, name=name).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
