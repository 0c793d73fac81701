from __future__ import annotations

from typing import Any, Dict, List

from prose_engine.adapters.textual import (
    CODE_MARKER,
    PROSE_MARKER,
    TextualProseAdapter,
    TextualUIHooks,
)
from prose_engine.buffer import Buffer
from prose_engine.config import ProseConfig
from prose_engine.modes import ModeContext, ProseMode


def make_mode(text: str = "") -> ProseMode:
    return ProseMode(ModeContext(buffer=Buffer.from_text(text)), config=ProseConfig())


def test_adapter_updates_buffer_and_status() -> None:
    updates: List[str] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: updates.append(mirror.text),
        update_status=lambda status: statuses.append(status),
    )
    adapter = TextualProseAdapter(make_mode(), hooks)

    adapter.handle_textual_key("H", text="H")
    adapter.handle_textual_key("i", text="i")
    adapter.handle_textual_key("enter")

    assert updates[0] == ""
    assert updates[-1] == "Hi\n"
    assert statuses == ["insert", "insert", "break_line"]


def test_adapter_renders_classification_markers() -> None:
    hooks = TextualUIHooks(update_buffer=lambda mirror: None)
    adapter = TextualProseAdapter(make_mode("(foo)\n\nPlain words\n"), hooks)

    assert adapter.render_lines() == [
        f"{CODE_MARKER} (foo)",
        f"{CODE_MARKER} ",
        f"{PROSE_MARKER} Plain words",
        f"{CODE_MARKER} ",
    ]


def test_adapter_relays_prose_events() -> None:
    events: List[Dict[str, Any]] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        handle_event=lambda name, payload: events.append(
            {"name": name, "payload": payload}
        ),
    )
    adapter = TextualProseAdapter(make_mode("Hello\n"), hooks)

    adapter.handle_textual_key("(", text="(")

    names = [event["name"] for event in events]
    assert names == ["prose.attached", "prose.reclassified"]
    assert events[-1]["payload"] == {"start": 0, "end": 1, "changed": 1}


def test_adapter_normalizes_modifiers() -> None:
    mirrors: List[str] = []
    hooks = TextualUIHooks(update_buffer=lambda mirror: mirrors.append(mirror.text))
    adapter = TextualProseAdapter(make_mode("one\ntwo\n"), hooks)

    result = adapter.handle_textual_key("q", modifiers=("alt",))

    assert result.message == "fill_paragraph"
    assert mirrors[-1] == "one two\n"


def test_adapter_emits_log_lines() -> None:
    logs: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        log=lambda line: logs.append(line),
    )
    adapter = TextualProseAdapter(make_mode(), hooks)

    adapter.handle_textual_key("a", text="a")

    assert any(line.startswith("key ->") for line in logs)
    assert any("line=0" in line for line in logs)
    assert any("prose=True" in line for line in logs if line.startswith("result <-"))


def test_failing_log_hook_does_not_break_key_handling() -> None:
    def broken_log(line: str) -> None:
        raise RuntimeError("log sink closed")

    hooks = TextualUIHooks(update_buffer=lambda mirror: None, log=broken_log)
    adapter = TextualProseAdapter(make_mode(), hooks)

    result = adapter.handle_textual_key("a", text="a")

    assert result.consumed
    assert adapter.mode.buffer.text == "a"
