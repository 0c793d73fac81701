"""Textual host adapter for the prose engine."""

from .controller import CODE_MARKER, PROSE_MARKER, TextualProseAdapter, TextualUIHooks

__all__ = ["CODE_MARKER", "PROSE_MARKER", "TextualProseAdapter", "TextualUIHooks"]
