"""Incremental prose/code paragraph classification for Lisp-style documents."""

__all__ = [
    "adapters",
    "buffer",
    "classifier",
    "config",
    "modes",
    "rules",
    "runtime",
    "syntax",
    "tags",
]

__version__ = "0.1.0"
