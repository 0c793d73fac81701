"""Explicit configuration threaded through the classifier and editing rules."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

ENV_PREFIX = "PROSE_ENGINE_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class ProseConfig:
    """Widths, bracket sets and separator rules for one editing surface."""

    fill_column: int = 70
    separator_pattern: str = r"[ \t\f]*$"
    open_brackets: str = "(["
    close_brackets: str = ")]"
    comment_marker: str = ";"
    quote_char: str = "`"
    string_delimiter: str = '"'
    escape_char: str = "\\"
    code_indent_offset: int = 2
    tab_width: int = 8
    use_hard_newlines: bool = False
    _separator_re: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.fill_column <= 0:
            raise ValueError("fill_column must be positive")
        if self.tab_width <= 0:
            raise ValueError("tab_width must be positive")
        if len(self.open_brackets) != len(self.close_brackets):
            raise ValueError("open_brackets and close_brackets must pair up")
        if not self.comment_marker:
            raise ValueError("comment_marker cannot be empty")
        object.__setattr__(self, "_separator_re", re.compile(self.separator_pattern))

    @property
    def separator_re(self) -> re.Pattern[str]:
        return self._separator_re

    def with_overrides(self, **changes: object) -> "ProseConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(
        cls,
        *,
        prefix: str = ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
        base: Optional["ProseConfig"] = None,
    ) -> "ProseConfig":
        """Build a config from ``PROSE_ENGINE_*`` variables layered on ``base``."""

        env = os.environ if environ is None else environ
        config = base or cls()
        changes: dict[str, object] = {}

        for name in ("fill_column", "code_indent_offset", "tab_width"):
            raw = env.get(f"{prefix}{name.upper()}")
            if raw is None:
                continue
            try:
                changes[name] = int(raw)
            except ValueError as exc:
                raise ValueError(
                    f"{prefix}{name.upper()} must be an integer, got {raw!r}"
                ) from exc

        raw_flag = env.get(f"{prefix}USE_HARD_NEWLINES")
        if raw_flag is not None:
            lowered = raw_flag.lower()
            if lowered not in _TRUE_VALUES | _FALSE_VALUES:
                raise ValueError(
                    f"{prefix}USE_HARD_NEWLINES must be a boolean flag, got {raw_flag!r}"
                )
            changes["use_hard_newlines"] = lowered in _TRUE_VALUES

        pattern = env.get(f"{prefix}SEPARATOR_PATTERN")
        if pattern:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(
                    f"{prefix}SEPARATOR_PATTERN is not a valid regex: {exc}"
                ) from exc
            changes["separator_pattern"] = pattern

        return replace(config, **changes) if changes else config


DEFAULT_CONFIG = ProseConfig()

__all__ = ["ENV_PREFIX", "ProseConfig", "DEFAULT_CONFIG"]
