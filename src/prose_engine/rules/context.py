"""Shared state handed to every editing rule."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from prose_engine.buffer import Buffer
from prose_engine.classifier import is_prose_line
from prose_engine.config import DEFAULT_CONFIG, ProseConfig
from prose_engine.syntax import BoundaryPredicate, NestingOracle

FillOverride = Callable[["RuleContext", int, int, bool], bool]


@dataclass(slots=True)
class RuleContext:
    """Buffer plus the collaborators the rules consult.

    ``fill_override`` stands in for a host-level fill replacement; the prose
    fill path always bypasses it so it cannot re-enter itself.
    """

    buffer: Buffer
    boundary: BoundaryPredicate
    oracle: NestingOracle
    config: ProseConfig = DEFAULT_CONFIG
    fill_override: Optional[FillOverride] = None

    def is_prose_line(self, pos: int) -> bool:
        return is_prose_line(self.buffer.document, self.buffer.tags, pos)
