"""Mode glue binding the classifier and rules to an editing surface."""

from .base_mode import KeyInput, Mode, ModeBus, ModeContext, ModeResult
from .prose_mode import ProseMode

__all__ = [
    "KeyInput",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeResult",
    "ProseMode",
]
