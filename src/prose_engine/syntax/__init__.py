"""Host-side syntax collaborators: boundaries, nesting depth, tokenizing."""

from .boundary import BoundaryPredicate
from .nesting import INITIAL_STATE, NestingOracle, ScanState
from .tokenizer import Token, Tokenizer

__all__ = [
    "BoundaryPredicate",
    "INITIAL_STATE",
    "NestingOracle",
    "ScanState",
    "Token",
    "Tokenizer",
]
