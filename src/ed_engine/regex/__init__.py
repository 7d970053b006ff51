"""POSIX regular expressions on top of Python's ``re``."""

from .engine import CompiledPattern, PatternEngine, Substitution
from .replacement import ReplacementTemplate
from .translate import find_delimiter, translate

__all__ = [
    "CompiledPattern",
    "PatternEngine",
    "ReplacementTemplate",
    "Substitution",
    "find_delimiter",
    "translate",
]
