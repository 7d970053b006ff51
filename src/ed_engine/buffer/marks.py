"""Named line marks (``a``-``z``) held by line identity."""

from __future__ import annotations

import string
from typing import Dict, Iterable, Optional

from ed_engine.errors import CommandSyntaxError

from .document import Line

MARK_NAMES = string.ascii_lowercase


class MarkTable:
    """Maps mark names to ``Line`` objects.

    A mark follows its line through insertions, deletions and moves elsewhere
    in the document because positions are looked up on demand. Deleting or
    replacing the line unsets the mark.
    """

    def __init__(self) -> None:
        self._marks: Dict[str, Line] = {}

    @staticmethod
    def validate_name(name: str) -> str:
        if len(name) != 1 or name not in MARK_NAMES:
            raise CommandSyntaxError("Invalid mark character")
        return name

    def set(self, name: str, line: Line) -> None:
        self._marks[self.validate_name(name)] = line

    def get(self, name: str) -> Optional[Line]:
        return self._marks.get(self.validate_name(name))

    def discard_lines(self, lines: Iterable[Line]) -> None:
        gone = {id(line) for line in lines}
        if not gone:
            return
        for name in [n for n, line in self._marks.items() if id(line) in gone]:
            del self._marks[name]

    def clear(self) -> None:
        self._marks.clear()


__all__ = ["MarkTable", "MARK_NAMES"]
