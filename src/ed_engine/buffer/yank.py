"""The single cut buffer shared by ``y``, ``d``, ``c`` and ``x``."""

from __future__ import annotations

from typing import Iterable, Tuple


class YankBuffer:
    """Holds the texts of the most recently yanked or deleted lines.

    Each store replaces the previous contents wholesale. The buffer is not
    part of the undo snapshot.
    """

    def __init__(self) -> None:
        self._lines: Tuple[str, ...] = ()

    def store(self, texts: Iterable[str]) -> None:
        self._lines = tuple(texts)

    def contents(self) -> Tuple[str, ...]:
        return self._lines

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)


__all__ = ["YankBuffer"]
