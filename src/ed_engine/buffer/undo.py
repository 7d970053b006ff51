"""Single-level undo stored as a swappable shadow snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ed_engine.errors import NothingToUndo

from .document import LineDocument


@dataclass(slots=True)
class UndoSnapshot:
    document: LineDocument
    dot: int
    modified: bool


class UndoSlot:
    """Two-slot undo: the buffer holds the live state, this holds the shadow.

    ``arm`` runs when a mutating command starts and remembers the dot and
    modified flag of that moment. The document is copied by ``capture`` on
    the first real mutation only, so a command that edits many lines pays
    for one copy and a command that changes nothing leaves nothing to undo.
    ``swap`` exchanges shadow and live state, which makes a second undo redo
    the change.
    """

    def __init__(self) -> None:
        self._armed: Optional[Tuple[int, bool]] = None
        self._snapshot: Optional[UndoSnapshot] = None

    def arm(self, dot: int, modified: bool) -> None:
        self._armed = (dot, modified)
        self._snapshot = None

    def capture(self, document: LineDocument) -> None:
        if self._armed is None:
            return
        dot, modified = self._armed
        self._snapshot = UndoSnapshot(document=document.copy(), dot=dot, modified=modified)
        self._armed = None

    def swap(self, live: UndoSnapshot) -> UndoSnapshot:
        if self._snapshot is None:
            raise NothingToUndo()
        previous = self._snapshot
        self._snapshot = live
        self._armed = None
        return previous

    def reset(self) -> None:
        self._armed = None
        self._snapshot = None


__all__ = ["UndoSnapshot", "UndoSlot"]
