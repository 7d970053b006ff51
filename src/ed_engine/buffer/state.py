"""Current line, modification, and quit-warning state for the buffer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class BufferState:
    """Mutable dot + flags for the live document.

    ``warned`` is set when ``q``, ``e`` or end of input refused once because
    of unsaved changes; only a modification clears it.
    """

    dot: int = 0
    modified: bool = False
    warned: bool = False

    def set_dot(self, addr: int) -> None:
        self.dot = addr

    def mark_modified(self) -> None:
        self.modified = True
        self.warned = False

    def mark_saved(self) -> None:
        self.modified = False
