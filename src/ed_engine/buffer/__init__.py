"""Line buffer, marks, cut buffer, and single-level undo."""

from .buffer import LineBuffer, RemovalListener, Transaction
from .document import Line, LineDocument
from .marks import MARK_NAMES, MarkTable
from .state import BufferState
from .sync import BufferMirror
from .undo import UndoSlot, UndoSnapshot
from .validation import ensure_address, ensure_range
from .yank import YankBuffer

__all__ = [
    "Line",
    "LineDocument",
    "BufferState",
    "MarkTable",
    "MARK_NAMES",
    "YankBuffer",
    "UndoSlot",
    "UndoSnapshot",
    "LineBuffer",
    "Transaction",
    "RemovalListener",
    "BufferMirror",
    "ensure_address",
    "ensure_range",
]
