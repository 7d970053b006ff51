"""Typed command model shared by the parser, dispatcher, and handlers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import TYPE_CHECKING

from ed_engine.errors import UnknownCommand

if TYPE_CHECKING:  # pragma: no cover
    from .channel import InputChannel
    from .scanner import CommandScanner


class CommandKind(str, Enum):
    """Every command letter the editor understands."""

    APPEND = "a"
    CHANGE = "c"
    DELETE = "d"
    EDIT = "e"
    EDIT_FORCED = "E"
    FILENAME = "f"
    GLOBAL = "g"
    GLOBAL_INTERACTIVE = "G"
    HELP = "h"
    HELP_MODE = "H"
    INSERT = "i"
    JOIN = "j"
    MARK = "k"
    LIST = "l"
    MOVE = "m"
    NUMBER = "n"
    PRINT = "p"
    PROMPT = "P"
    QUIT = "q"
    QUIT_FORCED = "Q"
    READ = "r"
    SUBSTITUTE = "s"
    TRANSFER = "t"
    UNDO = "u"
    INVERSE = "v"
    INVERSE_INTERACTIVE = "V"
    WRITE = "w"
    WRITE_APPEND = "W"
    PUT = "x"
    YANK = "y"
    SCROLL = "z"
    LINE_NUMBER = "="
    SHELL = "!"
    COMMENT = "#"
    NULL = ""

    @classmethod
    def from_char(cls, char: str) -> "CommandKind":
        try:
            return cls(char)
        except ValueError:
            raise UnknownCommand() from None

    @property
    def is_global(self) -> bool:
        return self in _GLOBAL_KINDS


_GLOBAL_KINDS = frozenset(
    {
        CommandKind.GLOBAL,
        CommandKind.GLOBAL_INTERACTIVE,
        CommandKind.INVERSE,
        CommandKind.INVERSE_INTERACTIVE,
    }
)

# Commands that refuse any address prefix.
ADDRESSLESS = frozenset(
    {
        CommandKind.EDIT,
        CommandKind.EDIT_FORCED,
        CommandKind.FILENAME,
        CommandKind.HELP,
        CommandKind.HELP_MODE,
        CommandKind.PROMPT,
        CommandKind.QUIT,
        CommandKind.QUIT_FORCED,
        CommandKind.UNDO,
    }
)


class PrintFlags(IntFlag):
    NONE = 0
    NUMBER = 1
    LIST = 2
    PRINT = 4

    @classmethod
    def from_char(cls, char: str) -> "PrintFlags":
        return _FLAG_CHARS.get(char, cls.NONE)


_FLAG_CHARS = {"p": PrintFlags.PRINT, "l": PrintFlags.LIST, "n": PrintFlags.NUMBER}


class InputMode(str, Enum):
    """What kind of line a suspended command is waiting for."""

    COMMAND = "command"
    TEXT = "text"
    CONTINUATION = "continuation"
    GLOBAL_COMMAND = "global"


@dataclass(slots=True)
class AddressRange:
    """Resolved addresses of a command line.

    ``count`` is how many addresses were written (0, 1 or 2). With none,
    ``first`` and ``second`` both equal dot and each command applies its own
    default.
    """

    first: int
    second: int
    count: int = 0

    def defaults(self, first: int, second: int) -> "AddressRange":
        if self.count:
            return self
        return AddressRange(first=first, second=second, count=0)


@dataclass(slots=True)
class CommandRequest:
    """One parsed command, handed to its handler."""

    kind: CommandKind
    addresses: AddressRange
    scanner: "CommandScanner"
    channel: "InputChannel"
    in_global: bool = False
    flags: PrintFlags = PrintFlags.NONE


__all__ = [
    "ADDRESSLESS",
    "AddressRange",
    "CommandKind",
    "CommandRequest",
    "InputMode",
    "PrintFlags",
]
