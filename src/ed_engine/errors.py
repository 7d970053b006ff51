"""Error types raised by the editing engine.

Every command-level failure is an ``EdError``. The message is the exact text
the ``h`` command prints; ``kind`` names the failure class for callers that
want to branch without matching on message strings.
"""

from __future__ import annotations

from typing import Optional


class EdError(RuntimeError):
    """Base class for recoverable command errors."""

    kind = "error"
    default_message = "Unknown error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class AddressOutOfRange(EdError):
    kind = "address_out_of_range"
    default_message = "Invalid address"


class InvalidAddressSyntax(EdError):
    kind = "invalid_address_syntax"
    default_message = "Invalid address"


class MarkUnset(EdError):
    kind = "mark_unset"
    default_message = "Invalid address"


class NoPreviousPattern(EdError):
    kind = "no_previous_pattern"
    default_message = "No previous pattern"


class PatternNotFound(EdError):
    kind = "pattern_not_found"
    default_message = "No match"


class SubstitutionNoMatch(EdError):
    kind = "substitution_no_match"
    default_message = "No match"


class NoPreviousSubstitution(EdError):
    kind = "no_previous_substitution"
    default_message = "No previous substitution"


class UnknownCommand(EdError):
    kind = "unknown_command"
    default_message = "Unknown command"


class CommandSyntaxError(EdError):
    """Malformed suffixes, delimiters, destinations and similar."""

    kind = "command_syntax"
    default_message = "Invalid command suffix"


class RegexSyntaxError(EdError):
    kind = "regex_syntax"
    default_message = "Invalid regular expression"


class UnsavedChangesOnQuit(EdError):
    kind = "unsaved_changes"
    default_message = "Warning: buffer modified"


class IOFailure(EdError):
    kind = "io_failure"
    default_message = "Cannot open input file"


class FileAccessError(IOFailure):
    """File could not be opened; ``reason`` carries the OS explanation."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        path: str = "",
        reason: str = "",
    ) -> None:
        super().__init__(message)
        self.path = path
        self.reason = reason


class ShellSpawnFailure(EdError):
    kind = "shell_spawn_failure"
    default_message = "Can't create shell process"


class NestedGlobalDisallowed(EdError):
    kind = "nested_global"
    default_message = "Cannot nest global commands"


class NothingToUndo(EdError):
    kind = "nothing_to_undo"
    default_message = "Nothing to undo"


class NothingToPut(EdError):
    kind = "nothing_to_put"
    default_message = "Nothing to put"


class InterruptedCommand(EdError):
    kind = "interrupt"
    default_message = "Interrupt"


class SessionQuit(Exception):
    """Raised by quit commands to unwind the dispatcher."""

    def __init__(self, status: int = 0) -> None:
        super().__init__(status)
        self.status = status


__all__ = [
    "EdError",
    "AddressOutOfRange",
    "InvalidAddressSyntax",
    "MarkUnset",
    "NoPreviousPattern",
    "PatternNotFound",
    "SubstitutionNoMatch",
    "NoPreviousSubstitution",
    "UnknownCommand",
    "CommandSyntaxError",
    "RegexSyntaxError",
    "UnsavedChangesOnQuit",
    "IOFailure",
    "FileAccessError",
    "ShellSpawnFailure",
    "NestedGlobalDisallowed",
    "NothingToUndo",
    "NothingToPut",
    "InterruptedCommand",
    "SessionQuit",
]
