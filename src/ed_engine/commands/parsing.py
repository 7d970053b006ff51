"""Small parsers for the pieces that follow a command letter."""

from __future__ import annotations

from typing import Tuple

from ed_engine.errors import CommandSyntaxError
from ed_engine.regex import find_delimiter

from .models import PrintFlags
from .scanner import CommandScanner


def at_line_end(scanner: CommandScanner) -> bool:
    return scanner.at_end() or scanner.peek() == "\n"


def parse_suffix(scanner: CommandScanner) -> PrintFlags:
    """Read trailing ``p``/``l``/``n`` flags; nothing else may follow."""

    flags = PrintFlags.NONE
    while scanner.peek() in ("p", "l", "n"):
        flags |= PrintFlags.from_char(scanner.take())
    if not at_line_end(scanner):
        raise CommandSyntaxError("Invalid command suffix")
    return flags


def expect_blank_or_end(scanner: CommandScanner) -> None:
    """File commands need whitespace between the letter and the name."""

    if not (at_line_end(scanner) or scanner.peek() in (" ", "\t")):
        raise CommandSyntaxError("Unexpected command suffix")


def parse_filename(scanner: CommandScanner) -> str:
    scanner.skip_blanks()
    name = scanner.rest()
    return name.split("\n", 1)[0]


def read_pattern(scanner: CommandScanner, delimiter: str) -> Tuple[str, bool]:
    """Read up to the unescaped ``delimiter`` on the current line.

    Returns the pattern text and whether the closing delimiter was present.
    The scanner is left just past the delimiter (or at the end of the line).
    """

    text = scanner.text
    start = scanner.pos
    line_end = text.find("\n", start)
    if line_end < 0:
        line_end = len(text)
    index = find_delimiter(text[:line_end], start, delimiter)
    if index < 0:
        scanner.pos = line_end
        return text[start:line_end], False
    scanner.pos = index + 1
    return text[start:index], True


def check_delimiter(char: str) -> str:
    if char in ("", " ", "\n", "\\"):
        raise CommandSyntaxError("Invalid pattern delimiter")
    return char


__all__ = [
    "at_line_end",
    "check_delimiter",
    "expect_blank_or_end",
    "parse_filename",
    "parse_suffix",
    "read_pattern",
]
