"""Character cursor over one command line."""

from __future__ import annotations

DIGITS = frozenset("0123456789")


class CommandScanner:
    """Reads a command line left to right.

    ``peek`` returns ``""`` at the end of the text, so callers can test
    characters without bounds checks. ``extend`` appends a continuation line
    for commands that run across escaped newlines.
    """

    __slots__ = ("text", "pos")

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if 0 <= index < len(self.text) else ""

    def advance(self, count: int = 1) -> None:
        self.pos = min(self.pos + count, len(self.text))

    def take(self) -> str:
        char = self.peek()
        self.advance()
        return char

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_blanks(self) -> None:
        while self.peek() in (" ", "\t") and not self.at_end():
            self.pos += 1

    def at_digit(self) -> bool:
        return self.peek() in DIGITS

    def read_int(self) -> int:
        start = self.pos
        while self.peek() in DIGITS:
            self.pos += 1
        return int(self.text[start : self.pos])

    def rest(self) -> str:
        remainder = self.text[self.pos :]
        self.pos = len(self.text)
        return remainder

    def extend(self, line: str) -> None:
        self.text = f"{self.text}\n{line}"

    def __repr__(self) -> str:
        return f"CommandScanner({self.text!r}, pos={self.pos})"


__all__ = ["CommandScanner", "DIGITS"]
