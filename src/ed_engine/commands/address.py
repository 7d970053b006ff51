"""Address expression evaluation."""

from __future__ import annotations

from typing import Optional

from ed_engine.buffer import LineBuffer, MarkTable
from ed_engine.errors import AddressOutOfRange, InvalidAddressSyntax
from ed_engine.regex import PatternEngine

from .models import AddressRange
from .parsing import read_pattern
from .scanner import DIGITS, CommandScanner


class AddressResolver:
    """Parses the address prefix of a command line against the buffer.

    Grammar, per address: a base (number, ``.``, ``$``, ``/re/``, ``?re?``,
    ``'x``) followed by any number of offsets (``+n``, ``-n``, bare ``+``/``-``,
    or a plain number, which adds). An offset with no base is relative to
    dot. Addresses are separated by ``,`` or ``;``; ``;`` moves dot to the
    address on its left. A leading ``,`` or ``%`` means ``1,$`` and a leading
    ``;`` means ``.,$``. With more than two addresses the last two count.
    """

    def __init__(self, buffer: LineBuffer, patterns: PatternEngine) -> None:
        self.buffer = buffer
        self.patterns = patterns

    def extract(self, scanner: CommandScanner) -> AddressRange:
        buffer = self.buffer
        addresses: list[int] = []
        building: Optional[int] = None
        separator_seen = False
        leading = False

        scanner.skip_blanks()
        while True:
            char = scanner.peek()
            if char in DIGITS:
                value = scanner.read_int()
                building = value if building is None else building + value
            elif char in ("+", "-"):
                scanner.advance()
                if building is None:
                    building = buffer.dot
                step = scanner.read_int() if scanner.at_digit() else 1
                building += step if char == "+" else -step
            elif char in (".", "$"):
                if building is not None:
                    raise InvalidAddressSyntax()
                scanner.advance()
                building = buffer.dot if char == "." else buffer.last_addr
            elif char in ("/", "?"):
                if building is not None:
                    raise InvalidAddressSyntax()
                building = self.search(scanner)
            elif char == "'":
                if building is not None:
                    raise InvalidAddressSyntax()
                scanner.advance()
                building = buffer.resolve_mark(MarkTable.validate_name(scanner.take()))
            elif char in (" ", "\t"):
                scanner.skip_blanks()
            elif char in (",", ";", "%"):
                scanner.advance()
                if building is not None:
                    addresses.append(self._validate(building))
                    if char == ";":
                        buffer.set_dot(addresses[-1])
                    building = None
                    leading = False
                elif not addresses:
                    addresses.append(buffer.dot if char == ";" else 1)
                    leading = True
                separator_seen = True
            else:
                break

        if building is not None:
            addresses.append(self._validate(building))
        elif separator_seen:
            addresses.append(buffer.last_addr if leading else addresses[-1])

        if not addresses:
            return AddressRange(first=buffer.dot, second=buffer.dot, count=0)
        if len(addresses) == 1:
            return AddressRange(first=addresses[0], second=addresses[0], count=1)
        return AddressRange(first=addresses[-2], second=addresses[-1], count=2)

    def search(self, scanner: CommandScanner) -> int:
        """Evaluate ``/re/`` or ``?re?`` starting at the scanner position."""

        delimiter = scanner.take()
        source, closed = read_pattern(scanner, delimiter)
        ignore_case = False
        if closed and scanner.peek() == "I":
            scanner.advance()
            ignore_case = True
        pattern = self.patterns.resolve(source, ignore_case=ignore_case)
        return self.patterns.search(
            pattern,
            self.buffer.document.texts(),
            self.buffer.dot,
            forward=delimiter == "/",
        )

    def _validate(self, addr: int) -> int:
        if addr < 0 or addr > self.buffer.last_addr:
            raise AddressOutOfRange()
        return addr


__all__ = ["AddressResolver"]
