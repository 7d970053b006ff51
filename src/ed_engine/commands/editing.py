"""Handlers for the commands that change buffer content."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Generator, Optional, Sequence

from ed_engine.buffer import Line, MarkTable
from ed_engine.errors import (
    CommandSyntaxError,
    NoPreviousSubstitution,
    SubstitutionNoMatch,
)
from ed_engine.regex import ReplacementTemplate, Substitution

from .channel import InputGenerator
from .helpers import enter_text, line_range, target_line
from .models import CommandRequest, InputMode, PrintFlags
from .parsing import at_line_end, check_delimiter, parse_suffix, read_pattern
from .scanner import CommandScanner

if TYPE_CHECKING:  # pragma: no cover
    from ed_engine.session.context import EditorSession


def append_text(session: "EditorSession", request: CommandRequest) -> InputGenerator:
    after = target_line(session, request)
    request.flags = parse_suffix(request.scanner)
    session.checkpoint(request)
    yield from enter_text(session, request, after)


def insert_text(session: "EditorSession", request: CommandRequest) -> InputGenerator:
    addr = max(target_line(session, request), 1)
    request.flags = parse_suffix(request.scanner)
    session.checkpoint(request)
    yield from enter_text(session, request, addr - 1, empty_dot=addr)


def change_lines(session: "EditorSession", request: CommandRequest) -> InputGenerator:
    addresses = request.addresses
    if addresses.count:
        addresses.first = max(addresses.first, 1)
        addresses.second = max(addresses.second, 1)
    first, second = line_range(session, request)
    request.flags = parse_suffix(request.scanner)
    session.checkpoint(request)
    session.buffer.delete_range(first, second)
    yield from enter_text(session, request, first - 1, empty_dot=first)


def delete_lines(session: "EditorSession", request: CommandRequest) -> None:
    first, second = line_range(session, request)
    request.flags = parse_suffix(request.scanner)
    session.checkpoint(request)
    session.buffer.delete_range(first, second)


def join_lines(session: "EditorSession", request: CommandRequest) -> None:
    dot = session.buffer.dot
    first, second = line_range(session, request, dot, dot + 1)
    request.flags = parse_suffix(request.scanner)
    session.checkpoint(request)
    session.buffer.join_range(first, second)


def _destination(session: "EditorSession", scanner: CommandScanner) -> int:
    return session.resolver.extract(scanner).second


def move_lines(session: "EditorSession", request: CommandRequest) -> None:
    first, second = line_range(session, request)
    dest = _destination(session, request.scanner)
    if first <= dest < second:
        raise CommandSyntaxError("Invalid destination")
    request.flags = parse_suffix(request.scanner)
    session.checkpoint(request)
    session.buffer.move_range(first, second, dest)


def transfer_lines(session: "EditorSession", request: CommandRequest) -> None:
    first, second = line_range(session, request)
    dest = _destination(session, request.scanner)
    request.flags = parse_suffix(request.scanner)
    session.checkpoint(request)
    session.buffer.copy_range(first, second, dest)


def yank_lines(session: "EditorSession", request: CommandRequest) -> None:
    first, second = line_range(session, request)
    request.flags = parse_suffix(request.scanner)
    session.buffer.yank_range(first, second)


def put_lines(session: "EditorSession", request: CommandRequest) -> None:
    addr = target_line(session, request)
    request.flags = parse_suffix(request.scanner)
    session.checkpoint(request)
    session.buffer.put_after(addr)


def mark_line(session: "EditorSession", request: CommandRequest) -> None:
    addr = target_line(session, request, allow_zero=False)
    name = MarkTable.validate_name(request.scanner.take())
    request.flags = parse_suffix(request.scanner)
    session.buffer.set_mark(name, addr)


def undo_change(session: "EditorSession", request: CommandRequest) -> None:
    request.flags = parse_suffix(request.scanner)
    session.buffer.undo()


# -- substitute --------------------------------------------------------------


def substitute(session: "EditorSession", request: CommandRequest) -> InputGenerator:
    """``s/re/replacement/flags`` and the bare repeat form ``s[g][p][r][N]``."""

    first, second = line_range(session, request)
    scanner = request.scanner
    if at_line_end(scanner) or scanner.peek() in "gpr" or scanner.at_digit():
        substitution = _repeat_substitution(session, scanner)
    else:
        substitution = yield from _parse_substitution(session, request)
    session.patterns.commit_substitution(substitution)

    session.checkpoint(request)
    buffer = session.buffer
    pattern = substitution.pattern
    rewrites: Dict[Line, Sequence[str]] = {}
    for line in buffer.document.slice(first, second):
        result = pattern.substitute(
            line.text,
            substitution.template,
            occurrence=substitution.occurrence,
            global_=substitution.global_,
        )
        if result is not None:
            rewrites[line] = result.split("\n")
    if not rewrites:
        if request.in_global:
            return
        raise SubstitutionNoMatch()
    buffer.rewrite_lines(first, second, rewrites)
    request.flags = PrintFlags(substitution.print_flags)


def _repeat_substitution(session: "EditorSession", scanner: CommandScanner) -> Substitution:
    previous = session.patterns.last_substitution
    if previous is None:
        raise NoPreviousSubstitution()
    pattern = previous.pattern
    occurrence = previous.occurrence
    global_ = previous.global_
    flags = PrintFlags(previous.print_flags)
    while not at_line_end(scanner):
        char = scanner.peek()
        if scanner.at_digit():
            occurrence = _read_count(scanner)
            continue
        scanner.advance()
        if char == "g":
            global_ = not global_
        elif char == "p":
            flags ^= PrintFlags.PRINT
        elif char == "r":
            pattern = session.patterns.compile("")
        else:
            raise CommandSyntaxError("Invalid command suffix")
    return Substitution(
        pattern=pattern,
        template=previous.template,
        occurrence=occurrence,
        global_=global_,
        print_flags=int(flags),
    )


def _parse_substitution(
    session: "EditorSession", request: CommandRequest
) -> Generator[InputMode, Optional[str], Substitution]:
    scanner = request.scanner
    delimiter = check_delimiter(scanner.take())
    source, closed = read_pattern(scanner, delimiter)
    if not closed:
        raise CommandSyntaxError("Missing pattern delimiter")

    start = scanner.pos
    closed = False
    while not scanner.at_end():
        char = scanner.peek()
        if char == "\\":
            if scanner.pos + 1 >= len(scanner.text):
                line = yield from request.channel.read(InputMode.CONTINUATION)
                if line is None:
                    raise CommandSyntaxError("Unexpected end of file")
                scanner.extend(line)
            scanner.advance(2)
            continue
        if char == delimiter:
            closed = True
            break
        scanner.advance()
    raw = scanner.text[start : scanner.pos]

    occurrence = 1
    global_ = False
    ignore_case = False
    flags = PrintFlags.NONE
    if closed:
        scanner.advance()
        seen_count = False
        while not at_line_end(scanner):
            char = scanner.peek()
            if scanner.at_digit():
                if seen_count:
                    raise CommandSyntaxError("Invalid command suffix")
                occurrence = _read_count(scanner)
                seen_count = True
                continue
            scanner.advance()
            if char == "g" and not global_:
                global_ = True
            elif char in ("p", "l", "n"):
                flags |= PrintFlags.from_char(char)
            elif char in ("I", "i") and not ignore_case:
                ignore_case = True
            else:
                raise CommandSyntaxError("Invalid command suffix")
    else:
        flags = PrintFlags.PRINT

    pattern = session.patterns.compile(source, ignore_case=ignore_case)
    if raw == "%":
        previous = session.patterns.last_substitution
        if previous is None:
            raise NoPreviousSubstitution()
        template = previous.template
    else:
        template = ReplacementTemplate.parse(raw)
    return Substitution(
        pattern=pattern,
        template=template,
        occurrence=occurrence,
        global_=global_,
        print_flags=int(flags),
    )


def _read_count(scanner: CommandScanner) -> int:
    count = scanner.read_int()
    if count == 0:
        raise CommandSyntaxError("Invalid command suffix")
    return count


__all__ = [
    "append_text",
    "change_lines",
    "delete_lines",
    "insert_text",
    "join_lines",
    "mark_line",
    "move_lines",
    "put_lines",
    "substitute",
    "transfer_lines",
    "undo_change",
    "yank_lines",
]
