"""Printing, navigation, help, prompt and quit commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ed_engine.errors import SessionQuit, UnsavedChangesOnQuit

from .helpers import line_range, target_line
from .models import CommandKind, CommandRequest, PrintFlags
from .parsing import parse_suffix

if TYPE_CHECKING:  # pragma: no cover
    from ed_engine.session.context import EditorSession

_PRINT_STYLE = {
    CommandKind.PRINT: PrintFlags.PRINT,
    CommandKind.LIST: PrintFlags.LIST,
    CommandKind.NUMBER: PrintFlags.NUMBER,
}


def print_range(session: "EditorSession", request: CommandRequest) -> None:
    """``p``, ``l`` and ``n``; suffix flags combine with the command's own style."""

    first, second = line_range(session, request)
    flags = parse_suffix(request.scanner) | _PRINT_STYLE[request.kind]
    session.print_lines(first, second, flags)


def scroll(session: "EditorSession", request: CommandRequest) -> None:
    buffer = session.buffer
    start = target_line(
        session,
        request,
        buffer.dot if request.in_global else buffer.dot + 1,
        allow_zero=False,
    )
    scanner = request.scanner
    if scanner.at_digit() and scanner.peek() != "0":
        session.window_lines = scanner.read_int()
    flags = parse_suffix(scanner)
    session.print_lines(start, min(buffer.last_addr, start + session.window_lines - 1), flags)


def print_line_number(session: "EditorSession", request: CommandRequest) -> None:
    request.flags = parse_suffix(request.scanner)
    addr = request.addresses.second if request.addresses.count else session.buffer.last_addr
    session.write(f"{addr}\n")


def print_next(session: "EditorSession", request: CommandRequest) -> None:
    """A bare address (or an empty line) prints the addressed line."""

    buffer = session.buffer
    addr = target_line(
        session,
        request,
        buffer.dot if request.in_global else buffer.dot + 1,
        allow_zero=False,
    )
    session.print_lines(addr, addr, PrintFlags.PRINT)


def comment(session: "EditorSession", request: CommandRequest) -> None:
    request.scanner.rest()


def explain_error(session: "EditorSession", request: CommandRequest) -> None:
    request.flags = parse_suffix(request.scanner)
    message = session.diagnostics.explain()
    if message:
        session.write(f"{message}\n")


def toggle_verbose(session: "EditorSession", request: CommandRequest) -> None:
    request.flags = parse_suffix(request.scanner)
    message = session.diagnostics.explain()
    if session.diagnostics.toggle_verbose() and message:
        session.write(f"{message}\n")


def toggle_prompt(session: "EditorSession", request: CommandRequest) -> None:
    request.flags = parse_suffix(request.scanner)
    session.prompt_enabled = not session.prompt_enabled


def quit_session(session: "EditorSession", request: CommandRequest) -> None:
    """``q`` refuses once while the buffer has unsaved changes; ``Q`` never does."""

    parse_suffix(request.scanner)
    state = session.buffer.state
    if request.kind is CommandKind.QUIT and state.modified and not state.warned:
        state.warned = True
        raise UnsavedChangesOnQuit()
    raise SessionQuit()


__all__ = [
    "comment",
    "explain_error",
    "print_line_number",
    "print_next",
    "print_range",
    "quit_session",
    "scroll",
    "toggle_prompt",
    "toggle_verbose",
]
