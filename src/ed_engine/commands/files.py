"""File and shell commands: ``e E f r w W wq !``."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Tuple

from ed_engine.errors import (
    CommandSyntaxError,
    EdError,
    SessionQuit,
    UnsavedChangesOnQuit,
)
from ed_engine.host import ReadResult, split_text

from .helpers import line_range, target_line, whole_buffer
from .models import CommandKind, CommandRequest
from .parsing import expect_blank_or_end, parse_filename
from .scanner import CommandScanner

if TYPE_CHECKING:  # pragma: no cover
    from ed_engine.session.context import EditorSession


# -- argument helpers --------------------------------------------------------


def expand_shell_command(session: "EditorSession", text: str) -> str:
    """Expand ``!!`` and ``%`` in a shell command and remember the result.

    A leading ``!`` stands for the previous command, ``%`` for the current
    filename and ``\\%`` for a literal percent sign. When anything was
    expanded the final command is echoed.
    """

    if session.restricted:
        raise CommandSyntaxError("Shell access restricted")
    pieces: list[str] = []
    expanded = False
    index = 0
    if text.startswith("!"):
        if session.last_shell_command is None:
            raise CommandSyntaxError("No previous command")
        pieces.append(session.last_shell_command)
        expanded = True
        index = 1
    while index < len(text):
        char = text[index]
        if char == "%":
            if not session.filename:
                raise CommandSyntaxError("No current filename")
            pieces.append(session.filename)
            expanded = True
        elif char == "\\" and text[index + 1 : index + 2] == "%":
            pieces.append("%")
            index += 1
        else:
            pieces.append(char)
        index += 1
    command = "".join(pieces)
    session.last_shell_command = command
    if expanded:
        session.write(f"{command}\n")
    return command


def file_argument(session: "EditorSession", scanner: CommandScanner) -> str:
    """Filename operand of a file command.

    Returns ``"!command"`` for shell redirections, the named file, or the
    current filename when none is given.
    """

    expect_blank_or_end(scanner)
    name = parse_filename(scanner)
    if name.startswith("!"):
        return "!" + expand_shell_command(session, name[1:])
    if not name:
        if not session.filename:
            raise CommandSyntaxError("No current filename")
        name = session.filename
    elif name.startswith("~/"):
        home = os.environ.get("HOME", "")
        if home:
            name = home + name[1:]
    return session.check_access(name)


def _read_source(session: "EditorSession", source: str) -> ReadResult:
    if source.startswith("!"):
        result = session.shell.run(source[1:])
        return split_text(result.output)
    return session.files.read_lines(source)


def _remember_filename(session: "EditorSession", name: str) -> None:
    if not session.filename and not name.startswith("!"):
        session.filename = name


# -- commands ----------------------------------------------------------------


def edit_file(session: "EditorSession", source: str) -> int:
    """Replace the buffer with ``source`` (a file or ``!command``).

    The buffer is emptied even when the read fails. Returns the byte count.
    """

    if not source.startswith("!"):
        session.filename = source
    try:
        result = _read_source(session, source)
    except EdError:
        session.buffer.load([])
        raise
    session.buffer.load(result.lines, trailing_newline=result.trailing_newline)
    return result.byte_count


def edit(session: "EditorSession", request: CommandRequest) -> None:
    state = session.buffer.state
    if request.kind is CommandKind.EDIT and state.modified and not state.warned:
        state.warned = True
        raise UnsavedChangesOnQuit()
    source = file_argument(session, request.scanner)
    session.report_size(edit_file(session, source))


def filename(session: "EditorSession", request: CommandRequest) -> None:
    scanner = request.scanner
    expect_blank_or_end(scanner)
    name = parse_filename(scanner)
    if name:
        if name.startswith("!"):
            raise CommandSyntaxError("Invalid redirection")
        session.filename = session.check_access(name)
    elif not session.filename:
        raise CommandSyntaxError("No current filename")
    session.write(f"{session.filename}\n")


def read_file(session: "EditorSession", request: CommandRequest) -> None:
    addr = target_line(session, request, session.buffer.last_addr)
    source = file_argument(session, request.scanner)
    _remember_filename(session, source)
    result = _read_source(session, source)
    session.checkpoint(request)
    session.buffer.insert_after(
        addr,
        result.lines,
        unterminated=not result.trailing_newline,
        label="read",
    )
    session.report_size(result.byte_count)


def write_file(session: "EditorSession", request: CommandRequest) -> None:
    """``w``, ``W`` (append) and ``wq``.

    Writing the whole buffer to a file clears the modified flag. ``wq``
    after a partial write still refuses to quit once.
    """

    scanner = request.scanner
    quit_after = scanner.peek() in ("q", "Q")
    forced = scanner.peek() == "Q"
    if quit_after:
        scanner.advance()
    source = file_argument(session, scanner)
    first, second = whole_buffer(session, request)
    _remember_filename(session, source)

    buffer = session.buffer
    texts = buffer.texts(first, second) if second else []
    trailing = buffer.writes_final_newline(second) if second else True
    if source.startswith("!"):
        payload = session.files.render(texts, trailing_newline=trailing)
        result = session.shell.run(source[1:], input_text=payload)
        session.write(result.output)
        count = len(payload.encode(session.files.encoding))
    else:
        count = session.files.write_lines(
            source,
            texts,
            trailing_newline=trailing,
            append=request.kind is CommandKind.WRITE_APPEND,
        )
    session.report_size(count)

    whole = (first, second) in ((1, buffer.last_addr), (0, 0))
    if whole and not source.startswith("!"):
        buffer.state.mark_saved()
    elif quit_after and not forced and buffer.modified and not buffer.state.warned:
        buffer.state.warned = True
        raise UnsavedChangesOnQuit()
    if quit_after:
        raise SessionQuit()


def shell_escape(session: "EditorSession", request: CommandRequest) -> None:
    """``!command`` runs a command; ``addr1,addr2!command`` filters lines through it."""

    scanner = request.scanner
    text = scanner.rest().split("\n", 1)[0]
    if request.addresses.count:
        first, second = line_range(session, request)
        command = expand_shell_command(session, text)
        _filter_lines(session, request, (first, second), command)
        return
    command = expand_shell_command(session, text)
    result = session.shell.run(command)
    session.write(result.output)
    if not session.scripted:
        session.write("!\n")


def _filter_lines(
    session: "EditorSession",
    request: CommandRequest,
    span: Tuple[int, int],
    command: str,
) -> None:
    first, second = span
    buffer = session.buffer
    payload = session.files.render(
        buffer.texts(first, second),
        trailing_newline=buffer.writes_final_newline(second),
    )
    result = session.shell.run(command, input_text=payload)
    output = split_text(result.output)
    session.checkpoint(request)
    buffer.replace_range(first, second, output.lines, label="filter")
    session.report_size(output.byte_count)


__all__ = [
    "edit",
    "edit_file",
    "expand_shell_command",
    "file_argument",
    "filename",
    "read_file",
    "shell_escape",
    "write_file",
]
