"""Command-line parsing and dispatch to the handler table."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Dict

from ed_engine.errors import AddressOutOfRange, CommandSyntaxError
from ed_engine.runtime import telemetry

from . import display, editing, files
from .channel import InputChannel, InputGenerator
from .globals import GlobalExecutor
from .helpers import Handler
from .models import ADDRESSLESS, CommandKind, CommandRequest
from .scanner import CommandScanner

if TYPE_CHECKING:  # pragma: no cover
    from ed_engine.session.context import EditorSession


class CommandDispatcher:
    """Turns one command line into a ``CommandRequest`` and runs its handler.

    ``run`` is a generator: handlers that need more input suspend it by
    yielding an ``InputMode`` and are resumed with the next line. Print
    suffixes left on the request are honoured once the handler finishes.
    """

    def __init__(self, session: "EditorSession") -> None:
        self.session = session
        self.globals = GlobalExecutor(self.run)
        self._handlers: Dict[CommandKind, Handler] = {
            CommandKind.APPEND: editing.append_text,
            CommandKind.CHANGE: editing.change_lines,
            CommandKind.DELETE: editing.delete_lines,
            CommandKind.EDIT: files.edit,
            CommandKind.EDIT_FORCED: files.edit,
            CommandKind.FILENAME: files.filename,
            CommandKind.GLOBAL: self.globals,
            CommandKind.GLOBAL_INTERACTIVE: self.globals,
            CommandKind.HELP: display.explain_error,
            CommandKind.HELP_MODE: display.toggle_verbose,
            CommandKind.INSERT: editing.insert_text,
            CommandKind.JOIN: editing.join_lines,
            CommandKind.MARK: editing.mark_line,
            CommandKind.LIST: display.print_range,
            CommandKind.MOVE: editing.move_lines,
            CommandKind.NUMBER: display.print_range,
            CommandKind.PRINT: display.print_range,
            CommandKind.PROMPT: display.toggle_prompt,
            CommandKind.QUIT: display.quit_session,
            CommandKind.QUIT_FORCED: display.quit_session,
            CommandKind.READ: files.read_file,
            CommandKind.SUBSTITUTE: editing.substitute,
            CommandKind.TRANSFER: editing.transfer_lines,
            CommandKind.UNDO: editing.undo_change,
            CommandKind.INVERSE: self.globals,
            CommandKind.INVERSE_INTERACTIVE: self.globals,
            CommandKind.WRITE: files.write_file,
            CommandKind.WRITE_APPEND: files.write_file,
            CommandKind.PUT: editing.put_lines,
            CommandKind.YANK: editing.yank_lines,
            CommandKind.SCROLL: display.scroll,
            CommandKind.LINE_NUMBER: display.print_line_number,
            CommandKind.SHELL: files.shell_escape,
            CommandKind.COMMENT: display.comment,
            CommandKind.NULL: display.print_next,
        }
        missing = [kind.name for kind in CommandKind if kind not in self._handlers]
        if missing:
            raise RuntimeError(f"No handler for commands: {', '.join(missing)}")
        self.logger = telemetry.get_logger("ed_engine.commands")

    def handler_for(self, kind: CommandKind) -> Handler:
        return self._handlers[kind]

    def run(
        self, text: str, channel: InputChannel, *, in_global: bool = False
    ) -> InputGenerator:
        session = self.session
        scanner = CommandScanner(text)
        addresses = session.resolver.extract(scanner)
        scanner.skip_blanks()
        kind = CommandKind.from_char(scanner.peek())
        scanner.advance()
        if kind in ADDRESSLESS and addresses.count:
            raise CommandSyntaxError("Unexpected address")

        request = CommandRequest(
            kind=kind,
            addresses=addresses,
            scanner=scanner,
            channel=channel,
            in_global=in_global,
        )
        session.bus.emit("command.start", request)
        with telemetry.span(
            name=f"command::{kind.name.lower()}",
            component=True,
            metadata={"command": text, "global": in_global},
        ):
            result = self._handlers[kind](session, request)
            if inspect.isgenerator(result):
                yield from result
            if request.flags:
                dot = session.buffer.dot
                if dot == 0:
                    raise AddressOutOfRange()
                session.print_lines(dot, dot, request.flags)
        session.bus.emit("command.end", request)


__all__ = ["CommandDispatcher"]
