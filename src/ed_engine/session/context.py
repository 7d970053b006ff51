"""Shared services every command handler can access."""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from ed_engine.buffer import LineBuffer
from ed_engine.commands.address import AddressResolver
from ed_engine.commands.models import CommandRequest, PrintFlags
from ed_engine.errors import CommandSyntaxError
from ed_engine.host import InterruptGate, LineFileIO, ShellRunner
from ed_engine.regex import PatternEngine
from ed_engine.runtime import EditorOptions, telemetry

from .bus import EventBus
from .diagnostics import Diagnostics
from .formatting import format_line


class EditorSession:
    """One editing session: the buffer plus everything the commands share.

    Handlers receive the session explicitly; nothing here is module-global.
    Output goes to ``output`` and is mirrored on the bus as
    ``session.output`` so adapters can observe it.
    """

    def __init__(
        self,
        options: Optional[EditorOptions] = None,
        *,
        buffer: Optional[LineBuffer] = None,
        files: Optional[LineFileIO] = None,
        shell: Optional[ShellRunner] = None,
        output: Optional[TextIO] = None,
        errors: Optional[TextIO] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.options = options or EditorOptions()
        opts = self.options
        self.buffer = buffer or LineBuffer()
        self.patterns = PatternEngine(extended=opts.extended_regexp)
        self.resolver = AddressResolver(self.buffer, self.patterns)
        self.diagnostics = Diagnostics(verbose=opts.verbose)
        self.files = files or LineFileIO(encoding=opts.encoding)
        self.shell = shell or ShellRunner(opts.shell, encoding=opts.encoding)
        self.output = output if output is not None else sys.stdout
        self.errors = errors if errors is not None else sys.stderr
        self.bus = bus or EventBus()
        self.interrupts = InterruptGate()
        self.buffer.critical_section = self.interrupts.critical
        self.filename = ""
        self.prompt = opts.prompt
        self.prompt_enabled = opts.prompt_enabled
        self.last_shell_command: Optional[str] = None
        self.window_lines = opts.window_lines
        self.window_columns = opts.window_columns
        self.logger = telemetry.get_logger("ed_engine.session")

    @property
    def scripted(self) -> bool:
        return self.options.scripted

    @property
    def restricted(self) -> bool:
        return self.options.restricted

    # -- output ----------------------------------------------------------

    def write(self, text: str) -> None:
        self.output.write(text)
        self.bus.emit("session.output", text)

    def print_lines(self, first: int, second: int, flags: PrintFlags) -> None:
        """Print ``first..second`` in the style ``flags`` asks for; dot moves to ``second``."""

        buffer = self.buffer
        if not flags & (PrintFlags.LIST | PrintFlags.NUMBER):
            flags |= PrintFlags.PRINT
        for addr, text in enumerate(buffer.texts(first, second), start=first):
            self.write(format_line(text, addr, flags, columns=self.window_columns))
        buffer.set_dot(second)

    def report_size(self, count: int) -> None:
        if not self.scripted:
            self.write(f"{count}\n")

    def warn(self, text: str) -> None:
        self.errors.write(f"{text}\n")
        self.errors.flush()

    # -- policy helpers --------------------------------------------------

    def checkpoint(self, request: CommandRequest) -> None:
        """Open the undo unit for a mutating command.

        Commands run from a global list share the unit the global command
        opened.
        """

        if not request.in_global:
            self.buffer.checkpoint()

    def check_access(self, name: str) -> str:
        if self.restricted:
            if name.startswith("!"):
                raise CommandSyntaxError("Shell access restricted")
            if name == ".." or "/" in name:
                raise CommandSyntaxError("Directory access restricted")
        return name

    def flush(self) -> None:
        self.output.flush()


__all__ = ["EditorSession"]
