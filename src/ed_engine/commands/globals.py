"""Two-phase execution of ``g``, ``v``, ``G`` and ``V``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generator, Iterable, Iterator, Optional

from ed_engine.buffer import Line
from ed_engine.errors import CommandSyntaxError, NestedGlobalDisallowed
from ed_engine.runtime import telemetry

from .channel import InputChannel, InputGenerator
from .helpers import line_range
from .models import CommandKind, CommandRequest, InputMode, PrintFlags
from .parsing import check_delimiter, parse_suffix, read_pattern

if TYPE_CHECKING:  # pragma: no cover
    from ed_engine.session.context import EditorSession

# Runs one command line; the dispatcher provides it.
CommandRunner = Callable[..., InputGenerator]


class ActiveList:
    """Lines selected in the mark phase, in document order.

    Registered as a buffer removal listener while the global command runs,
    so lines deleted by an earlier iteration are skipped.
    """

    def __init__(self, lines: Iterable[Line]) -> None:
        self._lines = list(lines)
        self._removed: set[int] = set()

    def discard(self, lines: Iterable[Line]) -> None:
        self._removed.update(id(line) for line in lines)

    def __iter__(self) -> Iterator[Line]:
        for line in self._lines:
            if id(line) not in self._removed:
                yield line

    def __len__(self) -> int:
        return len(self._lines)


class GlobalExecutor:
    """Mark matching lines, then run the command list once per surviving line.

    The whole invocation is one undo unit. An undo inside the command list
    ends the loop, since the marked lines no longer describe the buffer.
    """

    def __init__(self, run_command: CommandRunner) -> None:
        self.run_command = run_command
        self._previous: Optional[str] = None
        self.logger = telemetry.get_logger("ed_engine.globals")

    def __call__(self, session: "EditorSession", request: CommandRequest) -> InputGenerator:
        if request.in_global:
            raise NestedGlobalDisallowed()
        buffer = session.buffer
        first, second = line_range(session, request, 1, buffer.last_addr)
        scanner = request.scanner
        delimiter = check_delimiter(scanner.take())
        source, closed = read_pattern(scanner, delimiter)
        if not closed:
            raise CommandSyntaxError("Missing pattern delimiter")
        ignore_case = False
        if scanner.peek() == "I":
            scanner.advance()
            ignore_case = True
        pattern = session.patterns.resolve(source, ignore_case=ignore_case)

        kind = request.kind
        interactive = kind in (CommandKind.GLOBAL_INTERACTIVE, CommandKind.INVERSE_INTERACTIVE)
        if interactive:
            flags = parse_suffix(scanner)
            self._previous = None
            commands: list[str] = []
        else:
            flags = PrintFlags.NONE
            commands = yield from self._command_list(request)

        wanted = kind in (CommandKind.GLOBAL, CommandKind.GLOBAL_INTERACTIVE)
        active = ActiveList(
            line
            for line in buffer.document.slice(first, second)
            if pattern.matches(line.text) is wanted
        )
        self.logger.debug(f"{kind.value}/{source}/ marked {len(active)} lines")

        buffer.checkpoint()
        undo_mark = buffer.undo_count
        buffer.removal_listeners.append(active.discard)
        try:
            with telemetry.span(
                name=f"global::{kind.name.lower()}",
                component=True,
                metadata={"pattern": source, "marked": len(active)},
            ):
                previous = first
                for line in active:
                    addr = buffer.position_of(line, near=previous)
                    if addr is None:
                        continue
                    previous = addr
                    buffer.set_dot(addr)
                    if interactive:
                        yield from self._interactive(session, request, addr, flags)
                    else:
                        channel = InputChannel(commands)
                        while channel.has_pending():
                            yield from self.run_command(
                                channel.next_pending(), channel, in_global=True
                            )
                    if buffer.undo_count != undo_mark:
                        break
        finally:
            buffer.removal_listeners.remove(active.discard)

    def _command_list(
        self, request: CommandRequest
    ) -> Generator[InputMode, Optional[str], list[str]]:
        """Rest of the line plus backslash-continued lines; empty means ``p``."""

        text = request.scanner.rest()
        lines: list[str] = []
        while _continues(text):
            lines.append(text[:-1])
            following = yield from request.channel.read(InputMode.CONTINUATION)
            if following is None:
                raise CommandSyntaxError("Unexpected end of file")
            text = following
        lines.append(text)
        if lines == [""]:
            return ["p"]
        return lines

    def _interactive(
        self,
        session: "EditorSession",
        request: CommandRequest,
        addr: int,
        flags: PrintFlags,
    ) -> InputGenerator:
        """Show the line, then run commands typed for it until a blank line.

        ``&`` repeats the previous command of this invocation.
        """

        session.print_lines(addr, addr, flags)
        while True:
            line = yield from request.channel.read(InputMode.GLOBAL_COMMAND)
            if line is None:
                raise CommandSyntaxError("Unexpected end of file")
            if line == "":
                return
            if line == "&":
                if self._previous is None:
                    raise CommandSyntaxError("No previous command")
                line = self._previous
            else:
                self._previous = line
            channel = InputChannel([line], parent=request.channel)
            undo_mark = session.buffer.undo_count
            while channel.has_pending():
                yield from self.run_command(channel.next_pending(), channel, in_global=True)
            if session.buffer.undo_count != undo_mark:
                return


def _continues(text: str) -> bool:
    """Whether ``text`` ends in an unescaped backslash."""

    count = len(text) - len(text.rstrip("\\"))
    return count % 2 == 1


__all__ = ["ActiveList", "GlobalExecutor"]
