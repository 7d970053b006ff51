"""Session driver feeding input lines to the dispatcher."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from ed_engine.commands import CommandDispatcher, InputChannel, InputGenerator, InputMode
from ed_engine.commands.files import edit_file
from ed_engine.errors import (
    EdError,
    FileAccessError,
    InterruptedCommand,
    SessionQuit,
    UnsavedChangesOnQuit,
)
from ed_engine.host import hangup_paths
from ed_engine.runtime import telemetry

from .context import EditorSession

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FATAL = 2


@dataclass(slots=True)
class FeedResult:
    """Outcome of one ``feed``/``feed_eof`` call."""

    status: str
    mode: InputMode = InputMode.COMMAND
    message: Optional[str] = None
    exit_status: Optional[int] = None


class SessionDriver:
    """Owns the input state machine and the main-loop error policy.

    In command mode every fed line is a command. A command that needs more
    input (text entry, a continued substitution, ``G`` command lines) stays
    pending and receives the following lines until it finishes.
    """

    def __init__(
        self,
        session: EditorSession,
        *,
        dispatcher: Optional[CommandDispatcher] = None,
    ) -> None:
        self.session = session
        self.dispatcher = dispatcher or CommandDispatcher(session)
        self.root = InputChannel.interactive_root()
        self.line_number = 0
        self._pending: Optional[InputGenerator] = None
        self._mode = InputMode.COMMAND
        self._error_status = EXIT_OK
        self._exit_status: Optional[int] = None
        self.logger = telemetry.get_logger("ed_engine.session")

    # -- state -----------------------------------------------------------

    @property
    def mode(self) -> InputMode:
        return self._mode

    @property
    def prompt(self) -> str:
        """Prompt to show before the next line, empty when none applies."""

        session = self.session
        if self.finished or self._mode is not InputMode.COMMAND:
            return ""
        return session.prompt if session.prompt_enabled else ""

    @property
    def finished(self) -> bool:
        return self._exit_status is not None

    @property
    def exit_status(self) -> int:
        if self._exit_status is not None:
            return self._exit_status
        return self._error_status

    @property
    def error_status(self) -> int:
        return self._error_status

    # -- input -----------------------------------------------------------

    def open_initial(self, name: str) -> FeedResult:
        """Load the file named on the command line.

        A missing file is not an error: the name becomes the current
        filename and the buffer starts empty.
        """

        session = self.session
        try:
            source = session.check_access(name)
            if not source.startswith("!") and not os.path.exists(source):
                session.filename = source
                session.warn(f"{source}: No such file or directory")
                return FeedResult(status="ok")
            session.report_size(edit_file(session, source))
        except EdError as exc:
            if isinstance(exc, FileAccessError) and exc.path:
                session.warn(f"{exc.path}: {exc.reason}")
            session.diagnostics.record(exc)
            self._mark_error()
            if session.options.abort_on_error:
                return self._finish(EXIT_FATAL)
            return FeedResult(status="error", message=exc.message)
        return FeedResult(status="ok")

    def feed(self, line: str) -> FeedResult:
        if self.finished:
            raise RuntimeError("Session already finished")
        self.line_number += 1
        if self._pending is None:
            return self._advance(self.dispatcher.run(line, self.root), None, start=True)
        return self._advance(self._pending, line)

    def feed_eof(self) -> FeedResult:
        """End of input: finish a pending command, else quit (warning once)."""

        if self.finished:
            raise RuntimeError("Session already finished")
        if self._pending is not None:
            return self._advance(self._pending, None)
        session = self.session
        state = session.buffer.state
        if state.modified and not state.warned and not session.scripted:
            state.warned = True
            return self._fail(UnsavedChangesOnQuit())
        return self._finish(self._error_status)

    def handle_interrupt(self) -> FeedResult:
        """Abandon the running command and return to command mode."""

        if self._pending is not None:
            self._pending.close()
            self._pending = None
        self._switch_mode(InputMode.COMMAND)
        error = InterruptedCommand()
        session = self.session
        session.write("\n?\n")
        if session.diagnostics.verbose:
            session.write(f"{error.message}\n")
        session.diagnostics.record(error)
        self._mark_error()
        telemetry.record_event("session.interrupt", level="warning")
        return FeedResult(status="error", message=error.message)

    def hangup(self) -> int:
        """Save a modified buffer to ``ed.hup`` and end the session."""

        session = self.session
        buffer = session.buffer
        if buffer.modified and buffer.last_addr:
            texts = buffer.texts(1, buffer.last_addr)
            for path in hangup_paths():
                try:
                    session.files.write_lines(
                        path,
                        texts,
                        trailing_newline=buffer.writes_final_newline(buffer.last_addr),
                    )
                except FileAccessError as exc:
                    self.logger.debug(f"hangup save failed for {path}: {exc.reason}")
                    continue
                break
        self._finish(EXIT_FATAL)
        return EXIT_FATAL

    # -- internals -------------------------------------------------------

    def _advance(
        self, command: InputGenerator, value: Optional[str], *, start: bool = False
    ) -> FeedResult:
        version = self.session.buffer.document.version
        try:
            mode = command.send(None if start else value)
        except StopIteration:
            result = self._complete()
        except SessionQuit as quit:
            self._pending = None
            result = self._finish(quit.status or self._error_status)
        except EdError as exc:
            self._pending = None
            self._switch_mode(InputMode.COMMAND)
            result = self._fail(exc)
        else:
            self._pending = command
            self._switch_mode(mode)
            result = FeedResult(status="pending", mode=mode)
        bus = self.session.bus
        if self.session.buffer.document.version != version and bus.has_subscribers(
            "buffer.changed"
        ):
            bus.emit("buffer.changed", self.session.buffer.mirror())
        return result

    def _complete(self) -> FeedResult:
        self._pending = None
        self._switch_mode(InputMode.COMMAND)
        return FeedResult(status="ok")

    def _fail(self, error: EdError) -> FeedResult:
        session = self.session
        if isinstance(error, FileAccessError) and error.path:
            session.warn(f"{error.path}: {error.reason}")
        session.diagnostics.record(error)
        session.write("?\n")
        if session.diagnostics.verbose:
            session.write(f"{error.message}\n")
        self._mark_error()
        telemetry.record_event(
            "command.error",
            level="warning",
            data={"kind": error.kind, "message": error.message, "line": self.line_number},
        )
        session.bus.emit("command.error", error)
        result = FeedResult(status="error", message=error.message)
        if session.options.abort_on_error:
            if session.diagnostics.verbose:
                session.warn(f"script, line {self.line_number}: {error.message}")
            self._finish(EXIT_ERROR)
            result.exit_status = EXIT_ERROR
        return result

    def _mark_error(self) -> None:
        if not self.session.options.loose_exit_status:
            self._error_status = EXIT_ERROR

    def _finish(self, status: int) -> FeedResult:
        self._exit_status = status
        self._pending = None
        telemetry.record_event("session.quit", data={"status": status})
        self.session.flush()
        self.session.bus.emit("session.quit", status)
        return FeedResult(status="quit", exit_status=status)

    def _switch_mode(self, mode: InputMode) -> None:
        if mode is self._mode:
            return
        self._mode = mode
        telemetry.record_event("mode.switch", data={"mode": mode.value})
        self.session.bus.emit("mode.switch", mode)


__all__ = ["FeedResult", "SessionDriver", "EXIT_OK", "EXIT_ERROR", "EXIT_FATAL"]
