"""Executable Textual app that hosts an editing session."""

from __future__ import annotations

import argparse
import io
import os
from dataclasses import dataclass
from typing import Any, Optional, Sequence

try:  # pragma: no cover - imported only when the app is run
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Input, Log, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' extra to use ed_engine.adapters.textual.app"
    ) from exc

from ed_engine.buffer import BufferMirror
from ed_engine.runtime import EditorOptions
from ed_engine.session import EditorSession, SessionDriver

from .controller import TextualEdAdapter, TextualUIHooks


def create_default_driver(options: Optional[EditorOptions] = None) -> SessionDriver:
    """Build a session whose output is only observed through the event bus."""

    session = EditorSession(options or EditorOptions.from_env(), output=io.StringIO())
    return SessionDriver(session)


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""
    prompt_text: str = ""


class EdEngineApp(App[int]):
    """Output log, buffer view and a command input line."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#output-log {
		height: 1fr;
		border: round $secondary;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "interrupt", "Interrupt"),
        ("ctrl+d", "end_of_input", "End of input"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        options: Optional[EditorOptions] = None,
        filename: Optional[str] = None,
    ) -> None:
        super().__init__()
        self._state = UIState()
        self._options = options
        self._filename = filename
        self.driver: SessionDriver | None = None
        self.adapter: TextualEdAdapter | None = None
        self._buffer_widget: Static | None = None
        self._output_widget: Log | None = None
        self._status_widget: Static | None = None
        self._input_widget: Input | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="editor-area"):
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
            self._output_widget = Log(id="output-log")
            yield self._output_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        self._input_widget = Input(placeholder="command", id="command-line")
        yield self._input_widget
        yield Footer()

    async def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            append_output=self._append_output,
            update_status=self._update_status,
            update_prompt=self._update_prompt,
            on_exit=self._on_exit,
        )
        self.driver = create_default_driver(self._options)
        self.adapter = TextualEdAdapter(self.driver, hooks)
        if self._filename:
            self.driver.open_initial(self._filename)
        if self._input_widget:
            self._input_widget.focus()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if not self.adapter or (self.driver and self.driver.finished):
            return
        event.input.value = ""
        self.adapter.submit_line(event.value)

    def action_interrupt(self) -> None:
        if self.adapter and self.driver and not self.driver.finished:
            self.adapter.interrupt()

    def action_end_of_input(self) -> None:
        if self.adapter and self.driver and not self.driver.finished:
            self.adapter.submit_eof()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        marker = " [modified]" if mirror.modified else ""
        self._state.buffer_text = mirror.text
        if self._buffer_widget:
            self._buffer_widget.update(mirror.text)
            self._buffer_widget.border_title = f"{mirror.line_count} lines, dot {mirror.dot}{marker}"

    def _append_output(self, text: str) -> None:
        if self._output_widget:
            self._output_widget.write(text)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _update_prompt(self, prompt: str) -> None:
        self._state.prompt_text = prompt
        if self._input_widget:
            self._input_widget.placeholder = prompt or "command"

    def _on_exit(self, status: Any) -> None:
        self.exit(status if isinstance(status, int) else 0)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the ed engine in a Textual UI.")
    parser.add_argument(
        "-p",
        "--prompt",
        default=os.environ.get("ED_ENGINE_PROMPT"),
        help="prompt shown in the command line placeholder",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="explain errors")
    parser.add_argument("file", nargs="?", help="file to edit")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    options = EditorOptions.from_env().with_overrides(
        prompt=args.prompt,
        prompt_enabled=True if args.prompt else None,
        verbose=args.verbose or None,
    )
    app = EdEngineApp(options=options, filename=args.file)
    status = app.run()
    return status if isinstance(status, int) else 0


if __name__ == "__main__":  # pragma: no cover - manual run
    raise SystemExit(main())
