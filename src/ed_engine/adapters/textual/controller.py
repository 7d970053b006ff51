"""Textual adapter that wires SessionDriver events into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

from ed_engine.buffer import BufferMirror
from ed_engine.commands import InputMode
from ed_engine.errors import EdError
from ed_engine.session import FeedResult, SessionDriver


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    append_output: Callable[[str], None] = _noop
    update_status: Callable[[str], None] = _noop
    update_prompt: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    on_exit: Callable[[int], None] = _noop
    log: Callable[[str], None] = _noop


_MODE_LABELS = {
    InputMode.COMMAND: "command",
    InputMode.TEXT: "text entry",
    InputMode.CONTINUATION: "continuation",
    InputMode.GLOBAL_COMMAND: "global command",
}


class TextualEdAdapter:
    """Bridges a SessionDriver and its event bus to a Textual-friendly surface."""

    def __init__(self, driver: SessionDriver, hooks: TextualUIHooks) -> None:
        self.driver = driver
        self.hooks = hooks
        self._subscribe_events()
        self._refresh_buffer()
        self._refresh_prompt()

    def submit_line(self, text: str) -> FeedResult:
        """Feed one line typed by the user."""

        self._log_state("line ->", text=text)
        result = self.driver.feed(text)
        self._after_feed(result)
        return result

    def submit_eof(self) -> FeedResult:
        result = self.driver.feed_eof()
        self._after_feed(result)
        return result

    def interrupt(self) -> FeedResult:
        result = self.driver.handle_interrupt()
        self._after_feed(result)
        return result

    def _after_feed(self, result: FeedResult) -> None:
        self._log_state(
            "result <-",
            status=result.status,
            message=result.message,
            exit_status=result.exit_status,
        )
        if result.status == "error" and result.message:
            self.hooks.update_status(result.message)
        elif result.status in ("ok", "pending"):
            self.hooks.update_status(_MODE_LABELS[result.mode])
        self._refresh_prompt()

    def _subscribe_events(self) -> None:
        bus = self.driver.session.bus
        bus.subscribe("session.output", self._on_output)
        bus.subscribe("buffer.changed", self._on_buffer_changed)
        bus.subscribe("session.quit", self._on_quit)
        for event in ("command.start", "command.end", "command.error", "mode.switch"):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _on_output(self, payload: object | None) -> None:
        if isinstance(payload, str):
            self.hooks.append_output(payload)

    def _on_buffer_changed(self, payload: object | None) -> None:
        if isinstance(payload, BufferMirror):
            self.hooks.update_buffer(payload)

    def _on_quit(self, payload: object | None) -> None:
        self.hooks.on_exit(payload if isinstance(payload, int) else 0)

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name)
        self.hooks.handle_event(name, payload)
        if name == "command.error" and isinstance(payload, EdError):
            self.hooks.update_status(payload.message)

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.driver.session.buffer.mirror())

    def _refresh_prompt(self) -> None:
        self.hooks.update_prompt(self.driver.prompt)

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.driver.session.buffer
        return {
            "mode": self.driver.mode.value,
            "dot": buffer.dot,
            "lines": buffer.last_addr,
            "modified": buffer.modified,
            "buffer_version": buffer.document.version,
        }


__all__ = ["TextualEdAdapter", "TextualUIHooks"]
