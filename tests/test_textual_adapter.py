from __future__ import annotations

import io
from typing import List, Tuple

from ed_engine.adapters.textual import TextualEdAdapter, TextualUIHooks
from ed_engine.buffer import LineBuffer
from ed_engine.session import EditorSession, SessionDriver


def make_driver(*lines: str) -> SessionDriver:
    session = EditorSession(
        buffer=LineBuffer.from_lines(lines),
        output=io.StringIO(),
        errors=io.StringIO(),
    )
    return SessionDriver(session)


def test_adapter_updates_buffer_and_status() -> None:
    driver = make_driver()
    updates: List[str] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: updates.append(mirror.text),
        update_status=lambda status: statuses.append(status),
    )
    adapter = TextualEdAdapter(driver, hooks)

    adapter.submit_line("a")
    adapter.submit_line("hello")
    adapter.submit_line(".")

    assert updates[0] == ""
    assert updates[-1] == "hello"
    assert "text entry" in statuses
    assert statuses[-1] == "command"


def test_adapter_relays_output_and_command_events() -> None:
    driver = make_driver("one", "two")
    output: List[str] = []
    events: List[Tuple[str, object | None]] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        append_output=output.append,
        handle_event=lambda name, payload: events.append((name, payload)),
    )
    adapter = TextualEdAdapter(driver, hooks)

    adapter.submit_line(",p")

    assert output == ["one\n", "two\n"]
    names = [name for name, _ in events]
    assert names == ["command.start", "command.end"]


def test_adapter_surfaces_errors_in_status_line() -> None:
    driver = make_driver()
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        update_status=statuses.append,
    )
    adapter = TextualEdAdapter(driver, hooks)

    result = adapter.submit_line("1d")

    assert result.status == "error"
    assert statuses[-1] == "Invalid address"


def test_adapter_reports_exit_status() -> None:
    driver = make_driver("x")
    exits: List[int] = []
    hooks = TextualUIHooks(update_buffer=lambda mirror: None, on_exit=exits.append)
    adapter = TextualEdAdapter(driver, hooks)

    adapter.submit_line("Q")

    assert exits == [0]


def test_adapter_interrupt_returns_to_command_mode() -> None:
    driver = make_driver()
    prompts: List[str] = []
    hooks = TextualUIHooks(update_buffer=lambda mirror: None, update_prompt=prompts.append)
    adapter = TextualEdAdapter(driver, hooks)
    adapter.submit_line("P")
    adapter.submit_line("a")

    result = adapter.interrupt()

    assert result.message == "Interrupt"
    assert prompts[-2:] == ["", "*"]


def test_adapter_emits_log_lines() -> None:
    driver = make_driver()
    logs: List[str] = []
    hooks = TextualUIHooks(update_buffer=lambda mirror: None, log=logs.append)
    adapter = TextualEdAdapter(driver, hooks)

    adapter.submit_line("a")

    assert any(line.startswith("line ->") for line in logs)
    assert any("mode='text'" in line for line in logs)
