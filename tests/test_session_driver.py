from __future__ import annotations

import io
import time
from pathlib import Path
from typing import List, Optional

import pytest

from ed_engine.buffer import BufferMirror, LineBuffer
from ed_engine.commands import InputMode
from ed_engine.runtime import EditorOptions
from ed_engine.session import EXIT_ERROR, EXIT_FATAL, EXIT_OK, EditorSession, SessionDriver


def make_driver(*lines: str, options: Optional[EditorOptions] = None) -> SessionDriver:
    session = EditorSession(
        options or EditorOptions(),
        buffer=LineBuffer.from_lines(lines),
        output=io.StringIO(),
        errors=io.StringIO(),
    )
    return SessionDriver(session)


def output_of(driver: SessionDriver) -> str:
    return driver.session.output.getvalue()


def errors_of(driver: SessionDriver) -> str:
    return driver.session.errors.getvalue()


def test_prompt_only_shown_in_command_mode() -> None:
    driver = make_driver(options=EditorOptions(prompt=">", prompt_enabled=True))

    assert driver.prompt == ">"
    driver.feed("a")
    assert driver.prompt == ""
    driver.feed(".")
    assert driver.prompt == ">"


def test_quit_warns_once_when_modified() -> None:
    driver = make_driver("x")
    driver.feed("1d")

    first = driver.feed("q")
    assert first.message == "Warning: buffer modified"
    assert driver.finished is False

    second = driver.feed("q")
    assert second.status == "quit"
    assert driver.finished is True
    assert driver.exit_status == EXIT_ERROR


def test_modification_after_warning_rearms_it() -> None:
    driver = make_driver("x")
    driver.feed("1d")
    driver.feed("q")

    for line in ("a", "y", "."):
        driver.feed(line)

    assert driver.feed("q").message == "Warning: buffer modified"


def test_unconditional_quit() -> None:
    driver = make_driver("x")
    driver.feed("1d")

    result = driver.feed("Q")

    assert result.status == "quit"
    assert driver.exit_status == EXIT_OK


def test_end_of_input_warns_before_quitting() -> None:
    driver = make_driver("x")
    driver.feed("1d")

    warned = driver.feed_eof()
    assert warned.message == "Warning: buffer modified"
    assert output_of(driver) == "?\n"

    quit_result = driver.feed_eof()
    assert quit_result.status == "quit"


def test_scripted_session_quits_at_end_of_input() -> None:
    driver = make_driver("x", options=EditorOptions(scripted=True))
    driver.feed("1d")

    result = driver.feed_eof()

    assert result.status == "quit"
    assert driver.exit_status == EXIT_OK


def test_end_of_input_finishes_pending_text_entry() -> None:
    driver = make_driver()
    driver.feed("a")
    driver.feed("line")

    result = driver.feed_eof()

    assert result.status == "ok"
    assert driver.session.buffer.texts(1, 1) == ["line"]


def test_verbose_errors_include_message() -> None:
    driver = make_driver(options=EditorOptions(verbose=True))

    driver.feed("1d")

    assert output_of(driver) == "?\nInvalid address\n"


def test_loose_exit_status_ignores_errors() -> None:
    driver = make_driver(options=EditorOptions(loose_exit_status=True))
    driver.feed("1d")

    driver.feed("q")

    assert driver.exit_status == EXIT_OK


def test_script_aborts_on_first_error() -> None:
    options = EditorOptions(abort_on_error=True, verbose=True)
    driver = make_driver("a", options=options)
    driver.feed("p")

    result = driver.feed("5p")

    assert result.exit_status == EXIT_ERROR
    assert driver.finished is True
    assert errors_of(driver) == "script, line 2: Invalid address\n"


def test_interrupt_abandons_text_entry_but_keeps_lines() -> None:
    driver = make_driver()
    driver.feed("a")
    driver.feed("kept")

    result = driver.handle_interrupt()

    assert result.message == "Interrupt"
    assert driver.mode is InputMode.COMMAND
    assert output_of(driver).endswith("\n?\n")
    assert driver.session.buffer.texts(1, 1) == ["kept"]
    assert driver.session.diagnostics.message == "Interrupt"


def test_buffer_changes_are_published_on_the_bus() -> None:
    driver = make_driver("a", "b")
    mirrors: List[BufferMirror] = []
    driver.session.bus.subscribe("buffer.changed", mirrors.append)

    driver.feed("1d")
    driver.feed("p")

    assert len(mirrors) == 1
    assert mirrors[0].text == "b"
    assert mirrors[0].modified is True


def test_output_is_published_on_the_bus() -> None:
    driver = make_driver("a")
    seen: List[object] = []
    driver.session.bus.subscribe("session.output", seen.append)

    driver.feed("p")

    assert seen == ["a\n"]


def test_open_initial_reports_size(tmp_path: Path) -> None:
    path = tmp_path / "doc.txt"
    path.write_bytes(b"one\ntwo\n")
    driver = make_driver()

    result = driver.open_initial(str(path))

    assert result.status == "ok"
    assert output_of(driver) == "8\n"
    assert driver.session.buffer.texts(1, 2) == ["one", "two"]
    assert driver.session.filename == str(path)


def test_open_initial_missing_file_keeps_name(tmp_path: Path) -> None:
    path = str(tmp_path / "missing.txt")
    driver = make_driver()

    result = driver.open_initial(path)

    assert result.status == "ok"
    assert driver.session.filename == path
    assert errors_of(driver) == f"{path}: No such file or directory\n"
    assert driver.session.buffer.last_addr == 0


def test_hangup_saves_modified_buffer(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    driver = make_driver()
    for line in ("a", "unsaved", "."):
        driver.feed(line)

    status = driver.hangup()

    assert status == EXIT_FATAL
    assert driver.finished is True
    assert (tmp_path / "ed.hup").read_text() == "unsaved\n"


def test_feeding_a_finished_session_fails() -> None:
    driver = make_driver()
    driver.feed("Q")

    with pytest.raises(RuntimeError):
        driver.feed("p")


def test_quit_warning_survives_commands_that_change_nothing() -> None:
    driver = make_driver("a")
    driver.feed("s/a/b/")
    driver.feed("q")

    driver.feed("p")
    result = driver.feed("q")

    assert result.status == "quit"
    assert output_of(driver) == "?\nb\n"


def test_quit_warning_survives_an_error() -> None:
    driver = make_driver("a")
    driver.feed("s/a/b/")
    driver.feed("q")

    driver.feed("5p")

    assert driver.feed("q").status == "quit"


def test_end_of_input_warning_survives_commands_that_change_nothing() -> None:
    driver = make_driver("a")
    driver.feed("s/a/b/")
    driver.feed_eof()

    driver.feed("p")
    result = driver.feed_eof()

    assert result.status == "quit"
    assert driver.finished is True


def test_long_text_entry_stays_linear() -> None:
    driver = make_driver()
    driver.feed("a")

    started = time.perf_counter()
    for number in range(20000):
        driver.feed(f"line {number}")
    driver.feed(".")
    elapsed = time.perf_counter() - started

    assert driver.session.buffer.last_addr == 20000
    assert driver.session.buffer.dot == 20000
    assert elapsed < 15
