from __future__ import annotations

import io
from typing import Optional

import pytest

from ed_engine.buffer import LineBuffer
from ed_engine.commands import CommandDispatcher, CommandKind, InputMode
from ed_engine.runtime import EditorOptions
from ed_engine.session import EditorSession, SessionDriver


def make_driver(*lines: str, options: Optional[EditorOptions] = None) -> SessionDriver:
    session = EditorSession(
        options or EditorOptions(),
        buffer=LineBuffer.from_lines(lines),
        output=io.StringIO(),
        errors=io.StringIO(),
    )
    return SessionDriver(session)


def feed(driver: SessionDriver, *lines: str) -> str:
    output = driver.session.output
    assert isinstance(output, io.StringIO)
    start = len(output.getvalue())
    for line in lines:
        driver.feed(line)
    return output.getvalue()[start:]


def contents(driver: SessionDriver) -> list[str]:
    buffer = driver.session.buffer
    return buffer.texts(1, buffer.last_addr)


def test_every_command_letter_has_a_handler() -> None:
    dispatcher = CommandDispatcher(make_driver().session)

    for kind in CommandKind:
        assert callable(dispatcher.handler_for(kind))


def test_delete_and_undo_restore_pre_delete_dot() -> None:
    driver = make_driver("alpha", "beta", "gamma")
    driver.session.buffer.set_dot(2)

    feed(driver, "2d")
    assert contents(driver) == ["alpha", "gamma"]
    assert driver.session.buffer.dot == 2

    feed(driver, "u")
    assert contents(driver) == ["alpha", "beta", "gamma"]
    assert driver.session.buffer.dot == 2


def test_search_then_substitute_updates_line_and_last_pattern() -> None:
    driver = make_driver("alpha", "beta", "gamma")
    driver.session.buffer.set_dot(1)

    printed = feed(driver, "/beta/")
    assert printed == "beta\n"
    assert driver.session.buffer.dot == 2

    feed(driver, "s/beta/BETA/")
    patterns = driver.session.patterns
    assert contents(driver) == ["alpha", "BETA", "gamma"]
    assert patterns.last is not None and patterns.last.source == "beta"
    assert patterns.last_substitution is not None
    assert patterns.last_substitution.template.source == "BETA"


def test_delete_on_empty_buffer_is_an_invalid_address() -> None:
    driver = make_driver()

    result = driver.feed("1d")

    assert result.status == "error"
    assert result.message == "Invalid address"
    assert driver.session.output.getvalue() == "?\n"
    assert contents(driver) == []
    assert driver.session.buffer.dot == 0


def test_append_reads_text_until_period() -> None:
    driver = make_driver()

    assert driver.feed("a").mode is InputMode.TEXT
    feed(driver, "hello", "world")
    result = driver.feed(".")

    assert result.status == "ok"
    assert result.mode is InputMode.COMMAND
    assert contents(driver) == ["hello", "world"]
    assert driver.session.buffer.dot == 2
    assert driver.session.buffer.modified is True


def test_insert_at_zero_inserts_before_first_line() -> None:
    driver = make_driver("b")

    feed(driver, "0i", "a", ".")

    assert contents(driver) == ["a", "b"]
    assert driver.session.buffer.dot == 1


def test_change_replaces_lines_and_yanks_the_old_ones() -> None:
    driver = make_driver("a", "b", "c")

    feed(driver, "2c", "B", ".")
    assert contents(driver) == ["a", "B", "c"]
    assert driver.session.buffer.dot == 2

    feed(driver, "x")
    assert contents(driver) == ["a", "B", "b", "c"]


def test_join_defaults_to_current_and_next_line() -> None:
    driver = make_driver("a", "b", "c")
    driver.session.buffer.set_dot(1)

    feed(driver, "j")

    assert contents(driver) == ["ab", "c"]
    assert driver.session.buffer.dot == 1


def test_move_and_transfer() -> None:
    driver = make_driver("1", "2", "3")

    feed(driver, "1m$")
    assert contents(driver) == ["2", "3", "1"]
    assert driver.session.buffer.dot == 3

    feed(driver, "1,2t0")
    assert contents(driver) == ["2", "3", "2", "3", "1"]
    assert driver.session.buffer.dot == 2


def test_move_into_own_range_is_invalid_destination() -> None:
    driver = make_driver("1", "2", "3")

    result = driver.feed("1,3m2")

    assert result.message == "Invalid destination"


def test_yank_and_put() -> None:
    driver = make_driver("a", "b", "c")

    feed(driver, "1,2y", "$x")

    assert contents(driver) == ["a", "b", "c", "a", "b"]
    assert driver.session.buffer.dot == 5


def test_put_with_nothing_yanked() -> None:
    assert make_driver("a").feed("x").message == "Nothing to put"


def test_marks_survive_edits_elsewhere() -> None:
    driver = make_driver("a", "b", "c")

    assert feed(driver, "2ka", "1d", "'ap") == "b\n"
    assert driver.feed("kA").message == "Invalid mark character"


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        (",p", "a\nb\nc\nd\ne\n"),
        ("%p", "a\nb\nc\nd\ne\n"),
        ("1;+2p", "a\nb\nc\n"),
        ("$-1p", "d\n"),
        ("2,3n", "2\tb\n3\tc\n"),
        ("/c/;/e/p", "c\nd\ne\n"),
        ("?b?", "b\n"),
        ("=", "5\n"),
        ("2=", "2\n"),
    ],
)
def test_addresses_and_print_commands(command: str, expected: str) -> None:
    driver = make_driver("a", "b", "c", "d", "e")
    driver.session.buffer.set_dot(4)

    assert feed(driver, command) == expected


def test_semicolon_sets_dot_before_next_address() -> None:
    driver = make_driver("a", "b", "c", "d", "e")
    driver.session.buffer.set_dot(4)

    assert feed(driver, ";p") == "d\ne\n"
    assert driver.session.buffer.dot == 5


def test_empty_command_prints_next_line() -> None:
    driver = make_driver("a", "b")
    driver.session.buffer.set_dot(1)

    assert feed(driver, "") == "b\n"
    assert driver.feed("").message == "Invalid address"


@pytest.mark.parametrize(
    ("command", "message"),
    [
        ("2,1p", "Invalid address"),
        ("9p", "Invalid address"),
        ("1.p", "Invalid address"),
        ("Z", "Unknown command"),
        ("1q", "Unexpected address"),
        ("pz", "Invalid command suffix"),
        ("u", "Nothing to undo"),
        ("'qp", "Invalid address"),
    ],
)
def test_command_errors(command: str, message: str) -> None:
    driver = make_driver("a", "b")

    result = driver.feed(command)

    assert result.status == "error"
    assert result.message == message
    assert driver.session.diagnostics.message == message


def test_print_suffix_after_delete() -> None:
    driver = make_driver("a", "b", "c")

    assert feed(driver, "2dp") == "c\n"


def test_list_escapes_and_marks_line_end() -> None:
    driver = make_driver("a\tb$")

    assert feed(driver, "l") == "a\\tb\\$$\n"


def test_scroll_sets_window_and_prints_from_address() -> None:
    driver = make_driver(*[str(n) for n in range(1, 31)])

    assert feed(driver, "1z5") == "1\n2\n3\n4\n5\n"
    assert driver.session.window_lines == 5
    assert feed(driver, "z") == "6\n7\n8\n9\n10\n"


def test_comment_is_ignored() -> None:
    driver = make_driver("a")

    result = driver.feed("# nothing to see")

    assert result.status == "ok"
    assert driver.session.output.getvalue() == ""


def test_help_explains_last_error() -> None:
    driver = make_driver("a")
    driver.feed("5p")

    assert feed(driver, "h") == "Invalid address\n"


def test_verbose_toggle_prints_pending_message() -> None:
    driver = make_driver("a")
    driver.feed("5p")

    assert feed(driver, "H") == "Invalid address\n"
    assert feed(driver, "5p") == "?\nInvalid address\n"


def test_prompt_toggle() -> None:
    driver = make_driver("a")
    assert driver.prompt == ""

    feed(driver, "P")

    assert driver.prompt == "*"
