from __future__ import annotations

import io
import time

import pytest

from ed_engine.buffer import Line, LineBuffer, LineDocument
from ed_engine.commands import ActiveList, InputMode
from ed_engine.session import EditorSession, SessionDriver


def make_driver(*lines: str) -> SessionDriver:
    session = EditorSession(
        buffer=LineBuffer.from_lines(lines),
        output=io.StringIO(),
        errors=io.StringIO(),
    )
    return SessionDriver(session)


def run(driver: SessionDriver, *lines: str) -> str:
    output = driver.session.output
    start = len(output.getvalue())
    for line in lines:
        driver.feed(line)
    return output.getvalue()[start:]


def contents(driver: SessionDriver) -> list[str]:
    buffer = driver.session.buffer
    return buffer.texts(1, buffer.last_addr)


def test_global_delete_is_one_undo_unit() -> None:
    driver = make_driver("cat", "dog", "bat")

    run(driver, "g/a/d")
    assert contents(driver) == ["dog"]

    run(driver, "u")
    assert contents(driver) == ["cat", "dog", "bat"]


def test_inverse_global_runs_on_non_matching_lines() -> None:
    driver = make_driver("cat", "dog", "bat")

    run(driver, "v/a/d")

    assert contents(driver) == ["cat", "bat"]


def test_empty_command_list_prints_matches() -> None:
    driver = make_driver("ab", "c", "abc")

    assert run(driver, "g/a/") == "ab\nabc\n"


def test_command_list_continues_over_escaped_newlines() -> None:
    driver = make_driver("a", "b")

    result = driver.feed("g/./s/$/!/\\")
    assert result.mode is InputMode.CONTINUATION

    run(driver, "s/^/>/")

    assert contents(driver) == [">a!", ">b!"]


def test_lines_deleted_by_an_earlier_iteration_are_skipped() -> None:
    driver = make_driver("a1", "a2", "b")

    run(driver, "g/a/.,+1d")

    assert contents(driver) == ["b"]


def test_matches_are_fixed_before_commands_run() -> None:
    driver = make_driver("a", "b")

    run(driver, "g/a/t$")

    assert contents(driver) == ["a", "b", "a"]


def test_nested_global_is_rejected() -> None:
    driver = make_driver("ab")

    result = driver.feed("g/a/g/b/p")

    assert result.message == "Cannot nest global commands"
    assert driver.session.buffer.removal_listeners == [
        driver.session.buffer.marks.discard_lines
    ]


def test_missing_delimiter_is_an_error() -> None:
    assert make_driver("a").feed("g/a").message == "Missing pattern delimiter"


def test_substitute_without_match_inside_global_is_silent() -> None:
    driver = make_driver("ab", "cd")

    result = driver.feed("g/./s/a/A/")

    assert result.status == "ok"
    assert contents(driver) == ["Ab", "cd"]


def test_interactive_global_reads_a_command_per_line() -> None:
    driver = make_driver("one", "two", "three")

    result = driver.feed("G/t/")
    assert result.mode is InputMode.GLOBAL_COMMAND
    assert driver.prompt == ""

    run(driver, "s/t/T/", "")
    run(driver, "&", "")

    assert contents(driver) == ["one", "Two", "Three"]
    assert driver.session.output.getvalue() == "two\nthree\n"
    assert driver.mode is InputMode.COMMAND


def test_interactive_global_repeat_needs_a_previous_command() -> None:
    driver = make_driver("one")
    driver.feed("G/o/")

    assert driver.feed("&").message == "No previous command"


def test_end_of_input_inside_interactive_global() -> None:
    driver = make_driver("one")
    driver.feed("G/o/")

    result = driver.feed_eof()

    assert result.message == "Unexpected end of file"
    assert driver.mode is InputMode.COMMAND


def test_active_list_skips_discarded_lines() -> None:
    lines = [Line("a"), Line("b"), Line("c")]
    active = ActiveList(lines)

    active.discard([lines[1]])

    assert list(active) == [lines[0], lines[2]]
    assert len(active) == 3


def test_global_command_copies_the_document_once(monkeypatch: pytest.MonkeyPatch) -> None:
    driver = make_driver(*["abc"] * 50)
    copies: list[int] = []
    copy = LineDocument.copy

    def counting_copy(document: LineDocument) -> LineDocument:
        copies.append(len(document))
        return copy(document)

    monkeypatch.setattr(LineDocument, "copy", counting_copy)

    run(driver, "g/a/s/b/B/")

    assert copies == [50]
    assert set(contents(driver)) == {"aBc"}
    run(driver, "u")
    assert set(contents(driver)) == {"abc"}


def test_global_commands_scale_to_large_buffers() -> None:
    driver = make_driver(*["abc"] * 10000)

    started = time.perf_counter()
    run(driver, "g/a/s/b/B/")
    run(driver, "g/B/m0")
    run(driver, "g/a/d")
    elapsed = time.perf_counter() - started

    assert contents(driver) == []
    assert elapsed < 15
