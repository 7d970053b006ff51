from __future__ import annotations

import signal

import pytest

from ed_engine.buffer import Line, LineBuffer, LineDocument
from ed_engine.errors import (
    AddressOutOfRange,
    CommandSyntaxError,
    MarkUnset,
    NothingToPut,
    NothingToUndo,
)
from ed_engine.host import InterruptGate


def make_buffer(*texts: str, trailing_newline: bool = True) -> LineBuffer:
    return LineBuffer.from_lines(texts, trailing_newline=trailing_newline)


def contents(buffer: LineBuffer) -> list[str]:
    return buffer.texts(1, buffer.last_addr)


def test_delete_then_undo_restores_content_and_dot() -> None:
    buffer = make_buffer("alpha", "beta", "gamma")
    buffer.set_dot(2)

    buffer.checkpoint()
    removed = buffer.delete_range(2, 2)

    assert removed == ["beta"]
    assert contents(buffer) == ["alpha", "gamma"]
    assert buffer.dot == 2
    assert buffer.modified is True

    buffer.undo()

    assert contents(buffer) == ["alpha", "beta", "gamma"]
    assert buffer.dot == 2
    assert buffer.modified is False


def test_second_undo_redoes_the_change() -> None:
    buffer = make_buffer("alpha", "beta", "gamma")
    buffer.checkpoint()
    buffer.delete_range(1, 2)

    buffer.undo()
    buffer.undo()

    assert contents(buffer) == ["gamma"]
    assert buffer.dot == 1
    assert buffer.modified is True


def test_undo_without_a_change_fails() -> None:
    buffer = make_buffer("a")

    with pytest.raises(NothingToUndo):
        buffer.undo()

    buffer.checkpoint()
    with pytest.raises(NothingToUndo):
        buffer.undo()


def test_one_checkpoint_covers_several_mutations() -> None:
    buffer = make_buffer("a", "b", "c")
    buffer.checkpoint()
    buffer.delete_range(1, 1)
    buffer.insert_after(2, ["d"])

    assert contents(buffer) == ["b", "c", "d"]

    buffer.undo()

    assert contents(buffer) == ["a", "b", "c"]


def test_delete_moves_dot_to_following_or_last_line() -> None:
    buffer = make_buffer("a", "b", "c")

    buffer.delete_range(3, 3)
    assert buffer.dot == 2

    buffer.delete_range(1, 2)
    assert buffer.dot == 0
    assert buffer.last_addr == 0


def test_delete_stores_lines_in_yank_buffer_for_put() -> None:
    buffer = make_buffer("a", "b", "c")
    buffer.delete_range(1, 2)

    inserted = buffer.put_after(1)

    assert inserted == 2
    assert contents(buffer) == ["c", "a", "b"]
    assert buffer.dot == 3


def test_put_with_empty_yank_buffer_fails() -> None:
    buffer = make_buffer("a")

    with pytest.raises(NothingToPut):
        buffer.put_after(1)


def test_marks_follow_lines_and_unset_when_deleted() -> None:
    buffer = make_buffer("a", "b", "c")
    buffer.set_mark("k", 3)

    buffer.insert_after(0, ["zero"])
    assert buffer.resolve_mark("k") == 4

    buffer.delete_range(4, 4)
    with pytest.raises(MarkUnset):
        buffer.resolve_mark("k")


def test_mark_names_are_lowercase_letters() -> None:
    buffer = make_buffer("a")

    with pytest.raises(CommandSyntaxError):
        buffer.set_mark("A", 1)


def test_rewritten_line_loses_its_mark() -> None:
    buffer = make_buffer("a", "b")
    buffer.set_mark("a", 1)
    line = buffer.line_at(1)

    last = buffer.rewrite_lines(1, 2, {line: ["x", "y"]})

    assert last == 2
    assert contents(buffer) == ["x", "y", "b"]
    with pytest.raises(MarkUnset):
        buffer.resolve_mark("a")


def test_move_range_places_block_after_destination() -> None:
    buffer = make_buffer("1", "2", "3", "4", "5")

    buffer.move_range(1, 2, 5)

    assert contents(buffer) == ["3", "4", "5", "1", "2"]
    assert buffer.dot == 5


def test_move_into_itself_is_rejected() -> None:
    buffer = make_buffer("1", "2", "3")

    with pytest.raises(CommandSyntaxError):
        buffer.move_range(1, 3, 2)


def test_copy_and_join() -> None:
    buffer = make_buffer("a", "b", "c")

    buffer.copy_range(1, 2, 0)
    assert contents(buffer) == ["a", "b", "a", "b", "c"]
    assert buffer.dot == 2

    buffer.join_range(3, 5)
    assert contents(buffer) == ["a", "b", "abc"]
    assert buffer.dot == 3


def test_invalid_ranges_are_rejected() -> None:
    buffer = make_buffer("a", "b")

    with pytest.raises(AddressOutOfRange):
        buffer.delete_range(2, 1)
    with pytest.raises(AddressOutOfRange):
        buffer.delete_range(1, 3)
    with pytest.raises(AddressOutOfRange):
        buffer.insert_after(3, ["x"])


def test_missing_final_newline_only_applies_to_last_line() -> None:
    buffer = make_buffer("a", "b", trailing_newline=False)

    assert buffer.writes_final_newline(2) is False
    assert buffer.writes_final_newline(1) is True

    buffer.insert_after(2, ["c"])
    assert buffer.writes_final_newline(3) is True


def test_load_resets_undo_and_modified_flag() -> None:
    buffer = make_buffer("a")
    buffer.checkpoint()
    buffer.delete_range(1, 1)

    buffer.load(["fresh"])

    assert contents(buffer) == ["fresh"]
    assert buffer.modified is False
    with pytest.raises(NothingToUndo):
        buffer.undo()


def test_lines_compare_by_identity() -> None:
    first, second = Line("same"), Line("same")
    document = LineDocument([first, second])

    assert first != second
    assert document.position_of(second) == 2
    assert Line("same") not in document


def test_interrupt_during_commit_is_raised_after_buffer_is_consistent() -> None:
    gate = InterruptGate()
    buffer = make_buffer("a", "b")
    buffer.critical_section = gate.critical
    buffer.removal_listeners.append(
        lambda lines: gate.handle_sigint(signal.SIGINT, None)
    )
    buffer.checkpoint()

    with pytest.raises(KeyboardInterrupt):
        buffer.delete_range(1, 1)

    assert contents(buffer) == ["b"]
    assert gate.pending is False
    buffer.undo()
    assert contents(buffer) == ["a", "b"]


@pytest.mark.parametrize(
    ("first", "second", "remaining"),
    [
        (1, 1, ["b", "c", "d", "e"]),
        (5, 5, ["a", "b", "c", "d"]),
        (1, 5, []),
        (2, 4, ["a", "e"]),
    ],
)
def test_delete_range_then_undo_restores_content_and_dot(
    first: int, second: int, remaining: list[str]
) -> None:
    buffer = make_buffer("a", "b", "c", "d", "e")
    buffer.set_dot(3)

    buffer.checkpoint()
    buffer.delete_range(first, second)
    assert contents(buffer) == remaining

    buffer.undo()

    assert contents(buffer) == ["a", "b", "c", "d", "e"]
    assert buffer.dot == 3


@pytest.mark.parametrize(
    ("first", "second", "dest", "expected", "dot"),
    [
        (4, 5, 1, ["a", "d", "e", "b", "c", "f"], 3),
        (4, 5, 0, ["d", "e", "a", "b", "c", "f"], 2),
        (1, 2, 4, ["c", "d", "a", "b", "e", "f"], 4),
        (2, 3, 6, ["a", "d", "e", "f", "b", "c"], 6),
    ],
)
def test_move_range_in_both_directions(
    first: int, second: int, dest: int, expected: list[str], dot: int
) -> None:
    buffer = make_buffer("a", "b", "c", "d", "e", "f")
    moved = buffer.document.slice(first, second)

    buffer.move_range(first, second, dest)

    assert contents(buffer) == expected
    assert buffer.dot == dot
    assert buffer.document.slice(dot - len(moved) + 1, dot) == moved


def test_edits_after_undo_leave_the_snapshot_intact() -> None:
    buffer = make_buffer("a", "b")
    buffer.checkpoint()
    buffer.delete_range(1, 1)
    buffer.undo()

    buffer.insert_after(2, ["c"])
    buffer.undo()

    assert contents(buffer) == ["b"]


def test_position_lookup_walks_outward_from_a_hint() -> None:
    lines = [Line(text) for text in "abcdef"]
    document = LineDocument(lines)

    assert document.position_of(lines[4], near=3) == 5
    assert document.position_of(lines[1], near=4) == 2
    document.splice(0, 2, ())
    assert document.position_of(lines[4], near=1) == 3
    assert document.position_of(lines[0]) is None
