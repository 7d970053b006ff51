"""High-level buffer façade combining document, state, marks, yank, and undo."""

from __future__ import annotations

from contextlib import AbstractContextManager, nullcontext
from typing import Callable, ContextManager, Iterable, Mapping, Optional, Sequence

from ed_engine.errors import CommandSyntaxError, MarkUnset, NothingToPut
from ed_engine.runtime import telemetry

from .document import Line, LineDocument
from .marks import MarkTable
from .state import BufferState
from .sync import BufferMirror
from .undo import UndoSlot, UndoSnapshot
from .validation import ensure_address, ensure_range
from .yank import YankBuffer

RemovalListener = Callable[[Sequence[Line]], None]


class LineBuffer:
    def __init__(
        self,
        *,
        name: str = "main",
        document: Optional[LineDocument] = None,
        state: Optional[BufferState] = None,
        marks: Optional[MarkTable] = None,
        yank: Optional[YankBuffer] = None,
        undo: Optional[UndoSlot] = None,
    ) -> None:
        self.name = name
        self.document = document or LineDocument()
        self.state = state or BufferState()
        self.marks = marks or MarkTable()
        self.yank = yank or YankBuffer()
        self.undo_slot = undo or UndoSlot()
        self.removal_listeners: list[RemovalListener] = [self.marks.discard_lines]
        self.critical_section: Callable[[], ContextManager[object]] = nullcontext
        self.undo_count = 0

    @classmethod
    def from_lines(
        cls,
        texts: Iterable[str],
        *,
        trailing_newline: bool = True,
        name: str = "main",
    ) -> "LineBuffer":
        buffer = cls(
            name=name,
            document=LineDocument.from_texts(texts, trailing_newline=trailing_newline),
        )
        buffer.state.dot = buffer.last_addr
        return buffer

    # -- queries ---------------------------------------------------------

    @property
    def last_addr(self) -> int:
        return self.document.line_count

    @property
    def dot(self) -> int:
        return self.state.dot

    @property
    def modified(self) -> bool:
        return self.state.modified

    def set_dot(self, addr: int) -> None:
        self.state.set_dot(ensure_address(addr, self.last_addr))

    def line_text(self, addr: int) -> str:
        ensure_address(addr, self.last_addr, allow_zero=False)
        return self.document.line(addr).text

    def texts(self, first: int, second: int) -> list[str]:
        return self.document.texts(first, second)

    def line_at(self, addr: int) -> Line:
        ensure_address(addr, self.last_addr, allow_zero=False)
        return self.document.line(addr)

    def position_of(self, line: Line, *, near: Optional[int] = None) -> Optional[int]:
        return self.document.position_of(line, near=near)

    def set_mark(self, name: str, addr: int) -> None:
        self.marks.set(name, self.line_at(addr))

    def resolve_mark(self, name: str) -> int:
        line = self.marks.get(name)
        position = self.position_of(line) if line is not None else None
        if position is None:
            raise MarkUnset()
        return position

    def writes_final_newline(self, second: int) -> bool:
        """Whether a write ending at ``second`` terminates its last line."""
        return not (second == self.last_addr and self.document.ends_without_newline())

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text="\n".join(self.document.texts()),
            dot=self.state.dot,
            line_count=self.last_addr,
            modified=self.state.modified,
            attributes=dict(attributes or {}),
        )

    # -- undo ------------------------------------------------------------

    def checkpoint(self) -> None:
        """Start a new undo unit for the command about to mutate the buffer."""
        self.undo_slot.arm(self.state.dot, self.state.modified)

    def undo(self) -> None:
        live = UndoSnapshot(
            document=self.document, dot=self.state.dot, modified=self.state.modified
        )
        with telemetry.span(
            name="buffer::undo", component=True, metadata={"buffer": self.name}
        ), self.critical_section():
            previous = self.undo_slot.swap(live)
            self.document = previous.document
            self.state.dot = min(previous.dot, self.last_addr)
            self.state.modified = previous.modified
            self.undo_count += 1

    # -- mutations -------------------------------------------------------

    def insert_after(
        self,
        addr: int,
        texts: Iterable[str],
        *,
        unterminated: bool = False,
        label: str = "insert",
    ) -> int:
        """Insert ``texts`` after line ``addr``; dot becomes the last inserted line."""

        ensure_address(addr, self.last_addr)
        new_lines = [Line(text) for text in texts]
        if not new_lines:
            self.state.set_dot(addr)
            return 0
        with Transaction(self, label) as tx:
            tx.commit(
                addr,
                addr,
                new_lines,
                dot=addr + len(new_lines),
                unterminated=new_lines[-1] if unterminated else None,
            )
        return len(new_lines)

    def delete_range(self, first: int, second: int, *, yank: bool = True) -> list[str]:
        ensure_range(first, second, self.last_addr)
        removed = self.document.slice(first, second)
        texts = [line.text for line in removed]
        remaining = self.last_addr - len(removed)
        with Transaction(self, "delete_range") as tx:
            tx.commit(first - 1, second, (), dot=min(first, remaining), removed=removed)
        if yank:
            self.yank.store(texts)
        return texts

    def replace_range(
        self, first: int, second: int, texts: Iterable[str], *, label: str = "replace_range"
    ) -> None:
        """Replace the range with new lines; dot becomes the last new line."""

        ensure_range(first, second, self.last_addr)
        removed = self.document.slice(first, second)
        new_lines = [Line(text) for text in texts]
        marker = None
        if new_lines and self.document.unterminated in removed:
            marker = new_lines[-1]
        if new_lines:
            dot = first - 1 + len(new_lines)
        else:
            dot = min(first, self.last_addr - len(removed))
        with Transaction(self, label) as tx:
            tx.commit(first - 1, second, new_lines, dot=dot, removed=removed, unterminated=marker)

    def rewrite_lines(
        self, first: int, second: int, rewrites: Mapping[Line, Sequence[str]]
    ) -> Optional[int]:
        """Replace selected lines of a range, keeping the others untouched.

        Each key of ``rewrites`` is a line inside ``first..second``; its value is
        the list of texts that replaces it (more than one when a substitution
        inserted newlines). Returns the address of the last replacement line.
        """

        ensure_range(first, second, self.last_addr)
        if not rewrites:
            return None
        output: list[Line] = []
        removed: list[Line] = []
        marker: Optional[Line] = None
        last_changed: Optional[int] = None
        for line in self.document.slice(first, second):
            replacement = rewrites.get(line)
            if replacement is None:
                output.append(line)
                continue
            removed.append(line)
            new_lines = [Line(text) for text in replacement]
            output.extend(new_lines)
            if line is self.document.unterminated and new_lines:
                marker = new_lines[-1]
            last_changed = first - 1 + len(output)
        with Transaction(self, "rewrite_lines") as tx:
            tx.commit(
                first - 1,
                second,
                output,
                dot=last_changed if last_changed is not None else self.state.dot,
                removed=removed,
                unterminated=marker,
            )
        return last_changed

    def move_range(self, first: int, second: int, dest: int) -> None:
        ensure_range(first, second, self.last_addr)
        ensure_address(dest, self.last_addr)
        if first <= dest < second:
            raise CommandSyntaxError("Invalid destination")
        if dest == first - 1 or dest == second:
            self.state.set_dot(second)
            return
        document = self.document
        block = document.slice(first, second)
        # Only the lines between the block and the destination change place.
        if dest < first:
            start, end = dest, second
            window = block + document.slice(dest + 1, first - 1)
            dot = dest + len(block)
        else:
            start, end = first - 1, dest
            window = document.slice(second + 1, dest) + block
            dot = dest
        with Transaction(self, "move_range") as tx:
            tx.commit(start, end, window, dot=dot)

    def copy_range(self, first: int, second: int, dest: int) -> None:
        ensure_range(first, second, self.last_addr)
        ensure_address(dest, self.last_addr)
        copies = [Line(line.text) for line in self.document.slice(first, second)]
        with Transaction(self, "copy_range") as tx:
            tx.commit(dest, dest, copies, dot=dest + len(copies))

    def join_range(self, first: int, second: int) -> None:
        ensure_range(first, second, self.last_addr)
        if first == second:
            return
        joined = "".join(self.document.texts(first, second))
        self.replace_range(first, second, [joined], label="join_range")

    def yank_range(self, first: int, second: int) -> None:
        ensure_range(first, second, self.last_addr)
        self.yank.store(self.document.texts(first, second))

    def put_after(self, addr: int) -> int:
        if self.yank.is_empty():
            raise NothingToPut()
        return self.insert_after(addr, self.yank.contents(), label="put")

    def load(self, texts: Iterable[str], *, trailing_newline: bool = True) -> None:
        """Replace the whole document (``e``); resets undo and the modified flag."""

        loaded = LineDocument.from_texts(texts, trailing_newline=trailing_newline)
        removed = self.document.slice(1, self.last_addr)
        with Transaction(self, "load") as tx:
            tx.commit(
                0,
                self.last_addr,
                list(loaded),
                dot=loaded.line_count,
                removed=removed,
                unterminated=loaded.unterminated,
                modified=False,
            )
        self.undo_slot.reset()
        self.state.warned = False


class Transaction(AbstractContextManager["Transaction"]):
    """Scope of one buffer mutation: telemetry span plus interrupt deferral."""

    def __init__(self, buffer: LineBuffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._guard_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        self._guard_cm = self.buffer.critical_section()
        self._guard_cm.__enter__()
        return self

    def commit(
        self,
        start: int,
        end: int,
        replacement: Sequence[Line],
        *,
        dot: int,
        removed: Sequence[Line] = (),
        unterminated: Optional[Line] = None,
        modified: bool = True,
    ) -> None:
        """Splice ``replacement`` over the 0-based slice ``[start:end]``."""

        buffer = self.buffer
        buffer.undo_slot.capture(buffer.document)
        buffer.document.splice(start, end, replacement, unterminated=unterminated)
        buffer.state.set_dot(dot)
        if modified:
            buffer.state.mark_modified()
        else:
            buffer.state.mark_saved()
        if removed:
            for listener in list(buffer.removal_listeners):
                listener(removed)

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if self._guard_cm is not None:
                self._guard_cm.__exit__(exc_type, exc, tb)
        finally:
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["LineBuffer", "Transaction", "RemovalListener"]
