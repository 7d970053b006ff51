"""Helpers shared by the command handlers: default ranges and text entry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generator, Optional, Tuple

from ed_engine.buffer import ensure_range
from ed_engine.errors import AddressOutOfRange

from .channel import InputGenerator
from .models import CommandRequest, InputMode

if TYPE_CHECKING:  # pragma: no cover
    from ed_engine.session.context import EditorSession

Handler = Callable[["EditorSession", CommandRequest], Optional[InputGenerator]]


def line_range(
    session: "EditorSession",
    request: CommandRequest,
    first: Optional[int] = None,
    second: Optional[int] = None,
) -> Tuple[int, int]:
    """Addresses of ``request`` or the given defaults (dot when omitted).

    The result always satisfies ``1 <= first <= second <= $``.
    """

    buffer = session.buffer
    addresses = request.addresses
    if addresses.count == 0:
        addresses = addresses.defaults(
            buffer.dot if first is None else first,
            buffer.dot if second is None else second,
        )
    ensure_range(addresses.first, addresses.second, buffer.last_addr)
    return addresses.first, addresses.second


def whole_buffer(session: "EditorSession", request: CommandRequest) -> Tuple[int, int]:
    """Range for commands that default to ``1,$``; an empty buffer gives ``0,0``."""

    if request.addresses.count == 0 and session.buffer.last_addr == 0:
        return 0, 0
    return line_range(session, request, 1, session.buffer.last_addr)


def target_line(
    session: "EditorSession",
    request: CommandRequest,
    default: Optional[int] = None,
    *,
    allow_zero: bool = True,
) -> int:
    """The single (second) address of a one-address command."""

    addr = request.addresses.second
    if request.addresses.count == 0 and default is not None:
        addr = default
    lowest = 0 if allow_zero else 1
    if addr < lowest or addr > session.buffer.last_addr:
        raise AddressOutOfRange()
    return addr


def enter_text(
    session: "EditorSession",
    request: CommandRequest,
    after: int,
    *,
    empty_dot: Optional[int] = None,
) -> Generator[InputMode, Optional[str], int]:
    """Read text lines until a lone ``.`` or end of input.

    Every line is inserted as soon as it arrives, so an interrupted entry
    keeps what was typed. Returns the number of lines inserted. When
    nothing is entered dot moves to ``empty_dot`` (default ``after``).
    """

    buffer = session.buffer
    inserted = 0
    addr = after
    while True:
        line = yield from request.channel.read(InputMode.TEXT)
        if line is None or line == ".":
            break
        buffer.insert_after(addr, [line], label=f"text_{request.kind.name.lower()}")
        addr += 1
        inserted += 1
    if not inserted:
        buffer.set_dot(after if empty_dot is None else min(empty_dot, buffer.last_addr))
    return inserted


__all__ = ["Handler", "enter_text", "line_range", "target_line", "whole_buffer"]
