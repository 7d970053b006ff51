"""Line document used by the buffer façade."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple


@dataclass(frozen=True, eq=False, slots=True)
class Line:
    """One line of text. Compared by identity, which marks and globals rely on."""

    text: str


class LineDocument:
    """Ordered sequence of ``Line`` objects edited in place.

    The undo slot takes a ``copy`` before the first edit of a command, so the
    live document never shares its list with a snapshot. ``unterminated`` is
    the line that was read without a trailing newline, if any; it only takes
    effect while that line is last.
    """

    __slots__ = ("_lines", "unterminated", "version", "_positions", "_positions_version")

    def __init__(
        self,
        lines: Iterable[Line] = (),
        *,
        unterminated: Optional[Line] = None,
        version: int = 0,
    ) -> None:
        self._lines: list[Line] = list(lines)
        self.unterminated = unterminated
        self.version = version
        self._positions: Dict[int, int] = {}
        self._positions_version = -1

    @classmethod
    def from_texts(
        cls, texts: Iterable[str], *, trailing_newline: bool = True
    ) -> "LineDocument":
        lines = [Line(text) for text in texts]
        unterminated = lines[-1] if lines and not trailing_newline else None
        return cls(lines, unterminated=unterminated)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line(self, addr: int) -> Line:
        """Return the line at 1-based ``addr``."""
        return self._lines[addr - 1]

    def slice(self, first: int, second: int) -> Tuple[Line, ...]:
        return tuple(self._lines[first - 1 : second])

    def texts(self, first: int = 1, second: Optional[int] = None) -> list[str]:
        end = len(self._lines) if second is None else second
        return [line.text for line in self._lines[first - 1 : end]]

    def position_of(self, line: Line, *, near: Optional[int] = None) -> Optional[int]:
        """1-based address of ``line`` or ``None`` when it is not in the document.

        With ``near`` the search walks outward from that address, which is
        cheap when the line moved only a little since the caller last saw it.
        Otherwise a position index is built once per version.
        """

        lines = self._lines
        count = len(lines)
        if near is not None and count:
            ahead = min(max(near, 1), count) - 1
            behind = ahead - 1
            while ahead < count or behind >= 0:
                if ahead < count:
                    if lines[ahead] is line:
                        return ahead + 1
                    ahead += 1
                if behind >= 0:
                    if lines[behind] is line:
                        return behind + 1
                    behind -= 1
            return None
        if self._positions_version != self.version:
            self._positions = {id(item): index for index, item in enumerate(lines, 1)}
            self._positions_version = self.version
        return self._positions.get(id(line))

    def __contains__(self, line: object) -> bool:
        return isinstance(line, Line) and self.position_of(line) is not None

    def splice(
        self,
        start: int,
        end: int,
        replacement: Sequence[Line],
        *,
        unterminated: Optional[Line] = None,
    ) -> None:
        """Replace the 0-based slice ``[start:end]`` with ``replacement``."""

        self._lines[start:end] = replacement
        if unterminated is not None:
            self.unterminated = unterminated
        self.version += 1

    def copy(self) -> "LineDocument":
        return LineDocument(self._lines, unterminated=self.unterminated, version=self.version)

    def ends_without_newline(self) -> bool:
        # A marker whose line was deleted never matches: inserted lines are new objects.
        return bool(self._lines) and self._lines[-1] is self.unterminated


__all__ = ["Line", "LineDocument"]
