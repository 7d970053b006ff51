"""Where a running command gets its additional input lines from."""

from __future__ import annotations

from collections import deque
from typing import Generator, Iterable, Optional

from .models import InputMode

# Generators that may suspend for input yield an InputMode and receive the
# next line (or None at end of input).
InputGenerator = Generator[InputMode, Optional[str], None]


class InputChannel:
    """Queue of pending lines, optionally backed by the interactive session.

    The top-level channel has no queued lines: every read suspends the
    running command until the driver feeds a line. A global command list is
    a non-interactive channel whose queue holds the list; reading past its
    end returns ``None``. ``G``/``V`` build queued channels with the top-level
    channel as ``parent`` so text entry continues from the user.
    """

    def __init__(
        self,
        lines: Iterable[str] = (),
        *,
        interactive: bool = False,
        parent: Optional["InputChannel"] = None,
    ) -> None:
        self.pending: deque[str] = deque(lines)
        self.interactive = interactive
        self.parent = parent

    @classmethod
    def interactive_root(cls) -> "InputChannel":
        return cls(interactive=True)

    def read(
        self, mode: InputMode
    ) -> Generator[InputMode, Optional[str], Optional[str]]:
        if self.pending:
            return self.pending.popleft()
        if self.parent is not None:
            line = yield from self.parent.read(mode)
            return line
        if not self.interactive:
            return None
        line = yield mode
        return line

    def has_pending(self) -> bool:
        return bool(self.pending)

    def next_pending(self) -> str:
        return self.pending.popleft()


__all__ = ["InputChannel", "InputGenerator"]
