"""Signal policy: deferred interrupts and the hangup dump."""

from __future__ import annotations

import os
import signal
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from ed_engine.runtime import telemetry

HANGUP_FILE = "ed.hup"


class InterruptGate:
    """Defers SIGINT while a buffer transaction is committing.

    Outside a critical section the handler raises ``KeyboardInterrupt`` right
    away, which aborts whatever the session is doing (including a blocking
    read). Inside one it only records the signal; the interrupt is raised
    when the outermost section exits, after the buffer and the undo snapshot
    are consistent again.
    """

    def __init__(self) -> None:
        self._depth = 0
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    @contextmanager
    def critical(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0 and self._pending:
                self._pending = False
                raise KeyboardInterrupt

    def handle_sigint(self, signum: int, frame: Any) -> None:
        del signum, frame
        if self._depth:
            self._pending = True
            return
        raise KeyboardInterrupt


def hangup_paths(home: Optional[str] = None) -> list[str]:
    paths = [HANGUP_FILE]
    home = home if home is not None else os.environ.get("HOME", "")
    if home:
        paths.append(os.path.join(home, HANGUP_FILE))
    return paths


def install_signal_handlers(
    gate: InterruptGate, *, on_hangup: Callable[[], None]
) -> None:
    """Wire SIGINT to ``gate`` and SIGHUP to ``on_hangup``; ignore SIGQUIT."""

    def _hangup(signum: int, frame: Any) -> None:
        del signum, frame
        telemetry.record_event("session.hangup", level="warning")
        on_hangup()

    signal.signal(signal.SIGINT, gate.handle_sigint)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, _hangup)
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)


__all__ = ["InterruptGate", "install_signal_handlers", "hangup_paths", "HANGUP_FILE"]
