"""Editing session: shared context, input driver, and output formatting."""

from .bus import EventBus, EventCallback
from .context import EditorSession
from .diagnostics import Diagnostics
from .driver import EXIT_ERROR, EXIT_FATAL, EXIT_OK, FeedResult, SessionDriver
from .formatting import format_line

__all__ = [
    "EventBus",
    "EventCallback",
    "EditorSession",
    "Diagnostics",
    "FeedResult",
    "SessionDriver",
    "EXIT_OK",
    "EXIT_ERROR",
    "EXIT_FATAL",
    "format_line",
]
