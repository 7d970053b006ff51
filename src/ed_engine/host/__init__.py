"""Host collaborators: files, shell commands, and signals."""

from .files import LineFileIO, ReadResult, split_text
from .shell import ShellResult, ShellRunner
from .signals import InterruptGate, hangup_paths, install_signal_handlers

__all__ = [
    "LineFileIO",
    "ReadResult",
    "split_text",
    "ShellResult",
    "ShellRunner",
    "InterruptGate",
    "hangup_paths",
    "install_signal_handlers",
]
