"""Command parsing, addressing, and the handler table."""

from .address import AddressResolver
from .channel import InputChannel, InputGenerator
from .dispatcher import CommandDispatcher
from .globals import ActiveList, GlobalExecutor
from .models import (
    ADDRESSLESS,
    AddressRange,
    CommandKind,
    CommandRequest,
    InputMode,
    PrintFlags,
)
from .scanner import CommandScanner

__all__ = [
    "ADDRESSLESS",
    "ActiveList",
    "AddressRange",
    "AddressResolver",
    "CommandDispatcher",
    "CommandKind",
    "CommandRequest",
    "CommandScanner",
    "GlobalExecutor",
    "InputChannel",
    "InputGenerator",
    "InputMode",
    "PrintFlags",
]
