"""Front ends driving an editing session."""

from .stdio import run_stdio

__all__ = ["run_stdio"]
