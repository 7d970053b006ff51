"""Runtime services: telemetry and configuration."""

from . import telemetry
from .config import EditorOptions

__all__ = ["telemetry", "EditorOptions"]
