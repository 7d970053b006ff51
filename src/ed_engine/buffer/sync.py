"""Adapter boundary type for mirroring the buffer in host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the current buffer state."""

    text: str
    dot: int
    line_count: int
    modified: bool
    attributes: dict[str, str] = field(default_factory=dict)
