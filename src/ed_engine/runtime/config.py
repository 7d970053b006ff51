"""Editor options and their environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

ENV_PREFIX = "ED_ENGINE_"

DEFAULT_PROMPT = "*"
DEFAULT_WINDOW_LINES = 22
DEFAULT_WINDOW_COLUMNS = 72

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class EditorOptions:
    """Session-wide switches, mostly mirroring the command-line flags."""

    prompt: str = DEFAULT_PROMPT
    prompt_enabled: bool = False
    scripted: bool = False
    verbose: bool = False
    loose_exit_status: bool = False
    restricted: bool = False
    extended_regexp: bool = False
    abort_on_error: bool = False
    encoding: str = "latin-1"
    window_lines: int = DEFAULT_WINDOW_LINES
    window_columns: int = DEFAULT_WINDOW_COLUMNS
    shell: str = "/bin/sh"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EditorOptions":
        """Build options from ``ED_ENGINE_*`` variables and ``LINES``.

        Each field maps to ``ED_ENGINE_<FIELD>``; booleans accept
        ``1/true/yes/on``. ``LINES`` sets the scroll window the way a
        terminal reports it (two lines are kept for the prompt and status).
        """

        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        lines = env.get("LINES")
        if lines and lines.isdigit() and int(lines) > 2:
            values["window_lines"] = int(lines) - 2
        for option in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{option.name.upper()}")
            if raw is None:
                continue
            values[option.name] = _coerce(option.name, option.default, raw)
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "EditorOptions":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _coerce(name: str, default: Any, raw: str) -> Any:
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUTHY
    if isinstance(default, int):
        try:
            value = int(raw)
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer") from exc
        if value <= 0:
            raise ValueError(f"{ENV_PREFIX}{name.upper()} must be positive")
        return value
    return raw


__all__ = [
    "EditorOptions",
    "ENV_PREFIX",
    "DEFAULT_PROMPT",
    "DEFAULT_WINDOW_LINES",
    "DEFAULT_WINDOW_COLUMNS",
]
