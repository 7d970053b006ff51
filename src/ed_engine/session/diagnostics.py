"""Last-error bookkeeping behind the ``h`` and ``H`` commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ed_engine.errors import EdError


@dataclass(slots=True)
class Diagnostics:
    message: str = ""
    error_occurred: bool = False
    verbose: bool = False

    def record(self, error: EdError) -> None:
        self.message = error.message
        self.error_occurred = True

    def explain(self) -> Optional[str]:
        return self.message or None

    def toggle_verbose(self) -> bool:
        self.verbose = not self.verbose
        return self.verbose
