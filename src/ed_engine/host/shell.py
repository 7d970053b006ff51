"""Shell command execution for ``!``, ``r !cmd``, ``w !cmd`` and ``e !cmd``."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Optional

from ed_engine.errors import ShellSpawnFailure
from ed_engine.runtime import telemetry


@dataclass(slots=True)
class ShellResult:
    output: str
    status: int


class ShellRunner:
    """Runs a command through ``shell -c`` and captures its standard output.

    The call blocks until the child exits. Standard error is inherited so the
    user sees the command's diagnostics directly.
    """

    def __init__(self, shell: str = "/bin/sh", *, encoding: str = "latin-1") -> None:
        self.shell = shell
        self.encoding = encoding

    def run(self, command: str, *, input_text: Optional[str] = None) -> ShellResult:
        payload = input_text.encode(self.encoding) if input_text is not None else None
        with telemetry.span(name="shell::run", metadata={"command": command}) as handle:
            try:
                completed = subprocess.run(
                    [self.shell, "-c", command],
                    input=payload,
                    stdout=subprocess.PIPE,
                    stdin=None if payload is not None else subprocess.DEVNULL,
                    check=False,
                )
            except OSError as exc:
                raise ShellSpawnFailure() from exc
            handle.add_metadata("status", completed.returncode)
        return ShellResult(
            output=completed.stdout.decode(self.encoding),
            status=completed.returncode,
        )


__all__ = ["ShellResult", "ShellRunner"]
