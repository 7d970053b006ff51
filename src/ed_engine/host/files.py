"""Reading and writing documents as sequences of lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from ed_engine.errors import FileAccessError
from ed_engine.runtime import telemetry


@dataclass(slots=True)
class ReadResult:
    lines: List[str]
    trailing_newline: bool
    byte_count: int


def split_text(data: str) -> ReadResult:
    """Split file content into lines, remembering a missing final newline."""

    if not data:
        return ReadResult(lines=[], trailing_newline=True, byte_count=0)
    lines = data.split("\n")
    trailing = lines[-1] == ""
    if trailing:
        lines.pop()
    return ReadResult(lines=lines, trailing_newline=trailing, byte_count=len(data))


class LineFileIO:
    """Line-sequence I/O on real files.

    latin-1 maps every byte to one character, so content (including control
    characters and invalid UTF-8) survives a read/write cycle unchanged and
    character counts equal byte counts.
    """

    def __init__(self, *, encoding: str = "latin-1") -> None:
        self.encoding = encoding
        self.logger = telemetry.get_logger("ed_engine.host")

    def read_lines(self, path: str) -> ReadResult:
        with telemetry.span(name="file::read", metadata={"path": path}):
            try:
                with open(path, "r", encoding=self.encoding, newline="") as handle:
                    data = handle.read()
            except OSError as exc:
                self.logger.debug(f"read failed for {path}: {exc}")
                raise FileAccessError(
                    "Cannot open input file", path=path, reason=exc.strerror or str(exc)
                ) from exc
        result = split_text(data)
        result.byte_count = len(data.encode(self.encoding))
        return result

    def write_lines(
        self,
        path: str,
        lines: Iterable[str],
        *,
        trailing_newline: bool = True,
        append: bool = False,
    ) -> int:
        data = self.render(lines, trailing_newline=trailing_newline)
        with telemetry.span(
            name="file::write", metadata={"path": path, "append": append}
        ):
            try:
                with open(
                    path, "a" if append else "w", encoding=self.encoding, newline=""
                ) as handle:
                    handle.write(data)
            except OSError as exc:
                self.logger.debug(f"write failed for {path}: {exc}")
                raise FileAccessError(
                    "Cannot open output file", path=path, reason=exc.strerror or str(exc)
                ) from exc
        return len(data.encode(self.encoding))

    def render(self, lines: Iterable[str], *, trailing_newline: bool = True) -> str:
        items = list(lines)
        if not items:
            return ""
        text = "\n".join(items)
        return text + "\n" if trailing_newline else text


__all__ = ["LineFileIO", "ReadResult", "split_text"]
