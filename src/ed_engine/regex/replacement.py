"""Replacement templates for the substitute command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Match, Tuple, Union

# A part is literal text or the number of the group to insert (0 = whole match).
TemplatePart = Union[str, int]


@dataclass(frozen=True, slots=True)
class ReplacementTemplate:
    source: str
    parts: Tuple[TemplatePart, ...]

    @classmethod
    def parse(cls, source: str) -> "ReplacementTemplate":
        """Parse ``&``, ``\\1``-``\\9``, ``\\&`` and escaped newlines.

        Any other escaped character stands for itself.
        """

        parts: list[TemplatePart] = []
        literal: list[str] = []
        index = 0
        while index < len(source):
            char = source[index]
            if char == "&":
                _flush(parts, literal)
                parts.append(0)
                index += 1
                continue
            if char == "\\" and index + 1 < len(source):
                escaped = source[index + 1]
                index += 2
                if escaped in "123456789":
                    _flush(parts, literal)
                    parts.append(int(escaped))
                else:
                    literal.append(escaped)
                continue
            literal.append(char)
            index += 1
        _flush(parts, literal)
        return cls(source=source, parts=tuple(parts))

    def expand(self, match: Match[str]) -> str:
        groups = match.re.groups
        pieces: list[str] = []
        for part in self.parts:
            if isinstance(part, str):
                pieces.append(part)
            elif part == 0:
                pieces.append(match.group(0))
            elif part <= groups:
                pieces.append(match.group(part) or "")
            else:
                pieces.append(str(part))
        return "".join(pieces)


def _flush(parts: list[TemplatePart], literal: list[str]) -> None:
    if literal:
        parts.append("".join(literal))
        literal.clear()


__all__ = ["ReplacementTemplate", "TemplatePart"]
