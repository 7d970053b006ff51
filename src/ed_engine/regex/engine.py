"""Pattern compilation, search, and substitution."""

from __future__ import annotations

import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterator, Match, Optional, Pattern, Sequence, Tuple

from ed_engine.errors import NoPreviousPattern, PatternNotFound, RegexSyntaxError
from ed_engine.runtime import telemetry

from .replacement import ReplacementTemplate
from .translate import translate

_ERROR_TEXTS = (
    ("missing ), unterminated subpattern", "Unmatched ( or \\("),
    ("unbalanced parenthesis", "Unmatched ) or \\)"),
    ("unterminated character set", "Unmatched [, [^, [:, [., or [="),
    ("invalid group reference", "Invalid back reference"),
    ("nothing to repeat", "Invalid preceding regular expression"),
    ("multiple repeat", "Invalid preceding regular expression"),
    ("bad character range", "Invalid range end"),
    ("bad escape (end of pattern)", "Trailing backslash"),
)


def _regerror(exc: re.error) -> str:
    text = str(exc)
    for needle, message in _ERROR_TEXTS:
        if needle in text:
            return message
    return "Invalid regular expression"


class CompiledPattern:
    """A compiled search pattern. The underlying ``re`` object stays private."""

    __slots__ = ("source", "ignore_case", "_regex")

    def __init__(self, source: str, ignore_case: bool, regex: Pattern[str]) -> None:
        self.source = source
        self.ignore_case = ignore_case
        self._regex = regex

    def matches(self, text: str) -> bool:
        return self._regex.search(text) is not None

    def finditer(self, text: str) -> Iterator[Match[str]]:
        """POSIX-style match iteration.

        An empty match directly after the previous match is skipped, so
        ``s/x*/-/g`` on ``abxd`` yields ``-a-b-d-``.
        """

        pos = 0
        previous_end = -1
        length = len(text)
        while pos <= length:
            match = self._regex.search(text, pos)
            if match is None:
                return
            start, end = match.span()
            if start == end == previous_end:
                pos = start + 1
                continue
            yield match
            previous_end = end
            pos = end if end > start else end + 1

    def substitute(
        self,
        text: str,
        template: ReplacementTemplate,
        *,
        occurrence: int = 1,
        global_: bool = False,
    ) -> Optional[str]:
        """Return ``text`` with replacements applied, or ``None`` if nothing changed.

        ``occurrence`` selects the first match to replace; with ``global_``
        every later match is replaced too.
        """

        pieces: list[str] = []
        pos = 0
        count = 0
        replaced = False
        for match in self.finditer(text):
            count += 1
            if count < occurrence:
                continue
            pieces.append(text[pos : match.start()])
            pieces.append(template.expand(match))
            pos = match.end()
            replaced = True
            if not global_:
                break
        if not replaced:
            return None
        pieces.append(text[pos:])
        return "".join(pieces)

    def __repr__(self) -> str:
        flag = "I" if self.ignore_case else ""
        return f"CompiledPattern({self.source!r}{', ' + flag if flag else ''})"


@dataclass(slots=True)
class Substitution:
    """Everything a bare ``s`` needs to repeat the previous substitution."""

    pattern: CompiledPattern
    template: ReplacementTemplate
    occurrence: int = 1
    global_: bool = False
    print_flags: int = 0


class PatternEngine:
    """Owns the last pattern, the last substitution, and a small compile cache."""

    def __init__(self, *, extended: bool = False, cache_size: int = 64) -> None:
        self.extended = extended
        self._cache: "OrderedDict[Tuple[str, bool], CompiledPattern]" = OrderedDict()
        self._cache_size = cache_size
        self._last: Optional[CompiledPattern] = None
        self._last_substitution: Optional[Substitution] = None
        self.logger = telemetry.get_logger("ed_engine.regex")

    @property
    def last(self) -> Optional[CompiledPattern]:
        return self._last

    @property
    def last_substitution(self) -> Optional[Substitution]:
        return self._last_substitution

    def compile(self, source: str, *, ignore_case: bool = False) -> CompiledPattern:
        """Compile ``source``; an empty source means the last pattern.

        Does not change the remembered pattern, see ``remember``.
        """

        if source == "":
            if self._last is None:
                raise NoPreviousPattern()
            if ignore_case and not self._last.ignore_case:
                return self.compile(self._last.source, ignore_case=True)
            return self._last
        key = (source, ignore_case)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            return cached
        flags = re.ASCII | (re.IGNORECASE if ignore_case else 0)
        translated = translate(source, extended=self.extended)
        try:
            regex = re.compile(translated, flags)
        except re.error as exc:
            self.logger.debug(f"regex compile failed: {source!r} -> {translated!r}: {exc}")
            raise RegexSyntaxError(_regerror(exc)) from exc
        pattern = CompiledPattern(source, ignore_case, regex)
        self._cache[key] = pattern
        if len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return pattern

    def remember(self, pattern: CompiledPattern) -> CompiledPattern:
        self._last = pattern
        return pattern

    def resolve(self, source: str, *, ignore_case: bool = False) -> CompiledPattern:
        """Compile and remember, as searches and global commands do."""
        return self.remember(self.compile(source, ignore_case=ignore_case))

    def commit_substitution(self, substitution: Substitution) -> None:
        self._last = substitution.pattern
        self._last_substitution = substitution

    def search(
        self,
        pattern: CompiledPattern,
        texts: Sequence[str],
        start: int,
        *,
        forward: bool = True,
    ) -> int:
        """Address of the next line matching ``pattern`` after ``start``.

        The scan wraps around the document and examines ``start`` itself last.
        """

        last = len(texts)
        addr = start
        for _ in range(last + 1):
            if forward:
                addr = addr + 1 if addr < last else 0
            else:
                addr = addr - 1 if addr > 0 else last
            if addr and pattern.matches(texts[addr - 1]):
                return addr
            if addr == start:
                break
        raise PatternNotFound()


__all__ = ["CompiledPattern", "PatternEngine", "Substitution"]
