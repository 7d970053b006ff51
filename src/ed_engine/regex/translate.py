"""Translate POSIX basic/extended regular expressions into Python ``re`` syntax.

Python's engine differs from POSIX in which characters are special, so the
pattern is rewritten token by token:

* BRE: ``\\( \\) \\{ \\} \\| \\+ \\?`` are operators, their bare forms are
  literals; ``*`` at the start of an expression is literal.
* ``^`` anchors only at the start of an expression (or after ``\\(``/``\\|``)
  and ``$`` only at its end (or before ``\\)``/``\\|``). Elsewhere both are
  literal.
* Bracket expressions take ``]`` literally when first, treat ``\\`` as an
  ordinary character and expand ``[:class:]`` names.
* ``\\<`` and ``\\>`` become word-boundary assertions.
"""

from __future__ import annotations

import re
from typing import Tuple

from ed_engine.errors import RegexSyntaxError

_CHARACTER_CLASSES = {
    "alnum": "0-9A-Za-z",
    "alpha": "A-Za-z",
    "blank": " \\t",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "\\x21-\\x7e",
    "lower": "a-z",
    "print": "\\x20-\\x7e",
    "punct": re.escape("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"),
    "space": " \\t\\n\\r\\f\\v",
    "upper": "A-Z",
    "xdigit": "0-9A-Fa-f",
}

_SIMPLE_ESCAPES = {
    "<": r"\b(?=\w)",
    ">": r"\b(?<=\w)",
    "b": r"\b",
    "B": r"\B",
    "w": r"\w",
    "W": r"\W",
    "s": r"\s",
    "S": r"\S",
    "`": r"\A",
    "'": r"\Z",
}

_BRACKET_SPECIALS = set("\\[]^&~|")

UNMATCHED_BRACKET = "Unmatched [, [^, [:, [., or [="
INVALID_PRECEDING = "Invalid preceding regular expression"


def translate(pattern: str, *, extended: bool = False) -> str:
    """Return the Python equivalent of a BRE (or ERE when ``extended``)."""

    out: list[str] = []
    index = 0
    length = len(pattern)
    # True where a new (sub)expression starts: '^' anchors, BRE '*' is literal.
    at_start = True
    depth = 0

    while index < length:
        char = pattern[index]

        if char == "\\":
            if index + 1 >= length:
                raise RegexSyntaxError("Trailing backslash")
            escaped = pattern[index + 1]
            index += 2
            if not extended and escaped in "(){}|+?":
                if escaped == "{" and at_start:
                    raise RegexSyntaxError(INVALID_PRECEDING)
                token, index, depth = _bre_operator(pattern, escaped, index, depth)
                out.append(token)
                at_start = escaped in "(|"
                continue
            if escaped in "123456789":
                out.append(f"(?:\\{escaped})")
            elif escaped in _SIMPLE_ESCAPES:
                out.append(_SIMPLE_ESCAPES[escaped])
            else:
                out.append(re.escape(escaped))
            at_start = False
            continue

        if char == "[":
            token, index = _bracket(pattern, index)
            out.append(token)
            at_start = False
            continue

        if char == "^":
            out.append("^" if at_start or extended else "\\^")
            index += 1
            continue

        if char == "$":
            out.append("$" if extended or _ends_expression(pattern, index + 1) else "\\$")
            index += 1
            at_start = False
            continue

        if char == ".":
            out.append(".")
            index += 1
            at_start = False
            continue

        if char == "*":
            out.append("\\*" if at_start else "*")
            index += 1
            at_start = False
            continue

        if extended and char in "(){}|+?":
            if char == "(":
                depth += 1
            elif char == ")":
                if depth == 0:
                    raise RegexSyntaxError("Unmatched ) or \\)")
                depth -= 1
            elif char == "{":
                if at_start:
                    raise RegexSyntaxError(INVALID_PRECEDING)
                token, index = _interval(pattern, index + 1, closer="}")
                out.append(token)
                at_start = False
                continue
            out.append(char)
            index += 1
            at_start = char in "(|"
            continue

        out.append(re.escape(char))
        index += 1
        at_start = False

    if depth:
        raise RegexSyntaxError("Unmatched ( or \\(")
    return "".join(out)


def _bre_operator(pattern: str, escaped: str, index: int, depth: int) -> Tuple[str, int, int]:
    if escaped == "(":
        return "(", index, depth + 1
    if escaped == ")":
        if depth == 0:
            raise RegexSyntaxError("Unmatched ) or \\)")
        return ")", index, depth - 1
    if escaped == "{":
        token, index = _interval(pattern, index, closer="\\}")
        return token, index, depth
    if escaped == "}":
        raise RegexSyntaxError("Unmatched \\{")
    return escaped, index, depth


def _interval(pattern: str, index: int, *, closer: str) -> Tuple[str, int]:
    end = pattern.find(closer, index)
    if end < 0:
        raise RegexSyntaxError("Unmatched \\{")
    body = pattern[index:end]
    match = re.fullmatch(r"(\d+)(,(\d*))?", body)
    if match is None:
        raise RegexSyntaxError("Invalid content of \\{\\}")
    low = int(match.group(1))
    if match.group(3):
        if int(match.group(3)) < low:
            raise RegexSyntaxError("Invalid content of \\{\\}")
    return "{" + body + "}", end + len(closer)


def _ends_expression(pattern: str, index: int) -> bool:
    rest = pattern[index:]
    return rest == "" or rest.startswith("\\)") or rest.startswith("\\|")


def _bracket(pattern: str, index: int) -> Tuple[str, int]:
    """Translate the bracket expression starting at ``pattern[index] == '['``."""

    length = len(pattern)
    pos = index + 1
    parts = ["["]
    if pos < length and pattern[pos] == "^":
        parts.append("^")
        pos += 1
    if pos < length and pattern[pos] == "]":
        parts.append("\\]")
        pos += 1
    while pos < length and pattern[pos] != "]":
        char = pattern[pos]
        if char == "[" and pos + 1 < length and pattern[pos + 1] in ":.=":
            kind = pattern[pos + 1]
            end = pattern.find(kind + "]", pos + 2)
            if end < 0:
                raise RegexSyntaxError(UNMATCHED_BRACKET)
            name = pattern[pos + 2 : end]
            if kind == ":":
                if name not in _CHARACTER_CLASSES:
                    raise RegexSyntaxError("Invalid character class name")
                parts.append(_CHARACTER_CLASSES[name])
            else:
                parts.append(re.escape(name))
            pos = end + 2
            continue
        parts.append("\\" + char if char in _BRACKET_SPECIALS else char)
        pos += 1
    if pos >= length:
        raise RegexSyntaxError(UNMATCHED_BRACKET)
    parts.append("]")
    return "".join(parts), pos + 1


def find_delimiter(text: str, start: int, delimiter: str) -> int:
    """Index of the unescaped ``delimiter`` at or after ``start``, else -1.

    Delimiters inside a bracket expression do not terminate the pattern.
    """

    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char == delimiter:
            return index
        if char == "\\":
            index += 2
            continue
        if char == "[":
            index = _skip_bracket(text, index)
            continue
        index += 1
    return -1


def _skip_bracket(text: str, index: int) -> int:
    length = len(text)
    pos = index + 1
    if pos < length and text[pos] == "^":
        pos += 1
    if pos < length and text[pos] == "]":
        pos += 1
    while pos < length and text[pos] != "]":
        if text[pos] == "[" and pos + 1 < length and text[pos + 1] in ":.=":
            end = text.find(text[pos + 1] + "]", pos + 2)
            if end < 0:
                pos = length
                break
            pos = end + 2
            continue
        pos += 1
    if pos >= length:
        raise RegexSyntaxError("Unbalanced brackets ([])")
    return pos + 1


__all__ = ["translate", "find_delimiter", "UNMATCHED_BRACKET"]
