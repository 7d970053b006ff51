"""Rendering of lines for the ``p``, ``n`` and ``l`` print modes."""

from __future__ import annotations

from ed_engine.commands.models import PrintFlags

_ESCAPES = {
    "\a": "a",
    "\b": "b",
    "\f": "f",
    "\n": "n",
    "\r": "r",
    "\t": "t",
    "\v": "v",
}


def format_line(text: str, addr: int, flags: PrintFlags, *, columns: int = 72) -> str:
    """Return one printed line including its newline.

    ``NUMBER`` prefixes ``addr`` and a tab. ``LIST`` escapes non-printable
    bytes, writes ``\\`` and ``$`` escaped, folds at ``columns`` with a
    trailing backslash, and marks the end of the line with ``$``.
    """

    out: list[str] = []
    col = 0
    if flags & PrintFlags.NUMBER:
        out.append(f"{addr}\t")
        col = 8
    if not flags & PrintFlags.LIST:
        out.append(text)
        out.append("\n")
        return "".join(out)

    for char in text:
        col += 1
        if col > columns:
            col = 1
            out.append("\\\n")
        code = ord(char)
        if 32 <= code <= 126:
            if char in ("$", "\\"):
                col += 1
                out.append("\\")
            out.append(char)
            continue
        col += 1
        out.append("\\")
        escape = _ESCAPES.get(char)
        if escape:
            out.append(escape)
            continue
        col += 2
        out.append(_octal(code))
    out.append("$\n")
    return "".join(out)


def _octal(code: int) -> str:
    if code < 256:
        return f"{code:03o}"
    # Outside latin-1: show the UTF-8 bytes.
    return "\\".join(f"{byte:03o}" for byte in chr(code).encode("utf-8"))


__all__ = ["format_line"]
