"""Command-line entry point: ``ed-engine [options] [file]``."""

from __future__ import annotations

import argparse
import io
import os
import stat
import sys
from typing import NoReturn, Optional, Sequence, TextIO

from ed_engine import __version__
from ed_engine.adapters.stdio import run_stdio
from ed_engine.host import install_signal_handlers
from ed_engine.runtime import EditorOptions, telemetry
from ed_engine.session import EditorSession, SessionDriver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ed-engine",
        description="Line-oriented text editor compatible with GNU ed.",
    )
    parser.add_argument(
        "-E",
        "--extended-regexp",
        action="store_true",
        help="use extended regular expressions",
    )
    parser.add_argument(
        "-l",
        "--loose-exit-status",
        action="store_true",
        help="exit with 0 status even if a command fails",
    )
    parser.add_argument(
        "-p", "--prompt", metavar="STRING", help="use STRING as an interactive prompt"
    )
    parser.add_argument(
        "-r", "--restricted", action="store_true", help="run in restricted mode"
    )
    parser.add_argument(
        "-s",
        "--quiet",
        "--silent",
        dest="scripted",
        action="store_true",
        help="suppress diagnostics, byte counts and '!' prompt",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="be verbose; equivalent to the 'H' command"
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("file", nargs="?", help="file to edit")
    return parser


def options_from_args(
    args: argparse.Namespace, base: Optional[EditorOptions] = None
) -> EditorOptions:
    options = base or EditorOptions.from_env()
    return options.with_overrides(
        extended_regexp=args.extended_regexp or None,
        loose_exit_status=args.loose_exit_status or None,
        prompt=args.prompt,
        prompt_enabled=True if args.prompt else None,
        restricted=args.restricted or None,
        scripted=args.scripted or None,
        verbose=args.verbose or None,
    )


def _stdin_is_regular_file(stream: TextIO) -> bool:
    try:
        return stat.S_ISREG(os.fstat(stream.fileno()).st_mode)
    except (OSError, ValueError, io.UnsupportedOperation):
        return False


def _binary_stream(stream: TextIO, encoding: str) -> TextIO:
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        return stream
    return io.TextIOWrapper(buffer, encoding=encoding, newline="\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    options = options_from_args(args)
    if _stdin_is_regular_file(sys.stdin):
        options.abort_on_error = True
    stdin = _binary_stream(sys.stdin, options.encoding)
    stdout = _binary_stream(sys.stdout, options.encoding)

    session = EditorSession(options, output=stdout)
    driver = SessionDriver(session)
    telemetry.record_event(
        "session.start",
        data={"file": args.file or "", "scripted": options.scripted},
    )

    def _hangup() -> NoReturn:
        raise SystemExit(driver.hangup())

    install_signal_handlers(session.interrupts, on_hangup=_hangup)
    if args.file:
        driver.open_initial(args.file)
        if driver.finished:
            session.flush()
            return driver.exit_status
    return run_stdio(driver, stdin)


__all__ = ["build_parser", "main", "options_from_args"]
