"""Line-at-a-time loop over text streams."""

from __future__ import annotations

from typing import TextIO

from ed_engine.session import SessionDriver


def run_stdio(driver: SessionDriver, stdin: TextIO) -> int:
    """Feed ``stdin`` to ``driver`` until the session ends; return the exit status.

    ``KeyboardInterrupt`` anywhere in the loop, including a blocking read,
    abandons the current command and returns to the command prompt.
    """

    session = driver.session
    while not driver.finished:
        try:
            prompt = driver.prompt
            if prompt:
                session.write(prompt)
            session.flush()
            raw = stdin.readline()
            if not raw:
                driver.feed_eof()
            else:
                driver.feed(raw[:-1] if raw.endswith("\n") else raw)
        except KeyboardInterrupt:
            driver.handle_interrupt()
    session.flush()
    return driver.exit_status


__all__ = ["run_stdio"]
