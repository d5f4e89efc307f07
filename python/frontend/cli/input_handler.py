"""Single-keypress reader for the terminal frontend.

Keys are returned as action names ("enter", "hint", "up", ...) or as the
printable character itself, which is how item numbers and region letters
reach the game.  Unix terminals are put in raw mode only while a read is
in progress; Windows uses msvcrt.
"""

from __future__ import annotations

import os
import sys
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

ESC = "\x1b"
ESC_WAIT = 0.05  # how long to wait for the rest of an escape sequence

_ACTIONS: dict[str, str] = {
    "q": "quit",
    "\x03": "quit",  # Ctrl-C
    ESC: "quit",
    "r": "restart",
    "n": "hint",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\r": "enter",
    "\n": "enter",
    " ": "enter",
}

# final byte of ESC [ x on Unix, second byte after 0xE0 on Windows
_ARROWS: dict[str, str] = {
    "A": "up", "B": "down", "C": "right", "D": "left",
    "H": "up", "P": "down", "M": "right", "K": "left",
}

Reader = Callable[[float | None], str | None]


def _action(ch: str) -> str:
    action = _ACTIONS.get(ch.lower() if ch.isalpha() else ch)
    if action is not None:
        return action
    return ch if ch.isprintable() else ""


def _decode(first: str, more: Reader) -> str:
    """Turn the first character (plus whatever follows it) into an action."""
    if first == ESC:
        if more(ESC_WAIT) != "[":
            return "quit"  # bare Escape
        return _ARROWS.get(more(ESC_WAIT) or "", "")
    if first in ("\x00", "\xe0"):  # Windows extended key
        return _ARROWS.get(more(ESC_WAIT) or "", "")
    return _action(first)


# -- Unix ---------------------------------------------------------------------


@contextmanager
def _raw_stdin() -> Iterator[int]:
    import termios
    import tty

    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        yield fd
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def _unix_key(timeout: float | None) -> str | None:
    import select

    with _raw_stdin() as fd:

        def read(wait: float | None) -> str | None:
            # os.read is unbuffered, so select() still sees the rest of
            # a multi-byte sequence.
            ready, _, _ = select.select([fd], [], [], wait)
            if not ready:
                return None
            return os.read(fd, 1).decode("utf-8", errors="ignore")

        first = read(timeout)
        if first is None:
            return None
        return _decode(first, read)


# -- Windows ------------------------------------------------------------------


def _windows_key(timeout: float | None) -> str | None:
    import msvcrt  # type: ignore[import-not-found]

    def read(wait: float | None) -> str | None:
        end = None if wait is None else time.monotonic() + wait
        while not msvcrt.kbhit():
            if end is not None and time.monotonic() >= end:
                return None
            time.sleep(0.01)
        return msvcrt.getwch()

    first = read(timeout)
    if first is None:
        return None
    return _decode(first, read)


_read_key = _windows_key if os.name == "nt" else _unix_key


# -- public API ---------------------------------------------------------------


def get_key() -> str:
    """Block until a key is pressed and return its action.

    Actions: "up" / "down" / "left" / "right", "quit" (q, Ctrl-C, Esc),
    "restart" (r), "hint" (n), "backspace", "enter"
    (Enter or Space), any other printable character as itself, or ""
    for keys with no meaning here.
    """
    key = _read_key(None)
    return key if key is not None else ""


def get_key_timeout(timeout: float) -> str | None:
    """Like :func:`get_key`, but return ``None`` after *timeout* seconds."""
    return _read_key(timeout)
