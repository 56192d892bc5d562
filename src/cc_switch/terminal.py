"""Scoped raw-mode / alternate-screen terminal session.

:class:`TerminalSession` is a context manager: entering puts stdin in raw
mode and switches to the alternate screen, leaving always restores both, on
every exit path including exceptions. :meth:`TerminalSession.suspended`
hands the terminal back in cooked mode for line-based prompts (the field
editor) and re-acquires it afterwards.

Keys are returned as short names (``UP``, ``DOWN``, ``PAGE_UP``,
``PAGE_DOWN``, ``ENTER``, ``ESC``, ``CTRL_C``, ``BACKSPACE``) or as the typed
character itself.
"""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from .errors import TerminalUnavailable

ENTER_ALT_SCREEN = "\x1b[?1049h"
LEAVE_ALT_SCREEN = "\x1b[?1049l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_HOME = "\x1b[H\x1b[2J"

# Seconds to wait for the rest of an escape sequence before treating ESC as a key
_ESC_TIMEOUT = 0.05

_CSI_KEYS = {"A": "UP", "B": "DOWN", "C": "RIGHT", "D": "LEFT"}
_TILDE_KEYS = {"5": "PAGE_UP", "6": "PAGE_DOWN"}
_WIN_KEYS = {
    "H": "UP",
    "P": "DOWN",
    "K": "LEFT",
    "M": "RIGHT",
    "I": "PAGE_UP",
    "Q": "PAGE_DOWN",
}


class TerminalSession:
    def __init__(self, stdin=None, stdout=None, alt_screen: bool = True):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.alt_screen = alt_screen
        self.active = False
        self._saved_attrs = None

    def __enter__(self) -> "TerminalSession":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def acquire(self) -> None:
        """Enter raw mode and the alternate screen or raise ``TerminalUnavailable``."""
        if self.active:
            return
        try:
            interactive = self.stdin.isatty() and self.stdout.isatty()
        except (AttributeError, ValueError):
            interactive = False
        if not interactive:
            raise TerminalUnavailable("stdin/stdout is not a terminal")
        if os.name != "nt":
            try:
                import termios
                import tty

                fd = self.stdin.fileno()
                self._saved_attrs = termios.tcgetattr(fd)
                tty.setraw(fd)
            except Exception as e:  # termios.error is not an OSError
                raise TerminalUnavailable(f"cannot enter raw mode: {e}") from e
        else:
            try:
                import msvcrt  # noqa: F401
            except ImportError as e:
                raise TerminalUnavailable("msvcrt is unavailable") from e
        self.active = True
        if self.alt_screen:
            self._emit(ENTER_ALT_SCREEN)
        self._emit(HIDE_CURSOR)

    def release(self) -> None:
        """Restore the terminal; safe to call more than once."""
        if not self.active:
            return
        self.active = False
        try:
            self._emit(SHOW_CURSOR)
            if self.alt_screen:
                self._emit(LEAVE_ALT_SCREEN)
        finally:
            if self._saved_attrs is not None:
                import termios

                fd = self.stdin.fileno()
                termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_attrs)
                self._saved_attrs = None

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Temporarily give the terminal back in cooked mode."""
        self.release()
        try:
            yield
        finally:
            self.acquire()

    def _emit(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def draw(self, lines: Iterable[str]) -> None:
        """Repaint the whole screen; raw mode needs explicit carriage returns."""
        self._emit(CLEAR_HOME + "\r\n".join(lines) + "\r\n")

    def read_key(self) -> str:
        if os.name == "nt":
            return self._read_key_windows()
        return self._read_key_posix()

    def _read_key_windows(self) -> str:
        import msvcrt  # type: ignore

        ch = msvcrt.getwch()
        if ch == "\x03":
            return "CTRL_C"
        if ch in ("\r", "\n"):
            return "ENTER"
        if ch == "\x1b":
            return "ESC"
        if ch in ("\x00", "\xe0"):
            return _WIN_KEYS.get(msvcrt.getwch(), "")
        if ch == "\x08":
            return "BACKSPACE"
        return ch

    def _read_byte(self, timeout: Optional[float] = None) -> Optional[bytes]:
        fd = self.stdin.fileno()
        if timeout is not None:
            import select

            ready, _, _ = select.select([fd], [], [], timeout)
            if not ready:
                return None
        return os.read(fd, 1)

    def _read_key_posix(self) -> str:
        first = self._read_byte()
        if not first:
            # EOF on the terminal behaves like Esc
            return "ESC"
        if first == b"\x03":
            return "CTRL_C"
        if first in (b"\r", b"\n"):
            return "ENTER"
        if first in (b"\x7f", b"\x08"):
            return "BACKSPACE"
        if first == b"\x1b":
            return self._read_escape()
        data = first
        lead = first[0]
        extra = 3 if lead >= 0xF0 else 2 if lead >= 0xE0 else 1 if lead >= 0xC0 else 0
        for _ in range(extra):
            nxt = self._read_byte(_ESC_TIMEOUT)
            if not nxt:
                break
            data += nxt
        return data.decode("utf-8", errors="ignore")

    def _read_escape(self) -> str:
        second = self._read_byte(_ESC_TIMEOUT)
        if second not in (b"[", b"O"):
            return "ESC"
        third = self._read_byte(_ESC_TIMEOUT)
        if not third:
            return "ESC"
        ch = third.decode("ascii", errors="ignore")
        if ch in _CSI_KEYS:
            return _CSI_KEYS[ch]
        if ch in _TILDE_KEYS:
            tail = self._read_byte(_ESC_TIMEOUT)
            return _TILDE_KEYS[ch] if tail == b"~" else ""
        return ""


__all__ = ["TerminalSession", "TerminalUnavailable"]
