"""Coloured status lines and ANSI painting for cc-switch.

The four printers (:func:`info`, :func:`ok`, :func:`warn`, :func:`err`) are
what commands use to report progress on stdout. Menus paint whole rows
through :func:`paint`, which follows the ``color`` flag of the detected
:class:`~cc_switch.layout.TerminalCaps` instead of probing stdout again.
"""

from __future__ import annotations
import os
import sys

RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
CYAN = "\033[36m"
GRAY = "\033[90m"


def stdout_has_color() -> bool:
    """``NO_COLOR`` wins; otherwise colour only goes to an interactive stdout."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # closed stream
        return False


def paint(text: str, color: str, caps) -> str:
    """Wrap ``text`` in ``color`` when the terminal caps allow it."""
    return f"{color}{text}{RESET}" if caps.color else text


def _prefix(mark: str, color: str) -> str:
    return f"{color}{mark}{RESET} " if stdout_has_color() else f"{mark} "


def info(msg: str) -> None:
    print(_prefix("ℹ", BLUE) + msg)


def ok(msg: str) -> None:
    print(_prefix("✓", GREEN) + msg)


def warn(msg: str) -> None:
    print(_prefix("!", YELLOW) + msg)


def err(msg: str) -> None:
    print(_prefix("✗", RED) + msg)


__all__ = [
    "stdout_has_color",
    "paint",
    "info",
    "ok",
    "warn",
    "err",
    "RESET",
    "BOLD",
    "RED",
    "GREEN",
    "YELLOW",
    "BLUE",
    "CYAN",
    "GRAY",
]
