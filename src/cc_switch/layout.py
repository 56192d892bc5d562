"""Display-width-aware text layout and box drawing for the menus.

Every alignment computation goes through :func:`display_width`, which counts
East Asian wide characters (CJK, Kana, Hangul, fullwidth forms) as two
columns. Rendering style is decided once per process by
:func:`detect_terminal_caps` and passed explicitly to :class:`BoxDrawer` so
the drawing functions stay pure.
"""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from .profiles import Profile

# Inclusive code point ranges rendered two columns wide
_WIDE_RANGES: Tuple[Tuple[int, int], ...] = (
    (0x3000, 0x303F),  # CJK symbols and punctuation
    (0x3040, 0x309F),  # Hiragana
    (0x30A0, 0x30FF),  # Katakana
    (0x3400, 0x4DBF),  # CJK extension A
    (0x4E00, 0x9FFF),  # CJK unified ideographs
    (0xAC00, 0xD7AF),  # Hangul syllables
    (0xFF01, 0xFF60),  # Fullwidth forms
)


class Alignment(Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


def char_width(ch: str) -> int:
    cp = ord(ch)
    for lo, hi in _WIDE_RANGES:
        if lo <= cp <= hi:
            return 2
    return 1


def display_width(text: str) -> int:
    return sum(char_width(ch) for ch in text)


def pad_to_width(
    text: str, width: int, alignment: Alignment = Alignment.LEFT, fill: str = " "
) -> str:
    """Pad ``text`` to ``width`` columns; wider text is returned unchanged.

    Centering puts the odd column on the right.
    """
    current = display_width(text)
    if current >= width:
        return text
    pad = width - current
    if alignment is Alignment.LEFT:
        return text + fill * pad
    if alignment is Alignment.RIGHT:
        return fill * pad + text
    left = pad // 2
    return fill * left + text + fill * (pad - left)


def truncate_to_width(text: str, width: int) -> str:
    """Longest prefix of ``text`` that fits in ``width`` columns."""
    out: List[str] = []
    used = 0
    for ch in text:
        w = char_width(ch)
        if used + w > width:
            break
        out.append(ch)
        used += w
    return "".join(out)


@dataclass(frozen=True)
class BoxStyle:
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str
    horizontal: str
    vertical: str


UNICODE_BOX = BoxStyle("╔", "╗", "╚", "╝", "═", "║")
ASCII_BOX = BoxStyle("+", "+", "+", "+", "-", "|")


@dataclass(frozen=True)
class TerminalCaps:
    """Rendering capabilities resolved once at startup."""

    unicode: bool = True
    color: bool = False
    width: int = 80

    @property
    def box(self) -> BoxStyle:
        return UNICODE_BOX if self.unicode else ASCII_BOX


def _supports_unicode(environ: Mapping[str, str]) -> bool:
    if environ.get("CC_SWITCH_ASCII"):
        return False
    term = environ.get("TERM", "")
    if term == "dumb":
        return False
    if "xterm" in term or "screen" in term or term == "tmux-256color":
        return True
    locale_vars = [environ.get(k, "") for k in ("LC_ALL", "LC_CTYPE", "LANG")]
    if any("utf-8" in v.lower() or "utf8" in v.lower() for v in locale_vars):
        return True
    # An explicit non-UTF-8 locale means the terminal may not draw box glyphs
    return not any(locale_vars)


def detect_terminal_caps(
    environ: Optional[Mapping[str, str]] = None, stream=None
) -> TerminalCaps:
    """Inspect the environment and ``stream`` (default stdout) once."""
    environ = os.environ if environ is None else environ
    stream = sys.stdout if stream is None else stream
    try:
        is_tty = bool(stream.isatty())
    except (AttributeError, ValueError):
        is_tty = False
    color = is_tty and not environ.get("NO_COLOR")
    width = shutil.get_terminal_size((80, 24)).columns
    return TerminalCaps(unicode=_supports_unicode(environ), color=color, width=width)


def optimal_box_width(
    min_width: int, max_width: int, content_width: int, terminal_width: int
) -> int:
    """Clamp ``content_width`` into ``[min_width, max_width]`` and the terminal."""
    usable = terminal_width - 4 if terminal_width > 4 else terminal_width
    return min(max(content_width, min_width), max_width, usable)


def bordered_line(
    text: str,
    total_width: int,
    alignment: Alignment = Alignment.LEFT,
    style: BoxStyle = UNICODE_BOX,
) -> str:
    """Wrap ``text`` in vertical borders with one space of padding per side.

    Content wider than the interior is truncated and the remainder padded
    by its own display width, so wide characters never break the border.
    """
    if total_width < 4:
        return text
    inner = total_width - 4
    if display_width(text) > inner:
        text = truncate_to_width(text, inner)
    padded = pad_to_width(text, inner, alignment)
    return f"{style.vertical} {padded} {style.vertical}"


class BoxDrawer:
    """Box primitives bound to one terminal's capabilities."""

    def __init__(self, caps: TerminalCaps):
        self.caps = caps
        self.style = caps.box

    def top(self, width: int, title: str = "") -> str:
        s = self.style
        inner = max(width - 2, 0)
        label = f" {title} " if title else ""
        if not label or display_width(label) > inner:
            return s.top_left + s.horizontal * inner + s.top_right
        centered = pad_to_width(label, inner, Alignment.CENTER, s.horizontal)
        return s.top_left + centered + s.top_right

    def bottom(self, width: int) -> str:
        s = self.style
        return s.bottom_left + s.horizontal * max(width - 2, 0) + s.bottom_right

    def line(self, text: str, width: int, alignment: Alignment = Alignment.LEFT) -> str:
        return bordered_line(text, width, alignment, self.style)


def format_token(token: str) -> str:
    """Mask a token for display, keeping enough to recognise it."""
    n = len(token)
    if n <= 6:
        return token[: (n + 1) // 2] + "***"
    if n <= 20:
        return token[: n // 2] + "***"
    return f"{token[:12]}...{token[-8:]}"


_DETAIL_LABELS = (
    ("token", "Token"),
    ("url", "URL"),
    ("model", "Model"),
    ("small_fast_model", "Small Fast Model"),
    ("max_thinking_tokens", "Max Thinking Tokens"),
    ("api_timeout_ms", "API Timeout (ms)"),
    ("claude_code_disable_nonessential_traffic", "Disable Nonessential Traffic"),
    ("anthropic_default_sonnet_model", "Default Sonnet Model"),
    ("anthropic_default_opus_model", "Default Opus Model"),
    ("anthropic_default_haiku_model", "Default Haiku Model"),
)


def format_profile_details(profile: Profile, indent: str = "    ") -> List[str]:
    """Aligned ``label: value`` lines for every set field of ``profile``."""
    rows = []
    for attr, label in _DETAIL_LABELS:
        value = getattr(profile, attr)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip() and attr != "token":
            continue
        if attr == "token":
            value = format_token(value)
        rows.append((label + ":", str(value)))
    widest = max((display_width(label) for label, _ in rows), default=0)
    return [f"{indent}{pad_to_width(label, widest)} {value}" for label, value in rows]


__all__ = [
    "Alignment",
    "char_width",
    "display_width",
    "pad_to_width",
    "truncate_to_width",
    "BoxStyle",
    "UNICODE_BOX",
    "ASCII_BOX",
    "TerminalCaps",
    "detect_terminal_caps",
    "optimal_box_width",
    "bordered_line",
    "BoxDrawer",
    "format_token",
    "format_profile_details",
]
