"""Menu state machines and their renderers.

Both menus are pure: ``handle_key`` takes a key name from
:meth:`cc_switch.terminal.TerminalSession.read_key` (or a token typed in the
line fallback) and returns either ``None`` (keep looping) or the action to
perform. Rendering takes a :class:`~cc_switch.layout.TerminalCaps` and
returns lines, so the interactive and fallback loops share one behaviour.

Selection cursor layout, for ``N`` profiles::

    0          official / reset
    1 .. N     profiles sorted by alias (absolute, not page-relative)
    N + 1      exit
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Sequence

from ..environment import RESERVED_ENV_NAMES
from ..layout import (
    Alignment,
    BoxDrawer,
    TerminalCaps,
    display_width,
    format_profile_details,
    format_token,
    optimal_box_width,
)
from ..profiles import Profile
from ..ui import BOLD, CYAN, GRAY, GREEN, RED, YELLOW, paint

PAGE_SIZE = 9
MAIN_MENU_WIDTH = 68
SELECT_MENU_WIDTH = 80


class MainMenuItem(Enum):
    EXECUTE_DEFAULT = "Execute claude with current environment"
    SELECT_CONFIG = "Select configuration"
    EXIT = "Exit"


class MainMenu:
    items = list(MainMenuItem)

    def __init__(self) -> None:
        self.cursor = 0

    def handle_key(self, key: str) -> Optional[MainMenuItem]:
        if key in ("UP", "k"):
            self.cursor = max(self.cursor - 1, 0)
        elif key in ("DOWN", "j"):
            self.cursor = min(self.cursor + 1, len(self.items) - 1)
        elif key == "ENTER":
            return self.items[self.cursor]
        elif key in ("ESC", "q", "Q"):
            return MainMenuItem.EXIT
        elif key in ("1", "2", "3"):
            self.cursor = int(key) - 1
            return self.items[self.cursor]
        return None


def render_main_menu(
    menu: MainMenu, caps: TerminalCaps, environ: Mapping[str, str]
) -> List[str]:
    box = BoxDrawer(caps)
    width = optimal_box_width(40, MAIN_MENU_WIDTH, MAIN_MENU_WIDTH, caps.width)
    pointer = "▶" if caps.unicode else ">"
    lines = [box.top(width, "Claude Code Configuration Switcher")]
    lines.append(box.line("Current environment:", width))
    active = [n for n in RESERVED_ENV_NAMES if n in environ]
    if not active:
        lines.append(box.line("  (no overrides, using Claude defaults)", width))
    for name in active:
        value = environ[name]
        if name == "ANTHROPIC_AUTH_TOKEN":
            value = format_token(value)
        lines.append(box.line(f"  {name}={value}", width))
    lines.append(box.line("", width))
    for i, item in enumerate(menu.items):
        text = f"{pointer if i == menu.cursor else ' '} {i + 1}. {item.value}"
        row = box.line(text, width)
        lines.append(paint(row, CYAN + BOLD, caps) if i == menu.cursor else row)
    lines.append(box.line("", width))
    arrows = "↑↓" if caps.unicode else "j/k"
    hint = f"{arrows} move, Enter select, Esc exit"
    lines.append(paint(box.line(hint, width, Alignment.CENTER), GRAY, caps))
    lines.append(box.bottom(width))
    return lines


class ActionKind(Enum):
    COMMIT_OFFICIAL = "official"
    COMMIT_PROFILE = "profile"
    COMMIT_EXIT = "exit"
    EDIT = "edit"
    CANCEL = "cancel"


@dataclass(frozen=True)
class MenuAction:
    kind: ActionKind
    index: Optional[int] = None


class SelectionMenu:
    """Paginated ``[official] + profiles + [exit]`` selector."""

    def __init__(self, profiles: Sequence[Profile]):
        self.profiles: List[Profile] = list(profiles)
        self.cursor = 0
        self.page = 0

    @property
    def count(self) -> int:
        return len(self.profiles)

    @property
    def exit_index(self) -> int:
        return self.count + 1

    @property
    def page_count(self) -> int:
        return max(1, -(-self.count // PAGE_SIZE))

    @property
    def page_start(self) -> int:
        return self.page * PAGE_SIZE

    def page_slots(self) -> int:
        """Number of profiles shown on the current page."""
        return max(0, min(PAGE_SIZE, self.count - self.page_start))

    def _follow_cursor(self) -> None:
        if 1 <= self.cursor <= self.count:
            self.page = (self.cursor - 1) // PAGE_SIZE

    def move(self, delta: int) -> None:
        self.cursor = min(max(self.cursor + delta, 0), self.exit_index)
        self._follow_cursor()

    def change_page(self, delta: int) -> None:
        target = self.page + delta
        if 0 <= target < self.page_count and target != self.page:
            self.page = target
            self.cursor = self.page_start + 1

    def focus_slot(self, digit: int) -> bool:
        """Put the cursor on page-relative profile ``digit``; False if out of range."""
        if 1 <= digit <= self.page_slots():
            self.cursor = self.page_start + digit
            return True
        return False

    def reload(self, profiles: Sequence[Profile], focus_alias: Optional[str] = None) -> None:
        """Swap in a fresh profile list after an edit and clamp the cursor."""
        self.profiles = list(profiles)
        if focus_alias is not None:
            for i, p in enumerate(self.profiles):
                if p.alias_name == focus_alias:
                    self.cursor = i + 1
                    break
        self.cursor = min(self.cursor, self.exit_index)
        self.page = min(self.page, self.page_count - 1)
        self._follow_cursor()

    def current_profile_index(self) -> Optional[int]:
        if 1 <= self.cursor <= self.count:
            return self.cursor - 1
        return None

    def _commit_cursor(self) -> MenuAction:
        if self.cursor == 0:
            return MenuAction(ActionKind.COMMIT_OFFICIAL)
        if self.cursor == self.exit_index:
            return MenuAction(ActionKind.COMMIT_EXIT)
        return MenuAction(ActionKind.COMMIT_PROFILE, self.cursor - 1)

    def handle_key(self, key: str) -> Optional[MenuAction]:
        if key in ("UP", "k"):
            self.move(-1)
        elif key in ("DOWN", "j"):
            self.move(1)
        elif key in ("PAGE_DOWN", "n", "N"):
            self.change_page(1)
        elif key in ("PAGE_UP", "p", "P"):
            self.change_page(-1)
        elif key in ("r", "R"):
            self.cursor = 0
            return MenuAction(ActionKind.COMMIT_OFFICIAL)
        elif key in ("q", "Q"):
            self.cursor = self.exit_index
            return MenuAction(ActionKind.COMMIT_EXIT)
        elif key in ("e", "E"):
            index = self.current_profile_index()
            if index is not None:
                return MenuAction(ActionKind.EDIT, index)
        elif key == "ENTER":
            return self._commit_cursor()
        elif key == "ESC":
            return MenuAction(ActionKind.CANCEL)
        elif len(key) == 1 and key in "123456789":
            if self.focus_slot(int(key)):
                return self._commit_cursor()
        return None


def render_selection(menu: SelectionMenu, caps: TerminalCaps) -> List[str]:
    box = BoxDrawer(caps)
    pointer = "▶" if caps.unicode else ">"
    start = menu.page_start
    shown = menu.profiles[start : start + menu.page_slots()]
    hints = (
        "↑↓/jk move  1-9 select  e edit  r official  q exit  Esc back"
        if caps.unicode
        else "j/k move  1-9 select  e edit  r official  q exit  Esc back"
    )
    # border plus one space of padding on each side
    content = max(
        [display_width(p.alias_name) + 12 for p in shown]
        + [display_width(hints) + 4, 60]
    )
    width = optimal_box_width(40, SELECT_MENU_WIDTH, content, caps.width)

    def row(index: int, text: str, color: Optional[str] = None) -> str:
        selected = index == menu.cursor
        line = box.line(f"{pointer if selected else ' '} {text}", width)
        if selected:
            return paint(line, (color or CYAN) + BOLD, caps)
        return paint(line, color, caps) if color else line

    lines = [box.top(width, "Select Configuration")]
    lines.append(row(0, "[R] Official (use Claude defaults)", RED))
    for slot, profile in enumerate(shown, 1):
        index = start + slot
        lines.append(row(index, f"[{slot}] {profile.alias_name}"))
        if index == menu.cursor:
            for detail in format_profile_details(profile, indent="      "):
                lines.append(paint(box.line(detail, width), GREEN, caps))
    if not menu.profiles:
        lines.append(paint(box.line("  No configurations stored yet.", width), YELLOW, caps))
    lines.append(row(menu.exit_index, "[Q] Exit"))
    if menu.page_count > 1:
        indicator = f"Page {menu.page + 1}/{menu.page_count}  (n/p to change page)"
        lines.append(paint(box.line(indicator, width, Alignment.CENTER), GRAY, caps))
    lines.append(paint(box.line(hints, width, Alignment.CENTER), GRAY, caps))
    lines.append(box.bottom(width))
    return lines


def render_selection_plain(menu: SelectionMenu) -> List[str]:
    """Numbered listing for the line-buffered fallback."""
    start = menu.page_start
    lines = ["  r) Official (use Claude defaults)"]
    for slot, profile in enumerate(menu.profiles[start : start + menu.page_slots()], 1):
        lines.append(f"  {slot}) {profile.alias_name}")
    lines.append("  q) Exit")
    if menu.page_count > 1:
        lines.append(f"  Page {menu.page + 1}/{menu.page_count} (n: next, p: previous)")
    return lines


__all__ = [
    "PAGE_SIZE",
    "MainMenuItem",
    "MainMenu",
    "render_main_menu",
    "ActionKind",
    "MenuAction",
    "SelectionMenu",
    "render_selection",
    "render_selection_plain",
]
