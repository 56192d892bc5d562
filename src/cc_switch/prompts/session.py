"""Interactive loops for the main and selection menus.

Each loop first tries to own the terminal through
:class:`~cc_switch.terminal.TerminalSession`. When raw mode cannot be
acquired (pipes, dumb terminals, CI) it degrades to a line-buffered numbered
prompt driving the very same state machine, so both paths accept the same
options and end in the same state.

Launching always happens after the terminal has been restored.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Mapping, Optional

from ..actions import Launcher, activate_official, activate_profile, launch_current
from ..errors import TerminalUnavailable
from ..layout import TerminalCaps
from ..profiles import WriteMode
from ..store import ConfigurationStore
from ..terminal import TerminalSession
from ..ui import err, info
from .editor import EditResult, edit_profile
from .input_utils import safe_input
from .menus import (
    ActionKind,
    MainMenu,
    MainMenuItem,
    MenuAction,
    SelectionMenu,
    render_main_menu,
    render_selection,
    render_selection_plain,
)


class MenuContext:
    """Collaborators shared by the menu loops; overridable in tests."""

    def __init__(
        self,
        store: ConfigurationStore,
        caps: Optional[TerminalCaps] = None,
        mode_override: Optional[WriteMode] = None,
        launcher: Optional[Launcher] = None,
        session_factory: Callable[[], TerminalSession] = TerminalSession,
        input_fn: Callable[[str], str] = safe_input,
        editor: Callable[..., EditResult] = edit_profile,
        home: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.store = store
        self.caps = caps or TerminalCaps()
        self.mode_override = mode_override
        self.launcher = launcher
        self.session_factory = session_factory
        self.input_fn = input_fn
        self.editor = editor
        self.home = home
        self.environ = environ


def _edit(ctx: MenuContext, menu: SelectionMenu, action: MenuAction) -> None:
    alias = menu.profiles[action.index].alias_name
    result = ctx.editor(ctx.store, alias, caps=ctx.caps, input_fn=ctx.input_fn)
    menu.reload(ctx.store.sorted_profiles(), focus_alias=result.alias)


def _interactive_selection(
    ctx: MenuContext, menu: SelectionMenu, term: TerminalSession
) -> MenuAction:
    while True:
        term.draw(render_selection(menu, ctx.caps))
        key = term.read_key()
        if key == "CTRL_C":
            raise KeyboardInterrupt
        action = menu.handle_key(key)
        if action is None:
            continue
        if action.kind is ActionKind.EDIT:
            with term.suspended():
                _edit(ctx, menu, action)
            continue
        return action


def _line_selection(ctx: MenuContext, menu: SelectionMenu) -> MenuAction:
    while True:
        print("Select configuration:")
        for line in render_selection_plain(menu):
            print(line)
        try:
            s = ctx.input_fn("Choice [digit, r, q, n/p, e<digit> to edit]: ").strip()
        except EOFError:
            print()
            return MenuAction(ActionKind.CANCEL)
        if len(s) == 2 and s[0] in "eE" and s[1].isdigit():
            if not menu.focus_slot(int(s[1])):
                err("Invalid choice.")
                continue
            s = "e"
        if len(s) != 1:
            err("Invalid choice.")
            continue
        action = menu.handle_key(s)
        if action is None:
            if s not in ("n", "N", "p", "P"):
                err("Invalid choice.")
            continue
        if action.kind is ActionKind.EDIT:
            _edit(ctx, menu, action)
            continue
        return action


def _commit(ctx: MenuContext, menu: SelectionMenu, action: MenuAction) -> Optional[int]:
    if action.kind is ActionKind.CANCEL:
        return None
    if action.kind is ActionKind.COMMIT_EXIT:
        return 0
    if action.kind is ActionKind.COMMIT_OFFICIAL:
        return activate_official(
            ctx.store, ctx.mode_override, launcher=ctx.launcher, home=ctx.home
        )
    profile = menu.profiles[action.index]
    return activate_profile(
        ctx.store,
        profile,
        ctx.mode_override,
        launcher=ctx.launcher,
        home=ctx.home,
        environ=ctx.environ,
    )


def run_selection(ctx: MenuContext) -> Optional[int]:
    """Run the configuration selector.

    Returns the exit code of the committed action, or ``None`` when the user
    cancelled with Esc so the caller can resume its own loop.
    """
    menu = SelectionMenu(ctx.store.sorted_profiles())
    try:
        with ctx.session_factory() as term:
            action = _interactive_selection(ctx, menu, term)
    except TerminalUnavailable:
        action = _line_selection(ctx, menu)
    return _commit(ctx, menu, action)


def _interactive_main(ctx: MenuContext, menu: MainMenu, term: TerminalSession):
    environ = os.environ if ctx.environ is None else ctx.environ
    while True:
        term.draw(render_main_menu(menu, ctx.caps, environ))
        key = term.read_key()
        if key == "CTRL_C":
            raise KeyboardInterrupt
        item = menu.handle_key(key)
        if item is not None:
            return item


def _line_main(ctx: MenuContext, menu: MainMenu) -> MainMenuItem:
    while True:
        for i, item in enumerate(menu.items, 1):
            print(f"  {i}) {item.value}")
        try:
            s = ctx.input_fn(f"Choice [1-{len(menu.items)}]: ").strip()
        except EOFError:
            print()
            return MainMenuItem.EXIT
        item = menu.handle_key(s) if s in ("1", "2", "3", "q", "Q") else None
        if item is not None:
            return item
        err("Invalid choice.")


def run_main_menu(ctx: MenuContext) -> int:
    """Main menu: run Claude as-is, pick a configuration, or exit."""
    menu = MainMenu()
    while True:
        try:
            with ctx.session_factory() as term:
                item = _interactive_main(ctx, menu, term)
        except TerminalUnavailable:
            item = _line_main(ctx, menu)
        if item is MainMenuItem.EXIT:
            return 0
        if item is MainMenuItem.EXECUTE_DEFAULT:
            return launch_current(ctx.launcher)
        result = run_selection(ctx)
        if result is not None:
            return result
        info("Back to main menu")


__all__ = ["MenuContext", "run_selection", "run_main_menu"]
