"""Commit a selection: switch credential sources, then launch Claude.

Shared by the ``use`` sub-command and both interactive menus so the switch
and launch rules live in one place.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping, Optional

from . import settings
from .environment import materialize
from .errors import ConflictError, ConflictSource
from .logging_utils import log_event
from .launcher import launch_claude
from .profiles import Profile, WriteMode
from .store import ConfigurationStore
from .ui import err, info, ok, warn

Launcher = Callable[[Optional[Mapping[str, str]]], int]


def report_conflicts(e: ConflictError) -> None:
    err("Cannot switch in config mode: Claude settings would be ambiguous.")
    for conflict in e.conflicts:
        where = (
            "exported in the current shell"
            if conflict.source is ConflictSource.PROCESS_ENV
            else f"set in {e.path}"
        )
        print(f"  - {conflict.name} ({where})")
    warn("Unset these variables or switch with --store env.")


def _report_removed(outcome: settings.SwitchOutcome) -> None:
    if outcome.removed:
        info(
            f"Removed {len(outcome.removed)} setting(s) from {outcome.path}: "
            + ", ".join(outcome.removed)
        )


def activate_profile(
    store: ConfigurationStore,
    profile: Profile,
    mode_override: Optional[WriteMode] = None,
    launcher: Optional[Launcher] = None,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Switch to ``profile`` and launch Claude; returns an exit code."""
    mode = store.effective_mode(mode_override)
    try:
        outcome = settings.switch(
            profile, mode, store.claude_settings_dir, home=home, environ=environ
        )
    except ConflictError as e:
        report_conflicts(e)
        return 1
    _report_removed(outcome)
    ok(f"Switched to configuration '{profile.alias_name}' ({mode.value} mode)")
    log_event("activated", alias=profile.alias_name, mode=mode.value)
    if mode is WriteMode.ENV:
        return (launcher or launch_claude)(materialize(profile))
    info(f"Settings written to {outcome.path}")
    return (launcher or launch_claude)(None)


def activate_official(
    store: ConfigurationStore,
    mode_override: Optional[WriteMode] = None,
    launcher: Optional[Launcher] = None,
    home: Optional[Path] = None,
) -> int:
    """Clear every override and launch Claude with its own defaults."""
    mode = store.effective_mode(mode_override)
    outcome = settings.reset(mode, store.claude_settings_dir, home=home)
    _report_removed(outcome)
    ok("Using official Claude defaults (no overrides)")
    return (launcher or launch_claude)({})


def launch_current(launcher: Optional[Launcher] = None) -> int:
    """Launch Claude with the environment exactly as inherited."""
    info("Launching Claude with the current environment")
    return (launcher or launch_claude)(None)


__all__ = ["report_conflicts", "activate_profile", "activate_official", "launch_current"]
