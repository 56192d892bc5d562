"""Discovery and launching of the external ``claude`` CLI.

On POSIX the launcher replaces the current process (``execvpe``) so Claude
owns the terminal; elsewhere it spawns the CLI and returns its exit code.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import time
from typing import Callable, List, Mapping, Optional

from .environment import child_environment
from .errors import LaunchError
from .logging_utils import log_event
from .ui import info

CLAUDE_CMD = "claude"
SKIP_PERMISSIONS_FLAG = "--dangerously-skip-permissions"
LAUNCH_DELAY = 0.5
NOT_FOUND_MESSAGE = (
    "Failed to launch Claude CLI. Make sure 'claude' command is available in PATH"
)


def find_claude_cmd() -> Optional[List[str]]:
    """Locate the Claude CLI entrypoint.

    Prefers the bare command name so the child inherits PATH resolution. On
    Windows ``claude.cmd`` may be selected. Returns ``None`` when missing.
    """
    for name in (CLAUDE_CMD, f"{CLAUDE_CMD}.cmd"):
        path = shutil.which(name)
        if path:
            return [name]
    return None


def launch_claude(
    env_bag: Optional[Mapping[str, str]] = None,
    delay: float = LAUNCH_DELAY,
    use_exec: Optional[bool] = None,
    find: Optional[Callable[[], Optional[List[str]]]] = None,
) -> int:
    """Start Claude with ``env_bag`` applied on top of a cleaned environment.

    Parameters
    - ``env_bag``: Variables to export. Reserved names are first removed from
      the inherited environment so stale values never leak through. ``None``
      inherits the current environment unchanged.
    - ``delay``: Pause before launching so the confirmation stays visible.
    - ``use_exec``: Replace the current process (default on POSIX).
    - ``find``: Optional finder returning the command; useful for tests.

    Returns the CLI exit code when spawned. ``KeyboardInterrupt`` while
    waiting maps to ``130``. Raises :class:`LaunchError` when the CLI cannot
    be found or started.
    """
    find = find or find_claude_cmd
    cmd = find()
    if not cmd:
        raise LaunchError(NOT_FOUND_MESSAGE)
    if use_exec is None:
        use_exec = os.name != "nt"
    env = dict(os.environ) if env_bag is None else child_environment(env_bag)
    argv = cmd + [SKIP_PERMISSIONS_FLAG]

    try:
        info(f"Waiting {delay:g} seconds before launching Claude...")
        time.sleep(delay)
        info("Launching Claude CLI...")
        log_event("launch", path=argv[0])
        sys.stdout.flush()
        if use_exec:
            os.execvpe(argv[0], argv, env)
        return subprocess.run(argv, env=env).returncode
    except KeyboardInterrupt:
        return 130
    except OSError as e:
        log_event("launch_failed", path=argv[0], error_type=type(e).__name__)
        raise LaunchError(f"{NOT_FOUND_MESSAGE}: {e}") from e


__all__ = [
    "CLAUDE_CMD",
    "SKIP_PERMISSIONS_FLAG",
    "LAUNCH_DELAY",
    "find_claude_cmd",
    "launch_claude",
]
