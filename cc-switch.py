#!/usr/bin/env python3
"""Launcher for cc-switch from a source checkout.

 - Prefer a static import so an installed ``cc_switch`` package wins.
 - Fall back to adding the local ``./src`` directory to ``sys.path`` when the
   repository is run directly without installation.
 - Re-export the main entry points so scripts and tests can import this file.

No third-party dependencies are used; this file must remain stdlib-only.
"""

import importlib
import sys
from pathlib import Path


def _load_modules():
    """Locate and import the packaged modules.

    Returns a tuple of (main_flow_module, launcher_module).
    """
    try:
        from cc_switch import main_flow as _main_flow  # type: ignore
        from cc_switch import launcher as _launcher  # type: ignore

        return _main_flow, _launcher
    except ImportError:
        pass

    _src = Path(__file__).resolve().parent / "src"
    if _src.exists():
        src_str = str(_src)
        if src_str not in sys.path:
            sys.path.insert(0, src_str)

    _main_flow = importlib.import_module("cc_switch.main_flow")
    _launcher = importlib.import_module("cc_switch.launcher")
    return _main_flow, _launcher


_main_flow, _launcher = _load_modules()

main = _main_flow.main
parse_args = _main_flow.parse_args
configure_logging = _main_flow.configure_logging
launch_claude = _launcher.launch_claude
find_claude_cmd = _launcher.find_claude_cmd

__all__ = [
    "main",
    "parse_args",
    "configure_logging",
    "launch_claude",
    "find_claude_cmd",
]


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
