"""cc-switch: manage and switch Claude CLI API configurations.

The console script ``cc-switch`` resolves to :func:`cc_switch.main_flow.main`.
"""

from .main_flow import main

__all__ = ["main"]
