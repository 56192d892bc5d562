"""Low-level line input helpers shared by the editor and fallback menus."""

from __future__ import annotations

from ..ui import err


def safe_input(prompt: str) -> str:
    """input() that propagates Ctrl-C so callers can decide behavior."""
    try:
        return input(prompt)
    except KeyboardInterrupt:
        print()
        raise


def prompt_yes_no(question: str, default: bool = True, input_fn=safe_input) -> bool:
    """Prompt a yes/no question with a default, normalizing answers."""
    suffix = "[Y/n]" if default else "[y/N]"
    while True:
        try:
            s = input_fn(f"{question} {suffix} ").strip().lower()
        except EOFError:
            return default
        if not s:
            return default
        if s in ("y", "yes"):
            return True
        if s in ("n", "no"):
            return False
        err("Please answer y or n.")


__all__ = ["safe_input", "prompt_yes_no"]
