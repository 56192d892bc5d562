"""Interactive prompts: menus, field editor, and line-input helpers."""

from .editor import EditOutcome, EditResult, edit_profile
from .input_utils import prompt_yes_no, safe_input
from .menus import MainMenu, MainMenuItem, SelectionMenu, PAGE_SIZE
from .session import MenuContext, run_main_menu, run_selection

__all__ = [
    "EditOutcome",
    "EditResult",
    "edit_profile",
    "prompt_yes_no",
    "safe_input",
    "MainMenu",
    "MainMenuItem",
    "SelectionMenu",
    "PAGE_SIZE",
    "MenuContext",
    "run_main_menu",
    "run_selection",
]
