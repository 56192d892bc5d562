"""Inline field editor for one stored profile.

The editor works on a draft copy and only touches the store on ``S``. Its
result is an :class:`EditResult` pairing an :class:`EditOutcome` with the
alias the profile is stored under afterwards; ``RETURN_TO_MENU`` is an
ordinary value telling the calling menu to resume, not an error.

Input rules per field:
 - empty input keeps the current value
 - whitespace-only input clears an optional text field
 - ``0`` clears a numeric field
 - alias, token and URL can never be cleared; invalid values are reported
   and the field is left unchanged
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional

from ..errors import AliasError, ProfileNotFoundError
from ..layout import BoxDrawer, TerminalCaps, format_token, optimal_box_width
from ..logging_utils import log_event
from ..profiles import Profile, parse_u32, validate_alias
from ..store import ConfigurationStore
from ..ui import err, info, ok, warn
from .input_utils import prompt_yes_no, safe_input


class EditOutcome(Enum):
    SAVED = "saved"
    ABORTED = "aborted"
    RETURN_TO_MENU = "return_to_menu"


class EditResult(NamedTuple):
    outcome: EditOutcome
    alias: str


class FieldKind(Enum):
    ALIAS = "alias"
    REQUIRED = "required"
    TEXT = "text"
    NUMBER = "number"


@dataclass(frozen=True)
class EditableField:
    keys: tuple
    attr: str
    label: str
    kind: FieldKind


FIELDS: List[EditableField] = [
    EditableField(("1",), "alias_name", "Alias", FieldKind.ALIAS),
    EditableField(("2",), "token", "Token", FieldKind.REQUIRED),
    EditableField(("3",), "url", "URL", FieldKind.REQUIRED),
    EditableField(("4",), "model", "Model", FieldKind.TEXT),
    EditableField(("5",), "small_fast_model", "Small Fast Model", FieldKind.TEXT),
    EditableField(
        ("6",), "max_thinking_tokens", "Max Thinking Tokens", FieldKind.NUMBER
    ),
    EditableField(("7",), "api_timeout_ms", "API Timeout (ms)", FieldKind.NUMBER),
    EditableField(
        ("8",),
        "claude_code_disable_nonessential_traffic",
        "Disable Nonessential Traffic",
        FieldKind.NUMBER,
    ),
    EditableField(
        ("9",), "anthropic_default_sonnet_model", "Default Sonnet Model", FieldKind.TEXT
    ),
    EditableField(
        ("10", "A"), "anthropic_default_opus_model", "Default Opus Model", FieldKind.TEXT
    ),
    EditableField(
        ("11", "B"), "anthropic_default_haiku_model", "Default Haiku Model", FieldKind.TEXT
    ),
]
FIELDS_BY_KEY: Dict[str, EditableField] = {k: f for f in FIELDS for k in f.keys}
EDITOR_PROMPT = "Field (1-11, A/B), S to save, Q to return: "


def apply_field_input(draft: Profile, field: EditableField, raw: str) -> Optional[str]:
    """Apply one typed value to ``draft`` in place.

    Returns an error message when the input is rejected (``draft`` is then
    unchanged) and ``None`` otherwise.
    """
    if raw == "":
        return None
    value = raw.strip()
    if field.kind is FieldKind.ALIAS:
        try:
            validate_alias(value)
        except AliasError as e:
            return str(e)
        draft.alias_name = value
    elif field.kind is FieldKind.REQUIRED:
        if not value:
            return f"{field.label} cannot be empty"
        setattr(draft, field.attr, value)
    elif field.kind is FieldKind.TEXT:
        setattr(draft, field.attr, value or None)
    else:
        if value == "0":
            setattr(draft, field.attr, None)
            return None
        try:
            setattr(draft, field.attr, parse_u32(value))
        except ValueError as e:
            return f"Invalid value for {field.label}: {e}"
    return None


def _display_value(profile: Profile, field: EditableField) -> str:
    value = getattr(profile, field.attr)
    if value is None:
        return "(not set)"
    if field.attr == "token":
        return format_token(value)
    return str(value)


def render_editor(
    draft: Profile, caps: TerminalCaps, dirty: bool = False
) -> List[str]:
    box = BoxDrawer(caps)
    width = optimal_box_width(40, 80, 72, caps.width)
    title = f"Edit Configuration: {draft.alias_name}" + (" *" if dirty else "")
    lines = [box.top(width, title)]
    for field in FIELDS:
        key = "/".join(field.keys)
        text = f"{key:>4}. {field.label}: {_display_value(draft, field)}"
        lines.append(box.line(text, width))
    lines.append(box.line("", width))
    lines.append(box.line("   S. Save changes", width))
    lines.append(box.line("   Q. Return to menu", width))
    lines.append(box.bottom(width))
    return lines


def _hint(field: EditableField) -> str:
    if field.kind is FieldKind.TEXT:
        return "Enter to keep, a single space to clear"
    if field.kind is FieldKind.NUMBER:
        return "Enter to keep, 0 to clear"
    return "Enter to keep"


def _save(
    store: ConfigurationStore,
    original_alias: str,
    draft: Profile,
    confirm: Callable[..., bool],
) -> EditResult:
    new_alias = draft.alias_name
    if new_alias != original_alias and new_alias in store:
        if not confirm(
            f"Configuration '{new_alias}' already exists. Overwrite?", default=False
        ):
            warn("Save aborted; no changes were written.")
            return EditResult(EditOutcome.ABORTED, original_alias)
    store.rename_or_update(original_alias, draft)
    store.save()
    log_event("profile_edited", alias=new_alias)
    if new_alias != original_alias:
        ok(f"Configuration '{original_alias}' renamed to '{new_alias}' and saved.")
    else:
        ok(f"Configuration '{new_alias}' saved.")
    return EditResult(EditOutcome.SAVED, new_alias)


def edit_profile(
    store: ConfigurationStore,
    alias: str,
    caps: Optional[TerminalCaps] = None,
    input_fn: Callable[[str], str] = safe_input,
    confirm: Callable[..., bool] = prompt_yes_no,
) -> EditResult:
    """Interactively edit the profile stored under ``alias``."""
    original = store.get(alias)
    if original is None:
        raise ProfileNotFoundError(alias)
    caps = caps or TerminalCaps()
    draft = replace(original)
    while True:
        for line in render_editor(draft, caps, dirty=draft != original):
            print(line)
        try:
            choice = input_fn(EDITOR_PROMPT).strip().upper()
        except EOFError:
            return EditResult(EditOutcome.RETURN_TO_MENU, alias)
        if choice == "Q":
            return EditResult(EditOutcome.RETURN_TO_MENU, alias)
        if choice == "S":
            if draft == original:
                info("No changes to save.")
                return EditResult(EditOutcome.SAVED, alias)
            return _save(store, alias, draft, confirm)
        field = FIELDS_BY_KEY.get(choice)
        if field is None:
            err("Invalid choice.")
            continue
        try:
            raw = input_fn(f"New {field.label} ({_hint(field)}): ")
        except EOFError:
            return EditResult(EditOutcome.RETURN_TO_MENU, alias)
        error = apply_field_input(draft, field, raw)
        if error:
            err(error)


__all__ = [
    "EditOutcome",
    "EditResult",
    "FieldKind",
    "EditableField",
    "FIELDS",
    "FIELDS_BY_KEY",
    "apply_field_input",
    "render_editor",
    "edit_profile",
]
