"""The assistant's ``settings.json`` and the write-mode switch protocol.

cc-switch owns only the ``env`` object of the settings document and only the
reserved names inside it; every other top-level key is carried through
untouched. :func:`switch` keeps the invariant that after a successful switch
at most one of {process environment, settings ``env`` map} holds reserved
names:

 - Env mode strips reserved names from the file (the launcher exports the
   profile into the child's environment instead).
 - Config mode refuses to write when either source already holds a reserved
   name, and otherwise writes the profile into the file.

Conflict detection looks at the settings ``env`` map and the process
environment only; root-level keys are opaque.
"""

from __future__ import annotations

import json
import os
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .environment import RESERVED_ENV_NAMES, materialize
from .errors import Conflict, ConflictError, ConflictSource, StorageError
from .io_safe import atomic_write
from .logging_utils import log_event
from .profiles import Profile, WriteMode

SETTINGS_FILE = "settings.json"
DEFAULT_SETTINGS_DIR = ".claude"


@dataclass
class SettingsDocument:
    env: Dict[str, str] = field(default_factory=OrderedDict)
    other: Dict[str, Any] = field(default_factory=OrderedDict)

    @classmethod
    def from_json(cls, data: Any, path: Optional[Path] = None) -> "SettingsDocument":
        if not isinstance(data, dict):
            raise StorageError(f"{path or SETTINGS_FILE}: top level is not an object", path)
        env_raw = data.get("env", {})
        if env_raw is None:
            env_raw = {}
        if not isinstance(env_raw, dict):
            raise StorageError(f"{path or SETTINGS_FILE}: 'env' is not an object", path)
        env: Dict[str, str] = OrderedDict()
        for k, v in env_raw.items():
            if not isinstance(v, str):
                raise StorageError(
                    f"{path or SETTINGS_FILE}: env value for '{k}' is not a string", path
                )
            env[k] = v
        other = OrderedDict((k, v) for k, v in data.items() if k != "env")
        return cls(env, other)

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = OrderedDict()
        if self.env:
            out["env"] = dict(self.env)
        out.update(self.other)
        return out

    def dumps(self) -> str:
        return json.dumps(self.to_json(), indent=2, ensure_ascii=False) + "\n"

    def reserved_present(self) -> List[str]:
        return [name for name in RESERVED_ENV_NAMES if name in self.env]


@dataclass
class SwitchOutcome:
    """What a switch did to the settings file."""

    mode: WriteMode
    path: Path
    removed: List[str] = field(default_factory=list)
    written: Dict[str, str] = field(default_factory=OrderedDict)


def settings_path(custom_dir: Optional[str] = None, home: Optional[Path] = None) -> Path:
    """Resolve the settings file location.

    Absolute ``custom_dir`` is used as-is, a relative one is taken under
    ``home``, and without one the assistant's default ``~/.claude`` is used.
    """
    home = Path(home) if home is not None else Path.home()
    if custom_dir:
        d = Path(custom_dir).expanduser()
        base = d if d.is_absolute() else home / d
        return base / SETTINGS_FILE
    return home / DEFAULT_SETTINGS_DIR / SETTINGS_FILE


def _read(path: Path) -> Optional[SettingsDocument]:
    """Parse ``path``; ``None`` when absent, empty document when blank."""
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(f"Failed to read {path}: {e}", path) from e
    if not text.strip():
        return SettingsDocument()
    try:
        data = json.loads(text, object_pairs_hook=OrderedDict)
    except json.JSONDecodeError as e:
        raise StorageError(f"Failed to parse {path}: {e}", path) from e
    return SettingsDocument.from_json(data, path)


def _write(doc: SettingsDocument, path: Path) -> None:
    try:
        atomic_write(path, doc.dumps())
    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}", path) from e


def load(custom_dir: Optional[str] = None, home: Optional[Path] = None) -> SettingsDocument:
    """Load the settings document, creating an empty one on first run."""
    path = settings_path(custom_dir, home)
    doc = _read(path)
    if doc is None:
        doc = SettingsDocument()
        _write(doc, path)
        log_event("settings_created", path=str(path))
    return doc


def save(
    doc: SettingsDocument, custom_dir: Optional[str] = None, home: Optional[Path] = None
) -> Path:
    path = settings_path(custom_dir, home)
    _write(doc, path)
    return path


def find_conflicts(
    doc: Optional[SettingsDocument], environ: Optional[Mapping[str, str]] = None
) -> List[Conflict]:
    """Every reserved name held by the process env or the settings ``env`` map.

    Presence counts even when the value is empty.
    """
    environ = os.environ if environ is None else environ
    conflicts = [
        Conflict(name, ConflictSource.PROCESS_ENV)
        for name in RESERVED_ENV_NAMES
        if name in environ
    ]
    if doc is not None:
        conflicts.extend(
            Conflict(name, ConflictSource.SETTINGS_FILE)
            for name in doc.reserved_present()
        )
    return conflicts


def _strip_reserved(path: Path, mode: WriteMode) -> SwitchOutcome:
    doc = _read(path)
    if doc is None:
        doc = SettingsDocument()
        _write(doc, path)
        log_event("settings_created", path=str(path))
    removed = doc.reserved_present()
    for name in removed:
        del doc.env[name]
    if removed:
        _write(doc, path)
        log_event("settings_cleaned", path=str(path), removed=removed)
    return SwitchOutcome(mode, path, removed)


def switch(
    profile: Profile,
    mode: WriteMode,
    custom_dir: Optional[str] = None,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SwitchOutcome:
    """Make ``profile`` the active credential source for ``mode``.

    Env mode only removes reserved names from the settings file. Config mode
    raises :class:`ConflictError` without touching the file when a reserved
    name already exists in the process environment or the settings ``env``
    map, and otherwise writes the profile's variables into the file.
    """
    path = settings_path(custom_dir, home)
    if mode is WriteMode.ENV:
        outcome = _strip_reserved(path, mode)
        log_event("switch", alias=profile.alias_name, mode=mode.value, path=str(path))
        return outcome

    doc = _read(path)
    conflicts = find_conflicts(doc, environ)
    if conflicts:
        log_event(
            "switch_conflict",
            alias=profile.alias_name,
            mode=mode.value,
            path=str(path),
            error_type="ConflictError",
        )
        raise ConflictError(conflicts, path)
    if doc is None:
        doc = SettingsDocument()
    bag = materialize(profile)
    doc.env.update(bag)
    _write(doc, path)
    log_event("switch", alias=profile.alias_name, mode=mode.value, path=str(path))
    return SwitchOutcome(mode, path, [], bag)


def reset(
    mode: WriteMode = WriteMode.ENV,
    custom_dir: Optional[str] = None,
    home: Optional[Path] = None,
) -> SwitchOutcome:
    """Official/reset: strip reserved names from the settings file in any mode."""
    path = settings_path(custom_dir, home)
    outcome = _strip_reserved(path, mode)
    log_event("reset", mode=mode.value, path=str(path), removed=outcome.removed)
    return outcome


__all__ = [
    "SETTINGS_FILE",
    "SettingsDocument",
    "SwitchOutcome",
    "settings_path",
    "load",
    "save",
    "find_conflicts",
    "switch",
    "reset",
]
