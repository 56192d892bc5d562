"""Persistent profile store (``~/.cc-switch/configurations.json``).

:class:`ConfigurationStore` is the in-memory mirror of the store file: a map
from alias to :class:`~cc_switch.profiles.Profile` plus two store-level
preferences (custom settings directory and default write mode). Loading a
missing file yields an empty store; a malformed file is a
:class:`~cc_switch.errors.StorageError` rather than a silent reset so user
data is never overwritten by accident.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .errors import ProfileNotFoundError, StorageError
from .io_safe import atomic_write, store_path
from .logging_utils import log_event
from .profiles import Profile, WriteMode


@dataclass
class ConfigurationStore:
    configurations: Dict[str, Profile] = field(default_factory=dict)
    claude_settings_dir: Optional[str] = None
    default_storage_mode: Optional[WriteMode] = None
    path: Optional[Path] = field(default=None, compare=False, repr=False)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ConfigurationStore":
        """Read the store from ``path`` (default: the well-known store file)."""
        path = path or store_path()
        if not path.exists():
            return cls(path=path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}", path) from e
        except json.JSONDecodeError as e:
            raise StorageError(f"Failed to parse {path}: {e}", path) from e
        if not isinstance(raw, dict):
            raise StorageError(f"Failed to parse {path}: not a JSON object", path)

        entries = raw.get("configurations") or {}
        if not isinstance(entries, dict):
            raise StorageError(f"Failed to parse {path}: bad 'configurations'", path)
        configurations: Dict[str, Profile] = {}
        for alias, data in entries.items():
            try:
                configurations[alias] = Profile.from_dict(data)
            except StorageError as e:
                raise StorageError(f"Failed to parse {path} ('{alias}'): {e}", path)

        settings_dir = raw.get("claude_settings_dir")
        if settings_dir is not None and not isinstance(settings_dir, str):
            raise StorageError(
                f"Failed to parse {path}: bad 'claude_settings_dir'", path
            )
        mode = raw.get("default_storage_mode")
        try:
            default_mode = WriteMode.parse(mode) if mode is not None else None
        except ValueError as e:
            raise StorageError(f"Failed to parse {path}: {e}", path) from e
        return cls(configurations, settings_dir, default_mode, path=path)

    def to_dict(self) -> dict:
        out: dict = {
            "configurations": {
                alias: p.to_dict() for alias, p in self.configurations.items()
            },
            "claude_settings_dir": self.claude_settings_dir,
        }
        if self.default_storage_mode is not None:
            out["default_storage_mode"] = self.default_storage_mode.value
        return out

    def save(self, path: Optional[Path] = None) -> Path:
        """Persist atomically and return the path written."""
        path = path or self.path or store_path()
        text = json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"
        try:
            atomic_write(path, text)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}", path) from e
        self.path = path
        log_event("store_saved", path=str(path))
        return path

    # Profile CRUD -------------------------------------------------------

    def add(self, profile: Profile) -> None:
        """Insert or overwrite by ``profile.alias_name``."""
        self.configurations[profile.alias_name] = profile

    def remove(self, alias: str) -> bool:
        return self.configurations.pop(alias, None) is not None

    def get(self, alias: str) -> Optional[Profile]:
        return self.configurations.get(alias)

    def __contains__(self, alias: str) -> bool:
        return alias in self.configurations

    def __len__(self) -> int:
        return len(self.configurations)

    def aliases(self) -> List[str]:
        return sorted(self.configurations)

    def sorted_profiles(self) -> List[Profile]:
        """Profiles in lexicographic alias order (menu order)."""
        return [self.configurations[a] for a in self.aliases()]

    def rename_or_update(self, old_alias: str, new_profile: Profile) -> None:
        """Replace ``old_alias`` with ``new_profile``.

        When the alias changed the old entry is dropped and any profile
        already stored under the new alias is overwritten; callers confirm
        that collision with the user beforehand.
        """
        if old_alias not in self.configurations:
            raise ProfileNotFoundError(old_alias)
        if new_profile.alias_name != old_alias:
            del self.configurations[old_alias]
        self.configurations[new_profile.alias_name] = new_profile

    # Store-level preferences -------------------------------------------

    def set_settings_dir(self, directory: Optional[str]) -> None:
        self.claude_settings_dir = directory or None

    def set_default_mode(self, mode: Optional[WriteMode]) -> None:
        self.default_storage_mode = mode

    def effective_mode(self, override: Optional[WriteMode] = None) -> WriteMode:
        """CLI override, then stored default, then Env."""
        if override is not None:
            return override
        return self.default_storage_mode or WriteMode.ENV


__all__ = ["ConfigurationStore"]
