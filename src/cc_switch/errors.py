"""Exception hierarchy for cc-switch.

Every error the tool raises on purpose derives from :class:`CcSwitchError` so
``main()`` can report it with a single ``✗`` line and exit code 1. Input
validation errors (:class:`AliasError`) are normally caught at prompt
boundaries and re-prompted instead.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, NamedTuple, Optional


class CcSwitchError(Exception):
    """Base class for all cc-switch errors."""


class AliasError(CcSwitchError, ValueError):
    """An alias is empty, reserved, or contains whitespace."""


class StorageError(CcSwitchError):
    """A persisted file could not be read, parsed, or written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ProfileNotFoundError(CcSwitchError, KeyError):
    """No profile is stored under the requested alias."""

    def __init__(self, alias: str):
        super().__init__(alias)
        self.alias = alias

    def __str__(self) -> str:
        return f"Configuration '{self.alias}' not found"


class ConflictSource(Enum):
    PROCESS_ENV = "process environment"
    SETTINGS_FILE = "settings file"


class Conflict(NamedTuple):
    name: str
    source: ConflictSource


class ConflictError(CcSwitchError):
    """Config mode refused to write because reserved names are already set.

    ``conflicts`` lists every offending ``(name, source)`` pair; nothing has
    been written when this is raised.
    """

    def __init__(self, conflicts: List[Conflict], path: Optional[Path] = None):
        self.conflicts = list(conflicts)
        self.path = path
        names = ", ".join(f"{c.name} ({c.source.value})" for c in self.conflicts)
        super().__init__(f"Conflicting environment variables found: {names}")


class LaunchError(CcSwitchError):
    """The assistant executable could not be started."""


class TerminalUnavailable(CcSwitchError):
    """Raw mode or the alternate screen could not be acquired."""


__all__ = [
    "CcSwitchError",
    "AliasError",
    "StorageError",
    "ProfileNotFoundError",
    "ConflictSource",
    "Conflict",
    "ConflictError",
    "LaunchError",
    "TerminalUnavailable",
]
