"""Profile model, write mode, and alias validation.

A :class:`Profile` is one named set of credentials plus optional model and
tuning overrides for the ``claude`` CLI. Optional fields are ``None`` when
unset and are omitted from the persisted JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional

from .errors import AliasError, StorageError

RESERVED_ALIAS = "cc"
U32_MAX = 2**32 - 1

STRING_FIELDS = (
    "model",
    "small_fast_model",
    "anthropic_default_sonnet_model",
    "anthropic_default_opus_model",
    "anthropic_default_haiku_model",
)
NUMERIC_FIELDS = (
    "max_thinking_tokens",
    "api_timeout_ms",
    "claude_code_disable_nonessential_traffic",
)


class WriteMode(Enum):
    """Where a switch puts the profile's variables."""

    ENV = "env"
    CONFIG = "config"

    @classmethod
    def parse(cls, text: str) -> "WriteMode":
        try:
            return cls(str(text).strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid storage mode '{text}'. Use 'env' or 'config'"
            ) from None


def validate_alias(alias: str) -> str:
    """Return ``alias`` unchanged or raise :class:`AliasError`."""
    if not alias or not alias.strip():
        raise AliasError("Alias name cannot be empty")
    if alias == RESERVED_ALIAS:
        raise AliasError(
            f"Alias name '{RESERVED_ALIAS}' is reserved and cannot be used"
        )
    if any(ch.isspace() for ch in alias):
        raise AliasError("Alias name cannot contain whitespace")
    return alias


def parse_u32(text: str) -> int:
    """Parse a base-10 unsigned 32-bit integer or raise ``ValueError``."""
    s = str(text).strip()
    if not s.isdigit() or not s.isascii():
        raise ValueError(f"'{text}' is not a non-negative integer")
    value = int(s)
    if value > U32_MAX:
        raise ValueError(f"'{text}' is larger than {U32_MAX}")
    return value


@dataclass
class Profile:
    alias_name: str
    token: str
    url: str
    model: Optional[str] = None
    small_fast_model: Optional[str] = None
    max_thinking_tokens: Optional[int] = None
    api_timeout_ms: Optional[int] = None
    claude_code_disable_nonessential_traffic: Optional[int] = None
    anthropic_default_sonnet_model: Optional[str] = None
    anthropic_default_opus_model: Optional[str] = None
    anthropic_default_haiku_model: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the on-disk shape, skipping unset optionals."""
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "Profile":
        """Build a profile from parsed JSON, raising :class:`StorageError`."""
        if not isinstance(data, dict):
            raise StorageError("Configuration entry is not an object")
        kwargs: Dict[str, Any] = {}
        for name in ("alias_name", "token", "url"):
            value = data.get(name)
            if not isinstance(value, str):
                raise StorageError(f"Configuration field '{name}' is missing")
            kwargs[name] = value
        for name in STRING_FIELDS:
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise StorageError(f"Configuration field '{name}' must be a string")
            kwargs[name] = value
        for name in NUMERIC_FIELDS:
            value = data.get(name)
            if value is not None and (
                isinstance(value, bool)
                or not isinstance(value, int)
                or not 0 <= value <= U32_MAX
            ):
                raise StorageError(
                    f"Configuration field '{name}' must be an integer in 0..{U32_MAX}"
                )
            kwargs[name] = value
        return cls(**kwargs)


__all__ = [
    "RESERVED_ALIAS",
    "U32_MAX",
    "STRING_FIELDS",
    "NUMERIC_FIELDS",
    "WriteMode",
    "validate_alias",
    "parse_u32",
    "Profile",
]
