"""Profile to environment-variable materialization.

``RESERVED_ENV_NAMES`` is the one list of variable names cc-switch owns; the
settings merger uses it both to clean stale values and to detect conflicts.
"""

from __future__ import annotations

import os
from collections import OrderedDict
from typing import Mapping, Optional

from .profiles import Profile, parse_u32

# (variable name, profile attribute, numeric?) in emission order
_FIELD_MAP = (
    ("ANTHROPIC_AUTH_TOKEN", "token", False),
    ("ANTHROPIC_BASE_URL", "url", False),
    ("ANTHROPIC_MODEL", "model", False),
    ("ANTHROPIC_SMALL_FAST_MODEL", "small_fast_model", False),
    ("ANTHROPIC_MAX_THINKING_TOKENS", "max_thinking_tokens", True),
    ("API_TIMEOUT_MS", "api_timeout_ms", True),
    (
        "CLAUDE_CODE_DISABLE_NONESSENTIAL_TRAFFIC",
        "claude_code_disable_nonessential_traffic",
        True,
    ),
    ("ANTHROPIC_DEFAULT_SONNET_MODEL", "anthropic_default_sonnet_model", False),
    ("ANTHROPIC_DEFAULT_OPUS_MODEL", "anthropic_default_opus_model", False),
    ("ANTHROPIC_DEFAULT_HAIKU_MODEL", "anthropic_default_haiku_model", False),
)

# Every variable cc-switch may set or must guard against
RESERVED_ENV_NAMES = tuple(name for name, _, _ in _FIELD_MAP)


def materialize(profile: Profile) -> "OrderedDict[str, str]":
    """Return the environment bag for ``profile``.

    Token and URL are always present. Optional strings appear only when set
    and non-empty after trimming; numeric fields appear whenever set,
    including zero.
    """
    bag: "OrderedDict[str, str]" = OrderedDict()
    for name, attr, numeric in _FIELD_MAP:
        value = getattr(profile, attr)
        if attr in ("token", "url"):
            bag[name] = value
        elif numeric:
            if value is not None:
                bag[name] = str(int(value))
        elif value is not None and value.strip():
            bag[name] = value
    return bag


def profile_from_env(alias: str, env: Mapping[str, str], default_url: str) -> Profile:
    """Inverse of :func:`materialize` for imported ``env`` sections.

    Raises ``ValueError`` when the token is missing or a numeric variable
    does not parse.
    """
    token = env.get("ANTHROPIC_AUTH_TOKEN")
    if not token:
        raise ValueError("ANTHROPIC_AUTH_TOKEN is missing")
    kwargs = {}
    for name, attr, numeric in _FIELD_MAP[2:]:
        value = env.get(name)
        if value is None or not str(value).strip():
            continue
        kwargs[attr] = parse_u32(str(value)) if numeric else str(value)
    url = env.get("ANTHROPIC_BASE_URL") or default_url
    return Profile(alias_name=alias, token=str(token), url=str(url), **kwargs)


def official() -> "OrderedDict[str, str]":
    """The empty bag: the assistant falls back to its own defaults."""
    return OrderedDict()


def child_environment(
    bag: Mapping[str, str], base: Optional[Mapping[str, str]] = None
) -> dict:
    """Copy ``base`` (default ``os.environ``), drop reserved names, apply ``bag``."""
    env = dict(os.environ if base is None else base)
    for name in RESERVED_ENV_NAMES:
        env.pop(name, None)
    env.update(bag)
    return env


__all__ = [
    "RESERVED_ENV_NAMES",
    "materialize",
    "profile_from_env",
    "official",
    "child_environment",
]
