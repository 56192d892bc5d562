"""Entry point: parse arguments and dispatch sub-commands.

Storage and launch failures propagate up to :func:`main`, which prints one
``✗`` line, logs the error type, and returns exit code 1. Config-mode
conflicts are reported where they happen and also end with exit code 1.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable, List, Optional

from .actions import activate_official, activate_profile
from .args import DEFAULT_URL, parse_args
from .completion import alias_definitions, completion_script
from .environment import profile_from_env
from .errors import AliasError, CcSwitchError, ProfileNotFoundError, StorageError
from .io_safe import LEGACY_STORE_JSON, migrate_legacy_store, store_path
from .layout import detect_terminal_caps, format_token
from .logging_utils import configure_logging, log_event
from .profiles import (
    RESERVED_ALIAS,
    Profile,
    WriteMode,
    parse_u32,
    validate_alias,
)
from .prompts import MenuContext, run_main_menu, run_selection, safe_input
from .store import ConfigurationStore
from .ui import err, info, ok, warn
from .utils import get_version

OFFICIAL_TOKEN_PREFIX = "sk-ant-api03-"
OFFICIAL_HOST = "api.anthropic.com"


def check_token(token: str, url: str) -> None:
    """Warn about token/URL combinations that are probably mistakes."""
    official_url = OFFICIAL_HOST in url
    if official_url and not token.startswith(OFFICIAL_TOKEN_PREFIX):
        warn(
            f"Tokens for {OFFICIAL_HOST} usually start with '{OFFICIAL_TOKEN_PREFIX}'"
        )
    if token.startswith(OFFICIAL_TOKEN_PREFIX) and not official_url:
        warn("This looks like an official Anthropic token used with a custom URL")


def _prompt_text(label: str, input_fn, default: Optional[str] = None) -> Optional[str]:
    suffix = f" [{default}]" if default else ""
    value = input_fn(f"{label}{suffix}: ").strip()
    return value or default


def _prompt_number(label: str, input_fn) -> Optional[int]:
    while True:
        value = input_fn(f"{label} (blank to skip): ").strip()
        if not value:
            return None
        try:
            return parse_u32(value)
        except ValueError as e:
            err(str(e))


def _interactive_fields(args, input_fn) -> None:
    """Fill ``args`` by prompting for every field not given on the command line."""
    while not args.alias:
        candidate = input_fn("Alias: ").strip()
        try:
            args.alias = validate_alias(candidate)
        except AliasError as e:
            err(str(e))
    while not args.token:
        args.token = input_fn("API token: ").strip() or None
        if not args.token:
            err("Token cannot be empty")
    args.url = args.url or _prompt_text("API base URL", input_fn, DEFAULT_URL)
    for attr, label in (
        ("model", "Model"),
        ("small_fast_model", "Small fast model"),
        ("default_sonnet_model", "Default Sonnet model"),
        ("default_opus_model", "Default Opus model"),
        ("default_haiku_model", "Default Haiku model"),
    ):
        if getattr(args, attr) is None:
            setattr(args, attr, _prompt_text(label, input_fn))
    for attr, label in (
        ("max_thinking_tokens", "Max thinking tokens"),
        ("api_timeout_ms", "API timeout (ms)"),
        ("disable_nonessential_traffic", "Disable nonessential traffic (1 to set)"),
    ):
        if getattr(args, attr) is None:
            setattr(args, attr, _prompt_number(label, input_fn))


def _profile_from_file(path_str: str, alias: Optional[str]) -> Profile:
    path = Path(path_str).expanduser()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise StorageError(f"Failed to read {path}: {e}", path) from e
    except json.JSONDecodeError as e:
        raise StorageError(f"Failed to parse {path}: {e}", path) from e
    env = data.get("env") if isinstance(data, dict) else None
    if not isinstance(env, dict):
        raise StorageError(f"{path} has no 'env' object", path)
    try:
        return profile_from_env(validate_alias(alias or path.stem), env, DEFAULT_URL)
    except ValueError as e:
        if isinstance(e, AliasError):
            raise
        raise StorageError(f"{path}: {e}", path) from e


def cmd_add(args, store: ConfigurationStore, input_fn: Callable[[str], str]) -> int:
    if args.from_file:
        profile = _profile_from_file(args.from_file, args.alias)
    else:
        args.token = args.token or args.token_arg
        args.url = args.url or args.url_arg
        if args.interactive:
            _interactive_fields(args, input_fn)
        if not args.alias:
            err("Alias is required (or use --interactive)")
            return 1
        validate_alias(args.alias)
        if not args.token:
            err("Token is required. Pass it with -t/--token or use --interactive")
            return 1
        profile = Profile(
            alias_name=args.alias,
            token=args.token,
            url=args.url or DEFAULT_URL,
            model=args.model,
            small_fast_model=args.small_fast_model,
            max_thinking_tokens=args.max_thinking_tokens,
            api_timeout_ms=args.api_timeout_ms,
            claude_code_disable_nonessential_traffic=args.disable_nonessential_traffic,
            anthropic_default_sonnet_model=args.default_sonnet_model,
            anthropic_default_opus_model=args.default_opus_model,
            anthropic_default_haiku_model=args.default_haiku_model,
        )
    alias = profile.alias_name
    if alias in store and not args.force:
        err(f"Configuration '{alias}' already exists.")
        info("Use --force to overwrite or choose a different alias.")
        return 1
    check_token(profile.token, profile.url)
    store.add(profile)
    store.save()
    log_event("profile_added", alias=alias)
    ok(f"Configuration '{alias}' added successfully")
    return 0


def cmd_remove(args, store: ConfigurationStore) -> int:
    removed: List[str] = []
    missing: List[str] = []
    for alias in args.aliases:
        (removed if store.remove(alias) else missing).append(alias)
    if removed:
        store.save()
        for alias in removed:
            log_event("profile_removed", alias=alias)
        ok(f"Removed: {', '.join(removed)}")
    for alias in missing:
        warn(f"Configuration '{alias}' not found")
    return 0 if removed else 1


def _plain_listing(store: ConfigurationStore) -> None:
    if not len(store):
        info("No configurations stored.")
        return
    print("Stored configurations:")
    for profile in store.sorted_profiles():
        token = format_token(profile.token)
        print(f"  {profile.alias_name}: token={token}, url={profile.url}")
        if profile.model:
            print(f"    model={profile.model}")
        if profile.small_fast_model:
            print(f"    small_fast_model={profile.small_fast_model}")
    if store.default_storage_mode is not None:
        print(f"Default storage mode: {store.default_storage_mode.value}")
    if store.claude_settings_dir:
        print(f"Claude settings directory: {store.claude_settings_dir}")


def cmd_list(args, store: ConfigurationStore) -> int:
    if args.plain:
        _plain_listing(store)
    else:
        entries = {p.alias_name: p.to_dict() for p in store.sorted_profiles()}
        print(json.dumps(entries, indent=2, ensure_ascii=False))
    return 0


def cmd_use(args, store: ConfigurationStore, mode_override: Optional[WriteMode]) -> int:
    if args.alias == RESERVED_ALIAS:
        return activate_official(store, mode_override)
    profile = store.get(args.alias)
    if profile is None:
        raise ProfileNotFoundError(args.alias)
    return activate_profile(store, profile, mode_override)


def cmd_set_default_dir(args, store: ConfigurationStore) -> int:
    store.set_settings_dir(args.directory)
    store.save()
    if store.claude_settings_dir:
        ok(f"Claude settings directory set to {store.claude_settings_dir}")
    else:
        ok("Claude settings directory reset to ~/.claude")
    return 0


def cmd_set_default_mode(args, store: ConfigurationStore) -> int:
    mode = WriteMode.parse(args.mode)
    store.set_default_mode(mode)
    store.save()
    ok(f"Default storage mode set to '{mode.value}'")
    return 0


def cmd_migrate() -> int:
    target = migrate_legacy_store()
    if target is None:
        info(f"Nothing to migrate from {LEGACY_STORE_JSON}")
    else:
        ok(f"Migrated configurations to {target}")
    return 0


def _dispatch(args, input_fn: Callable[[str], str]) -> int:
    if args.version or args.command == "version":
        print(f"cc-switch {get_version()}")
        return 0
    if args.command == "completion":
        sys.stdout.write(completion_script(args.shell))
        return 0
    if args.command == "alias":
        sys.stdout.write(alias_definitions(args.shell))
        return 0
    if args.migrate:
        return cmd_migrate()

    store = ConfigurationStore.load(store_path())
    if args.list_aliases:
        for alias in store.aliases():
            print(alias)
        return 0

    mode_override = WriteMode.parse(args.store) if args.store else None
    if args.command == "add":
        return cmd_add(args, store, input_fn)
    if args.command == "remove":
        return cmd_remove(args, store)
    if args.command == "list":
        return cmd_list(args, store)
    if args.command == "use":
        return cmd_use(args, store, mode_override)
    if args.command == "set-default-dir":
        return cmd_set_default_dir(args, store)
    if args.command == "set-default-mode":
        return cmd_set_default_mode(args, store)

    ctx = MenuContext(
        store,
        caps=detect_terminal_caps(),
        mode_override=mode_override,
        input_fn=input_fn,
    )
    if args.command == "current":
        return run_main_menu(ctx)
    result = run_selection(ctx)
    return 0 if result is None else result


def main(
    argv: Optional[List[str]] = None, input_fn: Callable[[str], str] = safe_input
) -> int:
    """Entry point for the CLI tool; returns the process exit code."""
    args = parse_args(argv)
    configure_logging(args.verbose, args.log_file, args.log_json, args.log_level)
    try:
        return _dispatch(args, input_fn)
    except (KeyboardInterrupt, EOFError):
        print()
        warn("Aborted by user.")
        return 130
    except (CcSwitchError, OSError, ValueError) as e:
        err(str(e))
        log_event("command_failed", error_type=type(e).__name__)
        return 1


__all__ = [
    "main",
    "check_token",
    "cmd_add",
    "cmd_remove",
    "cmd_list",
    "cmd_use",
    "cmd_set_default_dir",
    "cmd_set_default_mode",
    "cmd_migrate",
]
