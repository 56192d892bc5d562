"""Argument parsing for the ``cc-switch`` command line.

Global options (storage mode override, logging) come before the sub-command.
Running without a sub-command opens the interactive configuration selector.
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from .completion import SHELLS
from .profiles import parse_u32

DEFAULT_URL = "https://api.anthropic.com"


def u32(text: str) -> int:
    """argparse ``type=`` wrapper for unsigned 32-bit values."""
    try:
        return parse_u32(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _add_general_args(p: argparse.ArgumentParser) -> None:
    g = p.add_argument_group("General")
    g.add_argument(
        "--store",
        choices=["env", "config"],
        help="Where switching writes credentials for this run "
        "(env: export to Claude's process, config: write settings.json)",
    )
    g.add_argument(
        "--migrate",
        action="store_true",
        help="Move configurations from the legacy ~/.cc_auto_switch directory",
    )
    g.add_argument("--list-aliases", action="store_true", help=argparse.SUPPRESS)
    g.add_argument("-V", "--version", action="store_true", help="Print version and exit")


def _add_logging_args(p: argparse.ArgumentParser) -> None:
    g = p.add_argument_group("Logging")
    g.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    g.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Explicit log level (overrides --verbose)",
    )
    g.add_argument("--log-file", help="Also write logs to this file")
    g.add_argument("--log-json", action="store_true", help="Emit JSON logs to stdout")


def _add_profile_fields(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("-t", "--token", help="API token (ANTHROPIC_AUTH_TOKEN)")
    sp.add_argument("-u", "--url", help=f"API base URL (default: {DEFAULT_URL})")
    sp.add_argument("-m", "--model", help="Model (ANTHROPIC_MODEL)")
    sp.add_argument("--small-fast-model", help="Small fast model (ANTHROPIC_SMALL_FAST_MODEL)")
    sp.add_argument("--max-thinking-tokens", type=u32, help="Maximum thinking tokens")
    sp.add_argument("--api-timeout-ms", type=u32, help="API timeout in milliseconds")
    sp.add_argument(
        "--disable-nonessential-traffic",
        action="store_const",
        const=1,
        dest="disable_nonessential_traffic",
        help="Set CLAUDE_CODE_DISABLE_NONESSENTIAL_TRAFFIC to 1",
    )
    sp.add_argument(
        "--disable-nonessential-traffic-value",
        type=u32,
        metavar="N",
        dest="disable_nonessential_traffic",
        help="Set CLAUDE_CODE_DISABLE_NONESSENTIAL_TRAFFIC to N",
    )
    sp.add_argument("--default-sonnet-model", help="ANTHROPIC_DEFAULT_SONNET_MODEL")
    sp.add_argument("--default-opus-model", help="ANTHROPIC_DEFAULT_OPUS_MODEL")
    sp.add_argument("--default-haiku-model", help="ANTHROPIC_DEFAULT_HAIKU_MODEL")


def _add_commands(p: argparse.ArgumentParser) -> None:
    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    add = sub.add_parser("add", help="Add a configuration")
    add.add_argument("alias", nargs="?", help="Name for the configuration")
    add.add_argument("token_arg", nargs="?", metavar="TOKEN", help="API token")
    add.add_argument("url_arg", nargs="?", metavar="URL", help="API base URL")
    _add_profile_fields(add)
    add.add_argument("-f", "--force", action="store_true", help="Overwrite an existing alias")
    add.add_argument(
        "-i", "--interactive", action="store_true", help="Prompt for every field"
    )
    add.add_argument(
        "-j",
        "--from-file",
        metavar="FILE",
        help="Import the 'env' section of a settings-style JSON file "
        "(alias defaults to the file name)",
    )

    rm = sub.add_parser("remove", help="Remove one or more configurations")
    rm.add_argument("aliases", nargs="+", metavar="ALIAS")

    ls = sub.add_parser("list", help="List stored configurations")
    ls.add_argument("-p", "--plain", action="store_true", help="Human-readable output")

    use = sub.add_parser("use", help="Switch to a configuration and launch Claude")
    use.add_argument("alias", help="Configuration alias ('cc' for official defaults)")

    sub.add_parser("current", help="Show the current environment and the main menu")

    sdir = sub.add_parser(
        "set-default-dir", help="Set the directory holding Claude's settings.json"
    )
    sdir.add_argument("directory", nargs="?", help="Directory (omit to reset to ~/.claude)")

    smode = sub.add_parser("set-default-mode", help="Set the default storage mode")
    smode.add_argument("mode", choices=["env", "config"])

    comp = sub.add_parser("completion", help="Print a shell completion script")
    comp.add_argument("shell", choices=list(SHELLS))

    al = sub.add_parser("alias", help="Print convenience shell aliases")
    al.add_argument("shell", choices=list(SHELLS))

    sub.add_parser("version", help="Print version")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cc-switch",
        description="Manage and switch Claude CLI API configurations",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog="Run without a command to pick a configuration interactively.",
    )
    _add_general_args(p)
    _add_logging_args(p)
    _add_commands(p)
    return p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments (defaults to ``sys.argv[1:]``)."""
    return build_parser().parse_args(argv)


__all__ = ["DEFAULT_URL", "u32", "build_parser", "parse_args"]
