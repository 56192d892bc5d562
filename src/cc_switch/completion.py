"""Shell completion scripts and convenience aliases.

Alias names are completed dynamically through the hidden ``--list-aliases``
flag so scripts never need regenerating after ``add``/``remove``.
"""

from __future__ import annotations

from typing import Dict

from .launcher import CLAUDE_CMD, SKIP_PERMISSIONS_FLAG

SHELLS = ("bash", "zsh", "fish")
COMMANDS = (
    "add",
    "remove",
    "list",
    "use",
    "current",
    "set-default-dir",
    "set-default-mode",
    "completion",
    "alias",
    "version",
)
# Sub-commands whose positional argument is a stored alias
ALIAS_COMMANDS = ("remove", "use")

_BASH = """\
# cc-switch bash completion
_cc_switch() {{
    local cur prev
    cur="${{COMP_WORDS[COMP_CWORD]}}"
    prev="${{COMP_WORDS[COMP_CWORD-1]}}"
    case "$prev" in
        {alias_cmds})
            COMPREPLY=( $(compgen -W "$(cc-switch --list-aliases 2>/dev/null)" -- "$cur") )
            return 0
            ;;
        --store|set-default-mode)
            COMPREPLY=( $(compgen -W "env config" -- "$cur") )
            return 0
            ;;
        completion|alias)
            COMPREPLY=( $(compgen -W "{shells}" -- "$cur") )
            return 0
            ;;
    esac
    if [ "$COMP_CWORD" -eq 1 ]; then
        COMPREPLY=( $(compgen -W "{commands} --store --migrate --help" -- "$cur") )
    fi
}}
complete -F _cc_switch cc-switch
complete -F _cc_switch cs
"""

_ZSH = """\
#compdef cc-switch cs
_cc_switch() {{
    local -a commands
    commands=({commands})
    if (( CURRENT == 2 )); then
        _describe 'command' commands
        return
    fi
    case "$words[2]" in
        {alias_cmds})
            local -a aliases
            aliases=(${{(f)"$(cc-switch --list-aliases 2>/dev/null)"}})
            _describe 'configuration' aliases
            ;;
        set-default-mode)
            _values 'mode' env config
            ;;
        completion|alias)
            _values 'shell' {shells}
            ;;
    esac
}}
compdef _cc_switch cc-switch cs
"""

_FISH = """\
# cc-switch fish completion
complete -c cc-switch -f
complete -c cc-switch -n '__fish_use_subcommand' -a '{commands}'
complete -c cc-switch -n '__fish_seen_subcommand_from {alias_cmds}' -a '(cc-switch --list-aliases 2>/dev/null)'
complete -c cc-switch -n '__fish_seen_subcommand_from set-default-mode' -a 'env config'
complete -c cc-switch -n '__fish_seen_subcommand_from completion alias' -a '{shells}'
complete -c cc-switch -l store -x -a 'env config'
complete -c cc-switch -l migrate
"""

_TEMPLATES: Dict[str, str] = {"bash": _BASH, "zsh": _ZSH, "fish": _FISH}


def completion_script(shell: str) -> str:
    if shell not in _TEMPLATES:
        raise ValueError(f"Unsupported shell '{shell}'. Supported: {', '.join(SHELLS)}")
    sep = "|" if shell != "fish" else " "
    return _TEMPLATES[shell].format(
        commands=" ".join(COMMANDS),
        alias_cmds=sep.join(ALIAS_COMMANDS),
        shells=" ".join(SHELLS),
    )


def alias_definitions(shell: str) -> str:
    """``cs`` for cc-switch and ``ccd`` for Claude without permission prompts."""
    if shell not in SHELLS:
        raise ValueError(f"Unsupported shell '{shell}'. Supported: {', '.join(SHELLS)}")
    claude = f"{CLAUDE_CMD} {SKIP_PERMISSIONS_FLAG}"
    if shell == "fish":
        return f"alias cs 'cc-switch'\nalias ccd '{claude}'\n"
    return f"alias cs='cc-switch'\nalias ccd='{claude}'\n"


__all__ = ["SHELLS", "COMMANDS", "completion_script", "alias_definitions"]
