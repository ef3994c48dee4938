"""
Argv preprocessor for forgiving CLI flag and command handling.

Normalizes sys.argv before Typer parses it, handling common user patterns:
- ``spiral --version`` → ``spiral version``
- ``spiral help add`` → ``spiral add --help``
- ``spiral show all --debug`` → ``spiral --debug show all``
"""

_GLOBAL_FLAGS = {"--debug"}


def preprocess_argv(argv: list[str]) -> list[str]:
    """Normalize CLI arguments for Typer compatibility.

    Applied rules (in order):
    1. ``--version`` / ``-V`` as first arg → ``version`` subcommand
    2. ``help`` pseudo-command → ``--help`` appended to subcommands
    3. Global flags hoisted before the subcommand
    """
    if not argv:
        return argv

    if argv[0] in ("--version", "-V"):
        return ["version"]

    if argv[0] == "help":
        return _rewrite_help(argv[1:])

    return _hoist_global_flags(argv)


def _rewrite_help(rest: list[str]) -> list[str]:
    """Rewrite ``help [subcmd...]`` into ``[subcmd...] --help``.

    Collects up to 2 non-flag, non-"help" tokens as subcommands.
    """
    subcmds: list[str] = []
    for token in rest:
        if token.startswith("-") or token == "help":
            continue
        subcmds.append(token)
        if len(subcmds) >= 2:
            break
    return [*subcmds, "--help"]


def _hoist_global_flags(argv: list[str]) -> list[str]:
    """Move global flags before the subcommand, dropping repeats.

    Tokens after a ``--`` separator are left alone so that a commit message
    such as ``-- --debug`` survives.
    """
    hoisted: list[str] = []
    rest: list[str] = []
    seen: set[str] = set()
    for i, token in enumerate(argv):
        if token == "--":
            rest.extend(argv[i:])
            break
        if token in _GLOBAL_FLAGS:
            if token not in seen:
                hoisted.append(token)
                seen.add(token)
        else:
            rest.append(token)
    return [*hoisted, *rest]
