#!/usr/bin/env python3

# Entry of microsh

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional, Sequence

from config import ShellConfig
from ops import run  # local module in the same folder


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


# Options accepted ahead of the tokens, with the number of values each takes
OPTION_ARITY = {"--max-commands": 1, "--search-path": 0, "--help": 0}


def split_options(args: Sequence[str]) -> tuple[list[str], list[str]]:
    """Separate leading microsh options from the command tokens.

    Only the exact options in OPTION_ARITY are taken; the first other token
    starts the command tokens. A ``--`` ends the options and is dropped.
    """
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--":
            return list(args[:i]), list(args[i + 1:])
        name = arg.split("=", 1)[0]
        if name not in OPTION_ARITY:
            break
        i += 1 if "=" in arg else 1 + OPTION_ARITY[name]
    return list(args[:i]), list(args[i:])


def parse_args(args=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Only the leading options go through argparse; the command tokens are
    attached untouched as ``tokens``, so a program may be called ``-x``.
    Write ``--`` before a program whose name is one of the options.
    """
    if args is None:
        args = sys.argv[1:]
    options, tokens = split_options(args)
    parser = argparse.ArgumentParser(
        prog="microsh",
        usage="microsh [--help] [--max-commands N] [--search-path] [--] TOKEN ...",
        description="microsh - run commands joined by '|' and ';' from pre-split arguments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  microsh /bin/ls "|" /usr/bin/grep microsh ";" /bin/echo done
  microsh cd /tmp ";" /bin/pwd
  microsh --search-path ls "|" wc -l

Environment:
  MICROSH_MAX_COMMANDS   maximum commands in one block (default 1024)
  MICROSH_SEARCH_PATH    look programs up on PATH when set to 1/true/yes/on
"""
    )

    parser.add_argument(
        "--max-commands",
        metavar="N",
        type=_positive_int,
        help="Maximum number of commands allowed in one block",
    )
    parser.add_argument(
        "--search-path",
        action="store_true",
        default=None,
        help="Look program names up on PATH instead of executing them as paths",
    )
    ns = parser.parse_args(options)
    ns.tokens = tokens
    return ns


def build_config(ns: argparse.Namespace, environ=None) -> ShellConfig:
    config = ShellConfig.from_env(environ)
    if ns.max_commands is not None:
        config.max_commands = ns.max_commands
    if ns.search_path:
        config.search_path = True
    return config


def main(argv: Optional[Sequence[str]] = None) -> None:
    # argv[0] is our own name
    if argv is None:
        argv = sys.argv
    ns = parse_args(list(argv[1:]))
    try:
        config = build_config(ns)
    except ValueError as e:
        print(f"microsh: {e}", file=sys.stderr)
        sys.exit(2)
    sys.exit(run(ns.tokens, dict(os.environ), config))


if __name__ == "__main__":
    main()
