# module for builtin commands

from __future__ import annotations

import os
import sys
from enum import Enum
from typing import Callable

from config import BUILTIN_CD
from errors import BadArguments, BuiltinError, DirectoryChangeFailed
from groups import Command


class Dispatch(Enum):
    HANDLED = "handled"
    NOT_BUILTIN = "not_builtin"


def change_directory(argv: list[str]) -> None:
    """``cd PATH``: change the working directory of this process.

    Exactly one argument is accepted. Raises BadArguments for any other
    arity and DirectoryChangeFailed when the path cannot be entered; the
    working directory is left untouched in both cases.
    """
    if len(argv) != 2:
        raise BadArguments(argv[0])
    try:
        os.chdir(argv[1])
    except OSError:
        raise DirectoryChangeFailed(argv[1]) from None


builtin_commands: dict[str, Callable[[list[str]], None]] = {
    BUILTIN_CD: change_directory,
}


def try_builtin(command: Command) -> Dispatch:
    """Run ``command`` in-process if it names a builtin.

    Only call this for a block holding a single command; inside a pipeline
    ``cd`` is just another program name. Builtin errors are written to
    stderr and still count as handled.
    """
    handler = builtin_commands.get(command.name)
    if handler is None:
        return Dispatch.NOT_BUILTIN
    try:
        handler(command.argv)
    except BuiltinError as e:
        if sys.stderr is not None:
            sys.stderr.write(f"{e}\n")
            sys.stderr.flush()
    return Dispatch.HANDLED
