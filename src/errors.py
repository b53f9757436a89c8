"""Error types raised by the microsh engine.

Two families exist. Builtin errors are reported and the sequence goes on.
Fatal errors mean the host cannot support correct execution anymore: the
driver prints ``error: fatal`` and stops with a failure exit code.
"""
from __future__ import annotations


class MicroshError(Exception):
    """Base class; ``str()`` is the diagnostic line written to stderr."""


# --- Non-fatal builtin misuse ---

class BuiltinError(MicroshError):
    pass


class BadArguments(BuiltinError):
    def __init__(self, name: str = "cd") -> None:
        super().__init__(f"error: {name}: bad arguments")
        self.name = name


class DirectoryChangeFailed(BuiltinError):
    def __init__(self, path: str) -> None:
        super().__init__(f"error: cd: cannot change directory to {path}")
        self.path = path


# --- Child-only failure ---

class CannotExecute(MicroshError):
    def __init__(self, program: str) -> None:
        super().__init__(f"error: cannot execute {program}")
        self.program = program


# --- Fatal engine conditions ---

class FatalError(MicroshError):
    def __init__(self, reason: str = "") -> None:
        super().__init__("error: fatal")
        # Not part of the user-visible message
        self.reason = reason


class ResourceExhausted(FatalError):
    pass


class SpawnFailure(FatalError):
    pass


class WaitFailure(FatalError):
    pass
