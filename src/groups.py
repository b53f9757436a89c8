"""Block splitting for microsh.

The engine receives tokens that are already split (an argv tail). This
module groups them: ``;`` closes a block, ``|`` closes a command inside the
current block. Nothing here looks up programs or checks arguments.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from config import DEFAULT_MAX_COMMANDS
from errors import ResourceExhausted

SEQUENCE = ";"
PIPE = "|"


@dataclass
class Command:
    """One program invocation; ``argv[0]`` is the program or builtin name."""
    argv: list[str]

    @property
    def name(self) -> str:
        return self.argv[0]


@dataclass
class Block:
    """Commands joined by pipes. May be empty (adjacent ``;`` separators)."""
    commands: list[Command] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands)

    @property
    def is_empty(self) -> bool:
        return not self.commands


def iter_blocks(tokens: Iterable[str], max_commands: int = DEFAULT_MAX_COMMANDS) -> Iterator[Block]:
    """Yield blocks left to right as each ``;`` (or the end of input) is reached.

    A ``|`` with nothing before it, or one directly followed by ``;`` or the
    end of input, leaves an empty command behind; empty commands are dropped
    rather than fabricated. Raises ResourceExhausted when a block would hold
    more than ``max_commands`` commands.
    """
    block = Block()
    argv: list[str] = []

    def flush() -> None:
        nonlocal argv
        if argv:
            if len(block.commands) >= max_commands:
                raise ResourceExhausted(f"more than {max_commands} commands in one block")
            block.commands.append(Command(argv))
            argv = []

    for tok in tokens:
        if tok == SEQUENCE:
            flush()
            yield block
            block = Block()
        elif tok == PIPE:
            flush()
        else:
            argv.append(tok)
    flush()
    yield block


def split(tokens: Sequence[str], max_commands: int = DEFAULT_MAX_COMMANDS) -> list[Block]:
    return list(iter_blocks(tokens, max_commands))
