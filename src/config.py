"""Runtime settings for microsh, read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MAX_COMMANDS = 1024
BUILTIN_CD = "cd"

ENV_MAX_COMMANDS = "MICROSH_MAX_COMMANDS"
ENV_SEARCH_PATH = "MICROSH_SEARCH_PATH"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ShellConfig:
    # Upper bound on commands in one block; exceeding it is fatal
    max_commands: int = DEFAULT_MAX_COMMANDS
    # False: argv[0] is executed as a literal path. True: looked up on PATH.
    search_path: bool = False

    def __post_init__(self) -> None:
        if self.max_commands < 1:
            raise ValueError(f"max_commands must be >= 1, got {self.max_commands}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ShellConfig":
        """Build a config from ``MICROSH_*`` variables, falling back to defaults.

        Raises ValueError when ``MICROSH_MAX_COMMANDS`` is not a positive integer.
        """
        env = os.environ if environ is None else environ
        raw_max = env.get(ENV_MAX_COMMANDS)
        max_commands = DEFAULT_MAX_COMMANDS
        if raw_max:
            try:
                max_commands = int(raw_max)
            except ValueError:
                raise ValueError(f"{ENV_MAX_COMMANDS} must be an integer, got {raw_max!r}") from None
        search_path = env.get(ENV_SEARCH_PATH, "").strip().lower() in _TRUTHY
        return cls(max_commands=max_commands, search_path=search_path)
