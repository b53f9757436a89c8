from __future__ import annotations

import fcntl
import os
import signal
import sys
from contextlib import ExitStack
from typing import List, Mapping, NoReturn, Optional, Sequence, Tuple

from command import Dispatch, try_builtin
from config import ShellConfig
from errors import CannotExecute, FatalError, MicroshError, SpawnFailure, WaitFailure
from groups import Command, iter_blocks

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

Environment = Mapping[str, str]


# ---- Pipe endpoint handles ----

class PipeEnd:
    """Owning handle for one pipe descriptor. ``close()`` may be called twice."""

    def __init__(self, fd: int) -> None:
        self.fd: Optional[int] = fd

    @property
    def closed(self) -> bool:
        return self.fd is None

    def close(self) -> None:
        fd, self.fd = self.fd, None
        if fd is None:
            return
        try:
            os.close(fd)
        except OSError:
            pass

    def __enter__(self) -> "PipeEnd":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"PipeEnd({self.fd!r})"


class PipeEnds:
    def __init__(self, read: PipeEnd, write: PipeEnd) -> None:
        self.read = read
        self.write = write


def open_pipe() -> PipeEnds:
    try:
        r, w = os.pipe()
    except OSError as e:
        raise SpawnFailure(f"pipe: {e}") from e
    return PipeEnds(PipeEnd(r), PipeEnd(w))


# ---- Child side ----

def _child_report(message: str) -> None:
    # Python-level streams belong to the parent; write straight to fd 2
    try:
        os.write(2, f"{message}\n".encode(errors="replace"))
    except OSError:
        pass


def _restore_signals() -> None:
    # The interpreter ignores these; exec would carry that into the program
    for name in ("SIGPIPE", "SIGXFSZ"):
        sig = getattr(signal, name, None)
        if sig is not None:
            signal.signal(sig, signal.SIG_DFL)


def _rewire(stdin_end: Optional[PipeEnd], stdout_end: Optional[PipeEnd], owned: Sequence[PipeEnd]) -> None:
    # With a standard stream closed at startup a pipe end can sit on fd 0-2;
    # move it above them first so dup2 never lands on a descriptor still owned
    for end in owned:
        if end.fd < 3:
            low = end.fd
            end.fd = fcntl.fcntl(low, fcntl.F_DUPFD, 3)
            os.close(low)
    if stdin_end is not None:
        os.dup2(stdin_end.fd, 0)
    if stdout_end is not None:
        os.dup2(stdout_end.fd, 1)
    for end in owned:
        end.close()


def _execute(command: Command, env: Environment, search_path: bool) -> NoReturn:
    try:
        if search_path:
            os.execvpe(command.name, command.argv, env)
        else:
            os.execve(command.name, command.argv, env)
    except (OSError, ValueError):
        raise CannotExecute(command.name) from None


def _run_child(
    command: Command,
    env: Environment,
    stdin_end: Optional[PipeEnd],
    stdout_end: Optional[PipeEnd],
    owned: Sequence[PipeEnd],
    search_path: bool,
) -> NoReturn:
    """Body of a forked child. Never returns into the caller."""
    try:
        try:
            _rewire(stdin_end, stdout_end, owned)
        except OSError as e:
            raise SpawnFailure(f"dup2: {e}") from None
        _restore_signals()
        _execute(command, env, search_path)
    except MicroshError as e:
        _child_report(str(e))
    finally:
        os._exit(EXIT_FAILURE)


# ---- Parent side ----

def _fork() -> int:
    # Unflushed Python output would otherwise be written twice
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            stream.flush()
    try:
        return os.fork()
    except OSError as e:
        raise SpawnFailure(f"fork: {e}") from e


def _wait_all(pids: Sequence[int]) -> List[Tuple[int, int]]:
    reaped: List[Tuple[int, int]] = []
    for pid in pids:
        try:
            _, status = os.waitpid(pid, 0)
        except OSError as e:
            raise WaitFailure(f"waitpid {pid}: {e}") from e
        reaped.append((pid, status))
    return reaped


def run_block(
    commands: Sequence[Command],
    env: Environment,
    config: Optional[ShellConfig] = None,
) -> List[Tuple[int, int]]:
    """Run one block and wait for every process it started.

    A lone builtin runs in this process and nothing is spawned. Otherwise one
    child per command is forked; command ``i`` writes into the pipe read by
    command ``i + 1``. A pipe is opened just before forking its producer and
    the parent drops each end as soon as the child that needs it exists, so
    every write end lives only in its writer and readers see EOF.

    Returns ``(pid, wait_status)`` pairs in spawn order. Raises FatalError
    subclasses on pipe, fork or wait failure; children already forked are
    not waited for in that case.
    """
    if not commands:
        raise ValueError("run_block requires at least one command")
    config = config or ShellConfig()

    if len(commands) == 1 and try_builtin(commands[0]) is Dispatch.HANDLED:
        return []

    last = len(commands) - 1
    pids: List[int] = []
    with ExitStack() as stack:
        prev_read: Optional[PipeEnd] = None
        for i, cmd in enumerate(commands):
            ends: Optional[PipeEnds] = None
            if i < last:
                ends = open_pipe()
                stack.enter_context(ends.read)
                stack.enter_context(ends.write)

            stdout_end = ends.write if ends is not None else None
            pid = _fork()
            if pid == 0:
                owned = [prev_read] if prev_read is not None else []
                if ends is not None:
                    owned += [ends.read, ends.write]
                _run_child(cmd, env, prev_read, stdout_end, owned, config.search_path)
            pids.append(pid)

            if prev_read is not None:
                prev_read.close()
            if ends is not None:
                ends.write.close()
                prev_read = ends.read
            else:
                prev_read = None

    return _wait_all(pids)


def run(tokens: Sequence[str], env: Environment, config: Optional[ShellConfig] = None) -> int:
    """Execute every block in ``tokens`` in order.

    Command failures never stop the sequence and are not reflected in the
    result. A fatal engine condition prints ``error: fatal`` and returns
    EXIT_FAILURE at once, leaving later blocks unrun.
    """
    config = config or ShellConfig()
    try:
        for block in iter_blocks(tokens, config.max_commands):
            if block.is_empty:
                continue
            run_block(block.commands, env, config)
    except FatalError as e:
        if sys.stderr is not None:
            sys.stderr.write(f"{e}\n")
            sys.stderr.flush()
        return EXIT_FAILURE
    return EXIT_SUCCESS
