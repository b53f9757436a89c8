#!/usr/bin/env python3
"""Terminal-attached runs of microsh using pexpect"""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
MAIN = str(ROOT / "src" / "main.py")

# Try to import pexpect
try:
    import pexpect
    HAS_PEXPECT = True
except ImportError:
    HAS_PEXPECT = False
    pytestmark = pytest.mark.skip(reason="pexpect not installed")


@pytest.mark.skipif(not HAS_PEXPECT, reason="requires pexpect")
class TestOnTerminal:
    """Children inherit the terminal as stdin/stdout"""

    def test_output_reaches_terminal(self, tool):
        child = pexpect.spawn(sys.executable, [MAIN, tool("echo"), "on-tty"], timeout=10, cwd=str(ROOT))
        try:
            child.expect("on-tty")
            child.expect(pexpect.EOF)
            child.close()
            assert child.exitstatus == 0
        finally:
            if child.isalive():
                child.terminate(force=True)

    def test_first_stage_reads_terminal_until_eof(self, tool):
        child = pexpect.spawn(
            sys.executable,
            [MAIN, tool("cat"), "|", tool("tr"), "a-z", "A-Z", ";", tool("echo"), "next-block"],
            timeout=10,
            cwd=str(ROOT),
        )
        try:
            child.sendline("typed text")
            child.expect("TYPED TEXT")
            child.sendeof()
            child.expect("next-block")
            child.expect(pexpect.EOF)
            child.close()
            assert child.exitstatus == 0
        finally:
            if child.isalive():
                child.terminate(force=True)

    def test_cannot_execute_message(self):
        child = pexpect.spawn(sys.executable, [MAIN, "/no/such/tool"], timeout=10, cwd=str(ROOT))
        try:
            child.expect("error: cannot execute /no/such/tool")
            child.expect(pexpect.EOF)
            child.close()
            assert child.exitstatus == 0
        finally:
            if child.isalive():
                child.terminate(force=True)
