import os
import shutil
import sys
from pathlib import Path
import pytest

# Ensure we can import modules from src/ at collection time
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture()
def sandbox(tmp_path, monkeypatch):
    # Work in an isolated temp directory; monkeypatch restores the cwd
    monkeypatch.chdir(tmp_path)
    # Prune environment to a minimal safe set
    safe_env = {
        "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
        "HOME": str(tmp_path),
        "LANG": os.environ.get("LANG", "C"),
        "LC_ALL": os.environ.get("LC_ALL", "C"),
    }
    monkeypatch.delenv("MICROSH_MAX_COMMANDS", raising=False)
    monkeypatch.delenv("MICROSH_SEARCH_PATH", raising=False)
    return tmp_path, safe_env


@pytest.fixture()
def env(sandbox):
    return sandbox[1]


@pytest.fixture()
def tool():
    """Resolve a program to an absolute path, skipping the test if absent."""
    def resolve(name: str) -> str:
        path = shutil.which(name)
        if path is None:
            pytest.skip(f"{name} not available")
        return path
    return resolve
