import os
import subprocess
from pathlib import Path

import pytest

from quickfuzz.list_store import FileListStore


class RecordingRunner:
    """subprocess.run stand-in that records calls instead of spawning."""

    def __init__(self, returncodes: dict[str, int] | None = None, stdout: str = ""):
        # keyed by the first argument after the binary (e.g. "has-session")
        self.returncodes = returncodes or {}
        self.stdout = stdout
        self.calls: list[list[str]] = []
        self.kwargs: list[dict] = []
        self.cwds: list[str] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        self.cwds.append(os.getcwd())
        key = cmd[1] if len(cmd) > 1 else cmd[0]
        code = self.returncodes.get(key, self.returncodes.get(cmd[0], 0))
        return subprocess.CompletedProcess(cmd, code, stdout=self.stdout, stderr="")

    def subcommands(self) -> list[str]:
        return [call[1] for call in self.calls]


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def store(tmp_path):
    return FileListStore(tmp_path / "data")


@pytest.fixture
def make_repo(tmp_path):
    """Create a directory with a .git marker; returns its resolved path."""

    def _make(relative: str, git: bool = True) -> Path:
        path = tmp_path / relative
        path.mkdir(parents=True, exist_ok=True)
        if git:
            (path / ".git").mkdir(exist_ok=True)
        return path.resolve()

    return _make
