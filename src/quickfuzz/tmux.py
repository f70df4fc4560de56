# =============================================================================
# tmux Session Setup
# =============================================================================

import os
import subprocess
from pathlib import Path
from typing import Callable, Mapping, Sequence

from loguru import logger

from .errors import Result, tool_error

DEFAULT_WINDOWS = ("editor", "shell", "vcs")


def session_name_for(path: str) -> str:
    """
    Session name derived from the final path segment.

    tmux rejects '.' and ':' in session names (they are target separators).
    """
    name = Path(path.rstrip("/")).name or "root"
    return name.replace(".", "_").replace(":", "_")


class Tmux:
    """Thin wrapper over the tmux CLI."""

    def __init__(
        self,
        binary: str = "tmux",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        environ: Mapping[str, str] | None = None,
    ):
        self.binary = binary
        self.runner = runner
        self.environ = os.environ if environ is None else environ

    def _run(self, args: list[str], interactive: bool = False) -> Result[None]:
        cmd = [self.binary, *args]
        try:
            if interactive:
                result = self.runner(cmd, check=False)
            else:
                result = self.runner(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError:
            return tool_error(f"'{self.binary}' not found on PATH", 127, tmux_args=args)
        except OSError as e:
            return tool_error(f"cannot run '{self.binary}': {e}", 126, tmux_args=args)

        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            logger.error(
                "tmux command failed",
                operation="tmux",
                status="failed",
                tmux_args=args,
                return_code=result.returncode,
                stderr=detail
            )
            message = f"tmux {args[0]} failed with status {result.returncode}"
            if detail:
                message += f": {detail}"
            return tool_error(message, result.returncode, tmux_args=args)
        return Result.ok()

    def has_session(self, name: str) -> bool:
        # "=" forces an exact match instead of tmux's prefix matching
        return self._run(["has-session", "-t", f"={name}"]).is_ok()

    def create_session(self, name: str, directory: str, windows: Sequence[str]) -> Result[None]:
        first, *rest = windows
        created = self._run(["new-session", "-d", "-s", name, "-n", first, "-c", directory])
        if created.is_err():
            return created
        for window in rest:
            added = self._run(["new-window", "-t", f"={name}:", "-n", window, "-c", directory])
            if added.is_err():
                return added
        return Result.ok()

    def select_window(self, name: str, window: str) -> Result[None]:
        return self._run(["select-window", "-t", f"={name}:{window}"])

    def attach(self, name: str) -> Result[None]:
        if self.environ.get("TMUX"):
            return self._run(["switch-client", "-t", f"={name}"], interactive=True)
        return self._run(["attach-session", "-t", f"={name}"], interactive=True)


def open_session(
    tmux: Tmux,
    path: str,
    windows: Sequence[str] = DEFAULT_WINDOWS,
    attach: bool = True,
) -> Result[None]:
    """
    Create (if missing) and optionally attach the session for a directory.

    A new session gets one window per entry of windows, all rooted at path,
    with the first window selected. An existing session is reused untouched.
    """
    windows = list(windows) or list(DEFAULT_WINDOWS)
    name = session_name_for(path)

    if tmux.has_session(name):
        logger.info(
            "Reusing existing session",
            operation="open_session",
            status="exists",
            session=name,
            directory=path
        )
    else:
        created = tmux.create_session(name, path, windows)
        if created.is_err():
            return created
        selected = tmux.select_window(name, windows[0])
        if selected.is_err():
            return selected
        logger.info(
            "Session created",
            operation="open_session",
            status="created",
            session=name,
            directory=path,
            metrics={"windows": len(windows)}
        )

    if attach:
        return tmux.attach(name)
    return Result.ok()
