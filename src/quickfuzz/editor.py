# =============================================================================
# Editor Launch
# =============================================================================

import os
import shlex
import shutil
import subprocess
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping

from loguru import logger

from .errors import Result, tool_error

SAFE_EDITOR = "vi"


def resolve_editor(
    config: dict,
    environ: Mapping[str, str] | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> list[str]:
    """
    Pick the editor command line.

    Resolution order:
    1. [editor].command from config
    2. $VISUAL
    3. $EDITOR
    4. [editor].fallback (vi when unset)

    A choice that does not parse as a shell word list, or whose binary is
    not on PATH, is skipped with a warning.
    """
    environ = os.environ if environ is None else environ
    editor_cfg = config.get("editor", {})
    fallback = editor_cfg.get("fallback") or SAFE_EDITOR

    for source, command in (
        ("config", editor_cfg.get("command")),
        ("VISUAL", environ.get("VISUAL")),
        ("EDITOR", environ.get("EDITOR")),
    ):
        if not command:
            continue
        try:
            argv = shlex.split(command)
        except ValueError as e:
            logger.warning(
                "Editor command unparsable - trying next choice",
                operation="resolve_editor",
                source=source,
                configured_command=command,
                error=str(e)
            )
            continue
        if argv and which(argv[0]):
            return argv
        logger.warning(
            "Editor not found - trying next choice",
            operation="resolve_editor",
            source=source,
            configured_command=command
        )

    try:
        argv = shlex.split(fallback)
    except ValueError:
        argv = []
    if not argv:
        logger.warning(
            "Editor fallback unusable - using safe editor",
            operation="resolve_editor",
            configured_fallback=fallback,
            safe_editor=SAFE_EDITOR
        )
        return [SAFE_EDITOR]
    return argv


def working_directory_for(path: str) -> str:
    """The path itself for a directory, otherwise its containing directory."""
    if os.path.isdir(path):
        return path
    return os.path.dirname(path) or "."


@contextmanager
def working_directory(path: str) -> Iterator[str]:
    """chdir into path, restoring the previous directory on every exit path."""
    previous = os.getcwd()
    os.chdir(path)
    try:
        yield path
    finally:
        os.chdir(previous)


def launch_editor(
    path: str,
    command: list[str],
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> Result[None]:
    """Run the editor on path from inside the path's directory."""
    if not command:
        return tool_error("no editor command configured", 127, path=path)
    cmd = [*command, path]
    cwd = working_directory_for(path)

    try:
        with working_directory(cwd):
            logger.info(
                "Launching editor",
                operation="launch_editor",
                status="started",
                editor=command[0],
                path=path,
                cwd=cwd
            )
            result = runner(cmd, check=False)
    except FileNotFoundError as e:
        if e.filename == cwd:
            return tool_error(f"cannot enter directory {cwd}: {e.strerror}", 1, path=path)
        return tool_error(f"editor '{command[0]}' not found on PATH", 127, editor=command[0])
    except OSError as e:
        return tool_error(f"cannot launch editor '{command[0]}': {e}", 126, editor=command[0])

    if result.returncode != 0:
        logger.warning(
            "Editor exited with failure",
            operation="launch_editor",
            status="failed",
            editor=command[0],
            return_code=result.returncode
        )
        return tool_error(
            f"editor '{command[0]}' exited with status {result.returncode}",
            result.returncode,
            editor=command[0]
        )
    return Result.ok()
