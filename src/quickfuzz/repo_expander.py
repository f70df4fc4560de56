# =============================================================================
# Git Repository Expansion
# =============================================================================

import os
import time
from pathlib import Path
from uuid import uuid4

from loguru import logger


def is_repository_root(path: Path) -> bool:
    """
    True when path is the top of a git working tree.

    .git is a directory for normal clones and a file for linked
    worktrees and submodules; both count.
    """
    try:
        return (path / ".git").exists()
    except PermissionError:
        return False


def expand_repositories(directories: list[str]) -> list[str]:
    """
    Turn saved directories into the repository roots offered for selection.

    A saved directory that is itself a repository is kept as-is. Otherwise
    its immediate subdirectories that are repositories replace it, in
    lexical order. Anything else contributes nothing.

    Args:
        directories: Saved directories, in stored order

    Returns:
        Candidate directories, in expansion order
    """
    start_time = time.perf_counter()
    op_trace_id = str(uuid4())
    candidates = []

    logger.debug(
        "Starting repository expansion",
        operation="expand_repositories",
        status="started",
        trace_id=op_trace_id,
        metrics={"directories": len(directories)}
    )

    for directory in directories:
        base_dir = Path(directory)
        if not base_dir.is_dir():
            logger.debug(
                "Saved directory does not exist",
                operation="expand_repositories",
                trace_id=op_trace_id,
                directory=directory
            )
            continue

        if is_repository_root(base_dir):
            candidates.append(directory)
            continue

        try:
            children = sorted(base_dir.iterdir())
        except OSError as e:
            logger.warning(
                "Cannot list saved directory",
                operation="expand_repositories",
                status="skip",
                trace_id=op_trace_id,
                directory=directory,
                error=str(e)
            )
            continue

        for child in children:
            # os.path.isdir swallows EACCES on children that cannot be stat'ed
            if os.path.isdir(child) and is_repository_root(child):
                candidates.append(str(child))

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.debug(
        "Repository expansion complete",
        operation="expand_repositories",
        status="success",
        trace_id=op_trace_id,
        metrics={"candidates": len(candidates), "duration_ms": duration_ms}
    )

    return candidates
