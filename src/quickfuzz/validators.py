# =============================================================================
# Save Validation
# =============================================================================
# Predicates are attached to each Command in the registry (commands.py);
# validate() only resolves the candidate and applies the command's own check.

import os
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from .errors import Error, ErrorType, Result, usage_error

if TYPE_CHECKING:
    from .commands import Command


def resolve_path(candidate: str) -> str:
    """Expand ~, make absolute and resolve symlinks."""
    return str(Path(candidate).expanduser().resolve())


def is_readable_directory(path: str) -> bool:
    return os.path.isdir(path) and os.access(path, os.R_OK | os.X_OK)


def is_readable_file_or_directory(path: str) -> bool:
    if os.path.isfile(path):
        return os.access(path, os.R_OK)
    return is_readable_directory(path)


def validate(command: "Command", candidate: str) -> Result[str]:
    """
    Resolve a candidate and check it against the command's predicate.

    Args:
        command: Registry record carrying validator, requirement and save_example
        candidate: Value given to --save, possibly relative or with ~

    Returns:
        Result[str]: Ok with the canonical absolute path, or Err
    """
    # Path("") resolves to the cwd; an empty value is a missing value
    if not candidate.strip():
        return usage_error(
            "--save: missing value",
            example=command.save_example,
            command=command.name
        )

    try:
        resolved = resolve_path(candidate)
    except (OSError, RuntimeError) as e:
        # RuntimeError: symlink loop on older interpreters
        resolved = None
        reason = str(e)
    else:
        reason = None

    if resolved is not None and command.validator(resolved):
        logger.debug(
            "Candidate accepted",
            operation="validate",
            status="success",
            command=command.name,
            candidate=candidate,
            resolved=resolved
        )
        return Result.ok(resolved)

    logger.info(
        "Candidate rejected",
        operation="validate",
        status="rejected",
        command=command.name,
        candidate=candidate,
        resolved=resolved,
        reason=reason
    )
    return Result.err(Error(
        error_type=ErrorType.VALIDATION_ERROR,
        message=f"'{resolved or candidate}' is not {command.requirement}",
        context={"command": command.name, "candidate": candidate},
        example=command.save_example
    ))
