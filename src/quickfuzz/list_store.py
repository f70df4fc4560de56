# =============================================================================
# Per-Command List Storage
# =============================================================================
# One newline-delimited file per command: <data_dir>/<command>.list
# No locking - concurrent invocations against the same command are racy.

import errno
import os
import tempfile
from pathlib import Path
from typing import Protocol

from loguru import logger

from .errors import Error, ErrorType, Result

LIST_SUFFIX = ".list"


class ListStore(Protocol):
    def ensure(self, command: str) -> Result[None]: ...

    def read(self, command: str) -> Result[list[str]]: ...

    def append(self, command: str, value: str) -> Result[bool]: ...

    def remove(self, command: str, value: str) -> Result[int]: ...


def atomic_write_file(path: Path, content: str) -> None:
    """
    Write file atomically using temp file → fsync → rename pattern.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: If write fails (including disk full - errno.ENOSPC)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in same directory (for atomic rename)
    temp_fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp"
    )

    try:
        with os.fdopen(temp_fd, "w") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.replace(temp_path, path)

        logger.debug(
            "Atomic file write successful",
            operation="atomic_write_file",
            path=str(path)
        )

    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass

        if e.errno == errno.ENOSPC:
            raise OSError(errno.ENOSPC, f"Disk full - cannot write to {path}") from e
        raise


def _storage_error(command: str, path: Path, action: str, exc: OSError) -> Result:
    logger.error(
        "List storage failure",
        operation=f"list_store.{action}",
        status="failed",
        command=command,
        path=str(path),
        error=str(exc)
    )
    return Result.err(Error(
        error_type=ErrorType.STORAGE_ERROR,
        message=f"cannot {action} list file {path}: {exc.strerror or exc}",
        context={"command": command, "path": str(path)},
        original_exception=exc
    ))


def _render(entries: list[str]) -> str:
    return "".join(f"{entry}\n" for entry in entries)


class FileListStore:
    """Durable list store, one plain-text file per command."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def path_for(self, command: str) -> Path:
        return self.data_dir / f"{command}{LIST_SUFFIX}"

    def ensure(self, command: str) -> Result[None]:
        path = self.path_for(command)
        if path.is_file():
            return Result.ok()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # "a" never truncates a file created between the check and here
            with open(path, "a"):
                pass
        except OSError as e:
            return _storage_error(command, path, "create", e)

        logger.debug(
            "Created empty list",
            operation="list_store.ensure",
            status="created",
            command=command,
            path=str(path)
        )
        return Result.ok()

    def read(self, command: str) -> Result[list[str]]:
        path = self.path_for(command)
        try:
            with open(path, "r") as f:
                # Blank lines in a hand-edited file are not entries
                entries = [line.rstrip("\n") for line in f if line.strip()]
        except FileNotFoundError:
            entries = []
        except OSError as e:
            return _storage_error(command, path, "read", e)
        return Result.ok(entries)

    def append(self, command: str, value: str) -> Result[bool]:
        path = self.path_for(command)
        current = self.read(command)
        if current.is_err():
            return current
        if value in current.value:
            logger.debug(
                "Entry already present",
                operation="list_store.append",
                status="unchanged",
                command=command,
                value=value
            )
            return Result.ok(False)

        try:
            atomic_write_file(path, _render([*current.value, value]))
        except OSError as e:
            return _storage_error(command, path, "write", e)

        logger.info(
            "Entry saved",
            operation="list_store.append",
            status="success",
            command=command,
            value=value,
            metrics={"entries": len(current.value) + 1}
        )
        return Result.ok(True)

    def remove(self, command: str, value: str) -> Result[int]:
        if not value:
            return Result.ok(0)

        path = self.path_for(command)
        current = self.read(command)
        if current.is_err():
            return current

        kept = [entry for entry in current.value if entry != value]
        removed = len(current.value) - len(kept)
        if removed == 0:
            return Result.ok(0)

        try:
            atomic_write_file(path, _render(kept))
        except OSError as e:
            return _storage_error(command, path, "write", e)

        logger.info(
            "Entry deleted",
            operation="list_store.remove",
            status="success",
            command=command,
            value=value,
            metrics={"removed": removed, "entries": len(kept)}
        )
        return Result.ok(removed)


class MemoryListStore:
    """In-process list store with the same semantics as FileListStore."""

    def __init__(self, lists: dict[str, list[str]] | None = None):
        self.lists: dict[str, list[str]] = {
            command: list(entries) for command, entries in (lists or {}).items()
        }

    def ensure(self, command: str) -> Result[None]:
        self.lists.setdefault(command, [])
        return Result.ok()

    def read(self, command: str) -> Result[list[str]]:
        return Result.ok(list(self.lists.get(command, [])))

    def append(self, command: str, value: str) -> Result[bool]:
        entries = self.lists.setdefault(command, [])
        if value in entries:
            return Result.ok(False)
        entries.append(value)
        return Result.ok(True)

    def remove(self, command: str, value: str) -> Result[int]:
        if not value:
            return Result.ok(0)
        entries = self.lists.get(command, [])
        kept = [entry for entry in entries if entry != value]
        self.lists[command] = kept
        return Result.ok(len(entries) - len(kept))
