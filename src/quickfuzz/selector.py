# =============================================================================
# Fuzzy Selector
# =============================================================================

import subprocess
from typing import Callable, Protocol, Sequence

from loguru import logger

from .errors import Result, tool_error

# fzf exit codes: 0 = selection, 1 = no match, 130 = aborted (Esc / Ctrl-C)
FZF_NO_MATCH = 1
FZF_ABORTED = 130


class Selector(Protocol):
    def choose(self, candidates: Sequence[str], prompt: str | None = None) -> Result[str | None]: ...


class FzfSelector:
    """Shell out to fzf: candidates on stdin, chosen line on stdout."""

    def __init__(
        self,
        command: str = "fzf",
        args: Sequence[str] = (),
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.command = command
        self.args = list(args)
        self.runner = runner

    def choose(self, candidates: Sequence[str], prompt: str | None = None) -> Result[str | None]:
        cmd = [self.command, *self.args]
        if prompt:
            cmd += ["--prompt", f"{prompt}> "]

        # Always run fzf, even with nothing to offer
        try:
            result = self.runner(
                cmd,
                input="".join(f"{c}\n" for c in candidates),
                stdout=subprocess.PIPE,
                text=True,
                check=False
            )
        except FileNotFoundError:
            logger.error(
                "Selector binary not found",
                operation="selector.choose",
                status="failed",
                selector=self.command
            )
            return tool_error(f"selector '{self.command}' not found on PATH", 127, selector=self.command)
        except OSError as e:
            return tool_error(f"cannot run selector '{self.command}': {e}", 126, selector=self.command)

        if result.returncode in (FZF_NO_MATCH, FZF_ABORTED):
            logger.debug(
                "Selection cancelled",
                operation="selector.choose",
                status="cancelled",
                return_code=result.returncode
            )
            return Result.ok(None)

        if result.returncode != 0:
            logger.error(
                "Selector failed",
                operation="selector.choose",
                status="failed",
                return_code=result.returncode
            )
            return tool_error(
                f"selector '{self.command}' exited with status {result.returncode}",
                result.returncode,
                selector=self.command
            )

        choice = (result.stdout or "").strip("\n")
        logger.debug(
            "Selection made",
            operation="selector.choose",
            status="success",
            choice=choice,
            metrics={"candidates": len(candidates)}
        )
        return Result.ok(choice or None)


class ScriptedSelector:
    """
    Deterministic selector for tests and non-interactive use.

    Each scripted answer is a string (picked if it is among the candidates,
    otherwise treated like an fzf no-match), an int index into the
    candidates, or None for cancel. Every candidate list shown is recorded.
    """

    def __init__(self, choices: Sequence[str | int | None] = ()):
        self.choices = list(choices)
        self.calls: list[list[str]] = []

    def choose(self, candidates: Sequence[str], prompt: str | None = None) -> Result[str | None]:
        self.calls.append(list(candidates))
        if not self.choices:
            return Result.ok(None)

        answer = self.choices.pop(0)
        if isinstance(answer, int):
            if 0 <= answer < len(candidates):
                return Result.ok(candidates[answer])
            return Result.ok(None)
        if answer in candidates:
            return Result.ok(answer)
        return Result.ok(None)
