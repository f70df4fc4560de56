"""
quickfuzz - fuzzy launcher over per-command lists of paths.

Usage:
    quickfuzz <command>                  # pick an entry and run the command's action
    quickfuzz <command> --save <value>   # validate and add an entry
    quickfuzz <command> --delete         # pick an entry and remove it
    quickfuzz <command> --list           # print the list
    quickfuzz <command> --help
    quickfuzz help <command>

Flow of one invocation:
1. Parse arguments into one of Help / Save / Delete / List / Run
2. Save: resolve + validate, then append to the command's list
3. Delete: select over the whole list, remove the exact choice
4. Run: list -> candidates (repository expansion for tmux) -> fzf -> action

Lists live in <user data dir>/quickfuzz/<command>.list, one path per line.
"""

import subprocess
import sys
from typing import Callable, TextIO
from uuid import uuid4

from loguru import logger

from .commands import COMMANDS, OPTIONS, PROG, ActionContext, Command, command_help, top_level_help
from .config_loader import DEFAULT_CONFIG, data_dir_from, load_config
from .errors import Error, ErrorReport, Result, usage_error
from .list_store import FileListStore, ListStore
from .logging_config import setup_logger, trace_id_var
from .selector import FzfSelector, Selector
from .validators import validate

HELP_FLAGS = ("-h", "--help")
SAVE_FLAGS = ("-s", "--save")
DELETE_FLAGS = ("-d", "--delete")
LIST_FLAGS = ("-l", "--list")


class Dispatcher:
    """Routes one argument vector to the store, selector and command actions."""

    def __init__(
        self,
        store: ListStore,
        selector: Selector,
        commands: dict[str, Command] = COMMANDS,
        config: dict | None = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        environ: dict | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ):
        self.store = store
        self.selector = selector
        self.commands = commands
        self.context = ActionContext(
            config=config or DEFAULT_CONFIG,
            runner=runner,
            environ=environ,
        )
        self.stdout = stdout
        self.stderr = stderr
        self.report = ErrorReport()

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def _out(self, text: str) -> None:
        (self.stdout or sys.stdout).write(text)

    def _fail(self, result: Result, command: Command | None = None) -> int:
        """Report a failed Result on stderr and return its exit status."""
        error: Error = result.error
        self.report.add_error(error)
        prefix = f"{PROG}: {command.name}: " if command else f"{PROG}: "
        # Storage and tool failures carry no example of their own
        example = error.example or (f"{PROG} {command.name} --help" if command else f"{PROG} --help")
        stream = self.stderr or sys.stderr
        stream.write(f"{prefix}{error.message}\n")
        stream.write(f"usage example: {example}\n")
        return error.exit_code

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def _valid_commands(self) -> str:
        return ", ".join(self.commands)

    def dispatch(self, argv: list[str]) -> int:
        trace_id = str(uuid4())
        token = trace_id_var.set(trace_id)
        self.report = ErrorReport()
        try:
            logger.debug(
                "Dispatch started",
                operation="dispatch",
                status="started",
                trace_id=trace_id,
                argv=list(argv)
            )
            code = self._dispatch(list(argv))
            self.report.log_summary(trace_id)
            return code
        finally:
            trace_id_var.reset(token)

    def _dispatch(self, argv: list[str]) -> int:
        if not argv or (argv[0] in HELP_FLAGS and len(argv) == 1):
            self._out(top_level_help(self.commands))
            return 0

        head, rest = argv[0], argv[1:]

        if head == "help":
            if not rest:
                self._out(top_level_help(self.commands))
                return 0
            if len(rest) > 1:
                return self._fail(usage_error(
                    f"help takes one command, got: {' '.join(rest)}",
                    example=f"{PROG} help tmux"
                ))
            if rest[0] not in self.commands:
                return self._fail(usage_error(
                    f"unknown command '{rest[0]}' (valid commands: {self._valid_commands()})",
                    example=f"{PROG} help {next(iter(self.commands))}",
                    command=rest[0]
                ))
            self._out(command_help(self.commands[rest[0]]))
            return 0

        if head not in self.commands:
            return self._fail(usage_error(
                f"unknown command '{head}' (valid commands: {self._valid_commands()})",
                example=f"{PROG} {next(iter(self.commands))} --list",
                command=head
            ))

        command = self.commands[head]
        if not rest:
            return self.run_command(command)

        option, args = rest[0], rest[1:]

        # --save=value form
        if option.startswith("--save="):
            option, args = "--save", [option[len("--save="):], *args]

        if option in SAVE_FLAGS:
            if len(args) != 1:
                problem = "missing value" if not args else f"expected one value, got {len(args)}"
                return self._fail(usage_error(
                    f"{option}: {problem}",
                    example=command.save_example,
                    option=option
                ), command)
            return self.save_entry(command, args[0])

        if option in HELP_FLAGS + DELETE_FLAGS + LIST_FLAGS and args:
            return self._fail(usage_error(
                f"{option} takes no arguments, got: {' '.join(args)}",
                example=f"{PROG} {command.name} {option}",
                option=option
            ), command)

        if option in HELP_FLAGS:
            self._out(command_help(command))
            return 0
        if option in DELETE_FLAGS:
            return self.delete_entry(command)
        if option in LIST_FLAGS:
            return self.list_entries(command)

        return self._fail(usage_error(
            f"unknown option '{option}' (valid options: {'; '.join(OPTIONS)})",
            example=f"{PROG} {command.name} --help",
            option=option
        ), command)

    # -------------------------------------------------------------------------
    # States
    # -------------------------------------------------------------------------

    def save_entry(self, command: Command, value: str) -> int:
        validated = validate(command, value)
        if validated.is_err():
            return self._fail(validated, command)

        appended = self.store.append(command.name, validated.value)
        if appended.is_err():
            return self._fail(appended, command)
        return 0

    def list_entries(self, command: Command) -> int:
        entries = self._entries(command)
        if entries.is_err():
            return self._fail(entries, command)
        self._out("".join(f"{entry}\n" for entry in entries.value))
        return 0

    def delete_entry(self, command: Command) -> int:
        entries = self._entries(command)
        if entries.is_err():
            return self._fail(entries, command)

        chosen = self.selector.choose(entries.value, prompt=f"{command.name} delete")
        if chosen.is_err():
            return self._fail(chosen, command)
        if chosen.value is None:
            logger.info(
                "Delete cancelled",
                operation="delete",
                status="cancelled",
                command=command.name
            )
            return 0

        removed = self.store.remove(command.name, chosen.value)
        if removed.is_err():
            return self._fail(removed, command)
        return 0

    def run_command(self, command: Command) -> int:
        entries = self._entries(command)
        if entries.is_err():
            return self._fail(entries, command)

        candidates = command.candidates(entries.value)
        chosen = self.selector.choose(candidates, prompt=command.name)
        if chosen.is_err():
            return self._fail(chosen, command)
        if chosen.value is None:
            logger.info(
                "Nothing selected",
                operation="run",
                status="cancelled",
                command=command.name,
                metrics={"candidates": len(candidates)}
            )
            return 0

        logger.info(
            "Running action",
            operation="run",
            status="started",
            command=command.name,
            selection=chosen.value
        )
        acted = command.action(chosen.value, self.context)
        if acted.is_err():
            return self._fail(acted, command)
        return 0

    def _entries(self, command: Command) -> Result[list[str]]:
        ensured = self.store.ensure(command.name)
        if ensured.is_err():
            return ensured
        return self.store.read(command.name)


def main(argv: list[str] | None = None) -> None:
    """Console entry point."""
    setup_logger()
    argv = sys.argv[1:] if argv is None else argv

    loaded = load_config()
    if loaded.is_err():
        sys.stderr.write(f"{PROG}: {loaded.error.message} (using defaults)\n")
        config = DEFAULT_CONFIG
    else:
        config = loaded.value

    selector_cfg = config.get("selector", {})
    dispatcher = Dispatcher(
        store=FileListStore(data_dir_from(config)),
        selector=FzfSelector(
            command=selector_cfg.get("command") or "fzf",
            args=selector_cfg.get("args", []),
        ),
        config=config,
    )

    try:
        code = dispatcher.dispatch(argv)
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
