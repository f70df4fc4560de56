# =============================================================================
# Command Registry
# =============================================================================
# Each command bundles its save validator, how its list becomes the
# candidate set, and the action run on the selected entry.

import subprocess
from dataclasses import dataclass, field
from typing import Callable

from .config_loader import DEFAULT_CONFIG
from .editor import launch_editor, resolve_editor
from .errors import Result
from .repo_expander import expand_repositories
from .tmux import Tmux, open_session
from .validators import is_readable_directory, is_readable_file_or_directory

PROG = "quickfuzz"


@dataclass
class ActionContext:
    """What an action needs beyond the selection."""
    config: dict = field(default_factory=lambda: DEFAULT_CONFIG)
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run
    environ: dict | None = None


@dataclass(frozen=True)
class Command:
    name: str
    summary: str
    action: Callable[[str, ActionContext], Result[None]]
    # Save gate over the resolved path, and what it demands in words
    validator: Callable[[str], bool]
    requirement: str
    candidates: Callable[[list[str]], list[str]] = list
    save_example: str = ""
    run_description: str = ""


def tmux_action(selection: str, context: ActionContext) -> Result[None]:
    tmux_cfg = context.config.get("tmux", {})
    tmux = Tmux(runner=context.runner, environ=context.environ)
    return open_session(
        tmux,
        selection,
        windows=tmux_cfg.get("windows") or DEFAULT_CONFIG["tmux"]["windows"],
        attach=tmux_cfg.get("attach", True),
    )


def edit_action(selection: str, context: ActionContext) -> Result[None]:
    editor = resolve_editor(context.config, environ=context.environ)
    return launch_editor(selection, editor, runner=context.runner)


COMMANDS: dict[str, Command] = {
    "tmux": Command(
        name="tmux",
        summary="open a tmux session for a git repository",
        action=tmux_action,
        validator=is_readable_directory,
        requirement="an existing, readable directory",
        candidates=expand_repositories,
        save_example=f"{PROG} tmux --save ~/src",
        run_description=(
            "Pick a git repository among the saved directories (a saved directory\n"
            "that is not a repository offers its repository subdirectories) and\n"
            "create or attach the tmux session named after it."
        ),
    ),
    "edit": Command(
        name="edit",
        summary="open a saved file or directory in $EDITOR",
        action=edit_action,
        validator=is_readable_file_or_directory,
        requirement="an existing, readable file or directory",
        save_example=f"{PROG} edit --save ~/.config/nvim/init.lua",
        run_description=(
            "Pick a saved file or directory and open it in the configured editor,\n"
            "started from the entry's directory."
        ),
    ),
}

OPTIONS = ("-h, --help", "-s, --save <value>", "-d, --delete", "-l, --list")


def command_usage(command: Command) -> str:
    return f"usage: {PROG} {command.name} [-h | -s <value> | -d | -l]"


def command_help(command: Command) -> str:
    return "\n".join([
        command_usage(command),
        "",
        f"{command.name}: {command.summary}",
        "",
        command.run_description,
        "",
        "options:",
        "  -h, --help          show this help",
        "  -s, --save <value>  validate and add <value> to the list",
        "  -d, --delete        pick an entry and remove it from the list",
        "  -l, --list          print the list, one entry per line",
        "",
        f"example: {command.save_example}",
    ]) + "\n"


def top_level_help(commands: dict[str, Command] = COMMANDS) -> str:
    width = max(len(name) for name in commands)
    lines = [
        f"usage: {PROG} <command> [options]",
        f"       {PROG} help <command>",
        "",
        "commands:",
    ]
    for name, command in commands.items():
        lines.append(f"  {name.ljust(width)}  {command.summary}")
    lines += ["", f"Run '{PROG} <command> --help' for command options."]
    return "\n".join(lines) + "\n"
