from conftest import RecordingRunner

from quickfuzz.errors import ErrorType
from quickfuzz.tmux import Tmux, open_session, session_name_for


def test_session_name_is_final_segment():
    assert session_name_for("/home/u/proj") == "proj"
    assert session_name_for("/home/u/proj/") == "proj"


def test_session_name_replaces_tmux_separators():
    assert session_name_for("/src/my.site:v2") == "my_site_v2"


def test_new_session_gets_three_windows_and_first_selected():
    runner = RecordingRunner(returncodes={"has-session": 1})
    tmux = Tmux(runner=runner, environ={})

    result = open_session(tmux, "/home/u/proj", attach=False)

    assert result.is_ok()
    assert runner.calls == [
        ["tmux", "has-session", "-t", "=proj"],
        ["tmux", "new-session", "-d", "-s", "proj", "-n", "editor", "-c", "/home/u/proj"],
        ["tmux", "new-window", "-t", "=proj:", "-n", "shell", "-c", "/home/u/proj"],
        ["tmux", "new-window", "-t", "=proj:", "-n", "vcs", "-c", "/home/u/proj"],
        ["tmux", "select-window", "-t", "=proj:editor"],
    ]


def test_existing_session_is_reused():
    runner = RecordingRunner()
    tmux = Tmux(runner=runner, environ={})

    assert open_session(tmux, "/home/u/proj", attach=False).is_ok()
    assert runner.subcommands() == ["has-session"]


def test_attach_outside_tmux():
    runner = RecordingRunner()
    open_session(Tmux(runner=runner, environ={}), "/src/app")
    assert runner.calls[-1] == ["tmux", "attach-session", "-t", "=app"]
    assert "capture_output" not in runner.kwargs[-1]


def test_switch_client_inside_tmux():
    runner = RecordingRunner()
    open_session(Tmux(runner=runner, environ={"TMUX": "/tmp/tmux-1000/default,1,0"}), "/src/app")
    assert runner.calls[-1] == ["tmux", "switch-client", "-t", "=app"]


def test_creation_failure_propagates_tool_status():
    runner = RecordingRunner(returncodes={"has-session": 1, "new-window": 3})
    result = open_session(Tmux(runner=runner, environ={}), "/src/app")

    assert result.error.error_type is ErrorType.EXTERNAL_TOOL_ERROR
    assert result.error.exit_code == 3
    assert runner.subcommands() == ["has-session", "new-session", "new-window"]


def test_custom_window_names():
    runner = RecordingRunner(returncodes={"has-session": 1})
    open_session(Tmux(runner=runner, environ={}), "/src/app", windows=["nvim", "zsh"], attach=False)
    assert runner.calls[-1] == ["tmux", "select-window", "-t", "=app:nvim"]
    assert runner.subcommands().count("new-window") == 1
