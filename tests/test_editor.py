import os

from conftest import RecordingRunner

from quickfuzz.editor import launch_editor, resolve_editor, working_directory_for


def always_found(binary):
    return f"/usr/bin/{binary}"


def never_found(binary):
    return None


def test_config_editor_wins():
    config = {"editor": {"command": "code --wait", "fallback": "vi"}}
    assert resolve_editor(config, {"EDITOR": "nano"}, which=always_found) == ["code", "--wait"]


def test_visual_before_editor():
    config = {"editor": {"command": "", "fallback": "vi"}}
    env = {"VISUAL": "nvim", "EDITOR": "nano"}
    assert resolve_editor(config, env, which=always_found) == ["nvim"]


def test_editor_env_used_when_visual_unset():
    config = {"editor": {"command": "", "fallback": "vi"}}
    assert resolve_editor(config, {"EDITOR": "nano -w"}, which=always_found) == ["nano", "-w"]


def test_fallback_when_nothing_resolves():
    config = {"editor": {"command": "ghost", "fallback": "vim"}}
    assert resolve_editor(config, {"EDITOR": "also-ghost"}, which=never_found) == ["vim"]
    assert resolve_editor({}, {}, which=never_found) == ["vi"]


def test_unparsable_choices_are_skipped():
    config = {"editor": {"command": "code '--wait", "fallback": "vi"}}
    env = {"VISUAL": "nvim \"", "EDITOR": "nano"}
    assert resolve_editor(config, env, which=always_found) == ["nano"]


def test_unusable_fallback_becomes_vi():
    assert resolve_editor({"editor": {"fallback": "   "}}, {}, which=never_found) == ["vi"]
    assert resolve_editor({"editor": {"fallback": "vim \""}}, {}, which=never_found) == ["vi"]


def test_empty_command_is_tool_error(tmp_path):
    result = launch_editor(str(tmp_path), [], runner=RecordingRunner())
    assert result.error.exit_code == 127


def test_working_directory_for(tmp_path):
    f = tmp_path / "notes.md"
    f.write_text("")
    assert working_directory_for(str(tmp_path)) == str(tmp_path)
    assert working_directory_for(str(f)) == str(tmp_path)


def test_editor_runs_from_file_directory_and_cwd_restored(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    target = project / "main.py"
    target.write_text("")
    runner = RecordingRunner()
    before = os.getcwd()

    result = launch_editor(str(target), ["nvim"], runner=runner)

    assert result.is_ok()
    assert runner.calls == [["nvim", str(target)]]
    assert os.path.samefile(runner.cwds[0], project)
    assert os.getcwd() == before


def test_editor_failure_propagates_status_and_restores_cwd(tmp_path):
    runner = RecordingRunner(returncodes={"nvim": 4})
    before = os.getcwd()

    result = launch_editor(str(tmp_path), ["nvim"], runner=runner)

    assert result.is_err()
    assert result.error.exit_code == 4
    assert os.path.samefile(runner.cwds[0], tmp_path)
    assert os.getcwd() == before


def test_missing_editor_binary(tmp_path):
    def runner(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    before = os.getcwd()
    result = launch_editor(str(tmp_path), ["ghost-editor"], runner=runner)
    assert result.error.exit_code == 127
    assert os.getcwd() == before
