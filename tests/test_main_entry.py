import json

import pytest
from loguru import logger

from quickfuzz import logging_config
from quickfuzz.main import main


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("QUICKFUZZ_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("QUICKFUZZ_CONFIG", str(tmp_path / "absent.toml"))
    monkeypatch.delenv("QUICKFUZZ_LOG_LEVEL", raising=False)
    monkeypatch.setattr(
        logging_config.platformdirs,
        "user_log_dir",
        lambda appname, ensure_exists=False: str(tmp_path / "logs"),
    )
    yield tmp_path
    logger.remove()


def test_list_through_console_entry(isolated_env, capsys):
    project = isolated_env / "project"
    project.mkdir()

    with pytest.raises(SystemExit) as saved:
        main(["tmux", "--save", str(project)])
    assert saved.value.code == 0

    with pytest.raises(SystemExit) as listed:
        main(["tmux", "--list"])
    assert listed.value.code == 0
    assert capsys.readouterr().out == f"{project.resolve()}\n"
    assert (isolated_env / "data" / "tmux.list").is_file()


def test_unknown_command_exit_status(isolated_env, capsys):
    with pytest.raises(SystemExit) as exited:
        main(["vim"])
    assert exited.value.code == 1
    assert "valid commands" in capsys.readouterr().err


def test_console_sink_writes_jsonl(isolated_env, capsys):
    logging_config.setup_logger("info")
    logger.info("List printed", operation="list", status="success", command="tmux")

    line = capsys.readouterr().err.strip().splitlines()[-1]
    entry = json.loads(line)
    assert entry["message"] == "List printed"
    assert entry["operation"] == "list"
    assert entry["operation_status"] == "success"
    assert entry["context"] == {"command": "tmux"}
