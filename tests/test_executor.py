import os

import pytest

from minishell.environment import from_environ
from minishell.executor import (
    count_blocks,
    execute,
    is_only_redirection,
    run_single_builtin,
)
from minishell.state import ShellExit, ShellState


@pytest.fixture
def state():
    path = os.environ.get("PATH", "/usr/bin:/bin")
    env = [entry for entry in from_environ(os.environ) if not entry.startswith("PATH=")]
    env.append(f"PATH=/nonexistent-dir:{path}")
    return ShellState(env=env)


@pytest.mark.parametrize(
    "table, expected",
    [
        ([], 0),
        ([["ls"]], 1),
        ([["ls", "-l"], ["|"], ["wc"]], 2),
        ([[">", "f"], ["|"], ["cat"]], 2),
        ([["|"], ["ls"]], 1),
        ([["a"], ["|"], ["b"], ["|"], ["c"]], 3),
    ],
)
def test_count_blocks(table, expected):
    assert count_blocks(table) == expected


def test_is_only_redirection_true_for_redirections():
    assert is_only_redirection([[">", "f"], ["<", "g"]]) is True


def test_is_only_redirection_false_with_command():
    assert is_only_redirection([[">", "f"], ["ls"]]) is False


def test_is_only_redirection_checks_first_stage_only():
    assert is_only_redirection([[">", "f"], ["|"], ["ls"]]) is True


def test_run_single_builtin_echo(state, capfd):
    state.table = [["echo", "hi"]]
    assert run_single_builtin(state) is True
    assert capfd.readouterr().out == "hi\n"


def test_run_single_builtin_not_builtin(state):
    state.table = [["ls"]]
    assert run_single_builtin(state) is False
    assert state.fd_in_child is None


def test_run_single_builtin_output_redirect(state, tmp_path, capfd):
    target = tmp_path / "out.txt"
    state.table = [[">", str(target)], ["echo", "hello"]]
    assert run_single_builtin(state) is True
    assert target.read_text() == "hello\n"
    assert state.fd_out_child is None
    assert capfd.readouterr().out == ""


def test_run_single_builtin_failed_redirection(state, tmp_path, capfd):
    state.table = [["<", str(tmp_path / "missing")], ["echo", "x"]]
    assert run_single_builtin(state) is True
    assert state.exit_status == 127
    assert capfd.readouterr().out == ""


def test_run_single_builtin_restores_quoted_operator(state, capfd):
    state.table = [["echo", ";>"]]
    run_single_builtin(state)
    assert capfd.readouterr().out == ">\n"


def test_run_single_builtin_export_changes_state(state):
    state.table = [["export", "FOO=bar"]]
    run_single_builtin(state)
    assert "FOO=bar" in state.env


def test_execute_external_status(state):
    state.table = [["sh", "-c", "exit 3"]]
    execute(state)
    assert state.exit_status == 3
    assert state.table == []
    assert state.saved_streams is None


def test_execute_external_output_redirect(state, tmp_path):
    target = tmp_path / "f"
    state.table = [[">", str(target)], ["sh", "-c", "echo out"]]
    execute(state)
    assert target.read_text() == "out\n"
    assert state.exit_status == 0


def test_execute_external_pipeline(state, tmp_path):
    target = tmp_path / "f"
    state.table = [["printf", "abc"], ["|"], [">", str(target)], ["tr", "a-z", "A-Z"]]
    execute(state)
    assert target.read_text() == "ABC"


def test_execute_builtin_in_pipeline(state, tmp_path):
    target = tmp_path / "f"
    state.table = [["echo", "hi"], ["|"], [">", str(target)], ["cat"]]
    execute(state)
    assert target.read_text() == "hi\n"


def test_execute_command_not_found(state, capfd):
    state.table = [["definitely-not-a-command-xyz"]]
    execute(state)
    assert state.exit_status == 127
    assert "command not found" in capfd.readouterr().err


def test_execute_directory(state, tmp_path, capfd):
    state.table = [[str(tmp_path)]]
    execute(state)
    assert state.exit_status == 126
    assert "Is a directory" in capfd.readouterr().err


def test_execute_exit_raises(state):
    state.table = [["exit", "5"]]
    with pytest.raises(ShellExit) as info:
        execute(state)
    assert info.value.status == 5
    assert state.saved_streams is None


def test_execute_exit_in_pipeline_does_not_leave(state):
    state.table = [["sh", "-c", "exit 0"], ["|"], ["exit", "7"]]
    execute(state)
    assert state.exit_status == 7


def test_execute_only_redirection_creates_file(state, tmp_path):
    target = tmp_path / "created"
    state.table = [[">", str(target)]]
    execute(state)
    assert target.exists()
    assert target.read_text() == ""
    assert state.fd_out_child is None


def test_execute_cd_changes_directory(state, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    sub = tmp_path / "sub"
    sub.mkdir()
    state.table = [["cd", str(sub)]]
    execute(state)
    assert os.getcwd() == str(sub)


def test_execute_cd_in_pipeline_keeps_directory(state, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    sub = tmp_path / "sub"
    sub.mkdir()
    state.table = [["cd", str(sub)], ["|"], ["sh", "-c", "exit 0"]]
    execute(state)
    assert os.getcwd() == str(tmp_path)


def test_execute_failed_input_redirection(state, tmp_path):
    state.table = [["<", str(tmp_path / "missing")], ["cat"]]
    execute(state)
    assert state.exit_status == 127


def test_execute_heredoc_feeds_command(state, monkeypatch, capfd):
    lines = iter(["one", "EOF"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    state.table = [["<<", "EOF"], ["cat"]]
    execute(state)
    assert capfd.readouterr().out == "one\n"
    assert state.exit_status == 0