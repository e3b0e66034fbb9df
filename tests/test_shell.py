import signal

import pytest

from minishell.environment import ShellState
from minishell.shell import get_user_input, handle_execution, init_state, main


@pytest.fixture(autouse=True)
def keep_signals():
    saved_int = signal.getsignal(signal.SIGINT)
    saved_quit = signal.getsignal(signal.SIGQUIT)
    yield
    signal.signal(signal.SIGINT, saved_int)
    signal.signal(signal.SIGQUIT, saved_quit)


def _feed(monkeypatch, lines):
    remaining = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


def test_init_state_copies_environment():
    state = init_state({"A": "1", "B": "two"})
    assert sorted(state.env) == ["A=1", "B=two"]
    assert state.exit_code == 0
    assert state.export_vars == []


def test_get_user_input_returns_line(monkeypatch):
    _feed(monkeypatch, ["ls -l"])
    assert get_user_input() == "ls -l"


def test_get_user_input_end_of_input(monkeypatch):
    _feed(monkeypatch, [])
    assert get_user_input() is None


def test_handle_execution_rejects_invalid(capfd):
    state = ShellState()
    assert handle_execution(state, "echo a; echo b") == 1
    assert capfd.readouterr().out == "Error: Invalid input\n"


def test_handle_execution_rejects_none():
    assert handle_execution(ShellState(), None) == 1


def test_handle_execution_runs_echo(capfd):
    assert handle_execution(ShellState(), "echo hi") == 0
    assert capfd.readouterr().out == "hi\n"


def test_handle_execution_export_changes_state():
    state = ShellState()
    assert handle_execution(state, "export X=1") == 0
    assert "X=1" in state.env


def test_main_exit_status(monkeypatch, capfd):
    _feed(monkeypatch, ["echo hi", "exit 7"])
    assert main([]) == 7
    assert capfd.readouterr().out == "hi\nexit\n"


def test_main_end_of_input(monkeypatch, capfd):
    _feed(monkeypatch, ["", "export A=1"])
    assert main() == 0
    assert capfd.readouterr().out.endswith("exit\n")