import signal

import pytest

from minishell.builtins import ShellExit
from minishell.dispatch import ExecContext
from minishell.environment import ShellState
from minishell.executor import exec_commands, exec_simple_cmd, expand_commands
from minishell.pipeline import CommandLine, PipeCommand, parse_pipes


@pytest.fixture(autouse=True)
def keep_signals():
    saved_int = signal.getsignal(signal.SIGINT)
    saved_quit = signal.getsignal(signal.SIGQUIT)
    yield
    signal.signal(signal.SIGINT, saved_int)
    signal.signal(signal.SIGQUIT, saved_quit)


def _script(directory, name, body):
    path = directory / name
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(0o755)
    return path


def test_expand_commands_expands_and_parses_redirections():
    state = ShellState(env=["USER=alice"])
    commands = [PipeCommand("echo $USER > out")]
    expand_commands(commands, state)
    assert commands[0].cmd_pipe == "echo alice > out"
    assert commands[0].redirection.output_files == ["out"]
    assert commands[0].redirection.cmd == "echo alice"


def test_expand_commands_keeps_existing_redirection():
    state = ShellState(env=["X=1"])
    command = PipeCommand("echo $X")
    expand_commands([command], state)
    first = command.redirection
    expand_commands([command], state)
    assert command.redirection is first


def test_simple_builtin_echo(capfd):
    ctx = ExecContext(state=ShellState())
    assert exec_simple_cmd(PipeCommand("echo hi there"), ctx) == 0
    assert capfd.readouterr().out == "hi there\n"


def test_simple_command_not_found(capfd):
    state = ShellState()
    ctx = ExecContext(state=state, cmd_paths=[])
    assert exec_simple_cmd(PipeCommand("nosuchcmd"), ctx) == 127
    assert state.exit_code == 127
    assert "nosuchcmd: command not found" in capfd.readouterr().out


def test_simple_empty_command_returns_one():
    ctx = ExecContext(state=ShellState())
    assert exec_simple_cmd(PipeCommand(""), ctx) == 1
    assert exec_simple_cmd(None, ctx) == 1


def test_external_exit_status(tmp_path):
    _script(tmp_path, "myprog", "exit 3\n")
    state = ShellState()
    ctx = ExecContext(state=state, cmd_paths=[str(tmp_path)])
    assert exec_simple_cmd(PipeCommand("myprog"), ctx) == 3
    assert state.exit_code == 3
    assert ctx.exit_status == 3


def test_external_output_redirection(tmp_path):
    _script(tmp_path, "myprog", "echo hello\n")
    out = tmp_path / "out.txt"
    state = ShellState()
    ctx = ExecContext(state=state, cmd_paths=[str(tmp_path)])
    command = PipeCommand(f"myprog > {out}")
    expand_commands([command], state)
    assert exec_simple_cmd(command, ctx) == 0
    assert out.read_text() == "hello\n"


def test_exec_commands_empty_line():
    assert exec_commands(CommandLine(cmd_sep=""), ShellState()) == 1
    assert exec_commands(None, ShellState()) == 1


def test_exec_commands_unknown_command(tmp_path):
    state = ShellState(env=[f"PATH={tmp_path}"])
    assert exec_commands(parse_pipes("nosuchcmd"), state) == 0
    assert state.exit_code == 127


def test_exec_commands_pipeline(tmp_path, capfd):
    _script(tmp_path, "upper", "tr a-z A-Z\n")
    state = ShellState(env=[f"PATH={tmp_path}:/usr/bin:/bin"])
    assert exec_commands(parse_pipes("echo hello | upper"), state) == 0
    assert state.exit_code == 0
    assert capfd.readouterr().out == "HELLO\n"


def test_exec_commands_exit_raises():
    state = ShellState()
    with pytest.raises(ShellExit) as info:
        exec_commands(parse_pipes("exit 5"), state)
    assert info.value.status == 5
    assert state.exit_code == 5