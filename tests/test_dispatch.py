import pytest

from minishell.builtins import ShellExit
from minishell.dispatch import (
    ExecContext,
    execute_builtin,
    get_command_args,
    handle_builtin,
    is_builtin,
)
from minishell.environment import ShellState
from minishell.lexer import CommandArgs
from minishell.pipeline import PipeCommand
from minishell.redirections import parse_redir


@pytest.fixture
def ctx():
    return ExecContext(state=ShellState(env=["A=1", "B=2"]))


@pytest.mark.parametrize(
    "name", ["env", "export", "unset", "exit", "cd", "echo", "pwd"]
)
def test_is_builtin_true(name):
    assert is_builtin(name) is True


@pytest.mark.parametrize("name", ["ls", "", None, "ECHO"])
def test_is_builtin_false(name):
    assert is_builtin(name) is False


def test_execute_builtin_without_args(ctx):
    assert execute_builtin(None, ctx) == 1
    assert ctx.state.exit_code == 1


def test_execute_builtin_echo(ctx, capsys):
    assert execute_builtin(CommandArgs(["echo", "hi"]), ctx) == 0
    assert capsys.readouterr().out == "hi\n"
    assert ctx.exit_status == 0
    assert ctx.state.exit_code == 0


def test_execute_builtin_unset(ctx):
    execute_builtin(CommandArgs(["unset", "A"]), ctx)
    assert ctx.state.env == ["B=2"]


def test_execute_builtin_unknown(ctx):
    assert execute_builtin(CommandArgs(["nope"]), ctx) == 1
    assert ctx.exit_status == 1


def test_exit_outside_pipeline_raises(ctx, capsys):
    with pytest.raises(ShellExit) as info:
        execute_builtin(CommandArgs(["exit", "7"]), ctx)
    assert info.value.status == 7
    assert capsys.readouterr().out == "exit\n"


def test_exit_in_pipeline_returns(ctx, capsys):
    ctx.pipe_count = 1
    assert execute_builtin(CommandArgs(["exit", "7"]), ctx) == 7
    assert capsys.readouterr().out == ""
    assert ctx.state.exit_code == 7


def test_get_command_args_plain():
    args = get_command_args(PipeCommand("echo a  b"))
    assert args.argv == ["echo", "a", "b"]


def test_get_command_args_uses_parsed_redirection():
    text = "echo a > out"
    args = get_command_args(PipeCommand(text, parse_redir(text)))
    assert args.argv == ["echo", "a"]


def test_handle_builtin_not_builtin(ctx):
    assert handle_builtin(PipeCommand("ls -l"), ctx) is None


def test_handle_builtin_empty_command(ctx):
    assert handle_builtin(PipeCommand("   "), ctx) == 1


def test_handle_builtin_runs(ctx, capsys):
    assert handle_builtin(PipeCommand("echo -n x"), ctx) == 0
    assert capsys.readouterr().out == "x"


def test_handle_builtin_creates_output_file(ctx, tmp_path):
    target = tmp_path / "out.txt"
    text = f"echo hi > {target}"
    assert handle_builtin(PipeCommand(text, parse_redir(text)), ctx) == 0
    assert target.exists()
    assert ctx.streams.stdout_backup is None


def test_handle_builtin_bad_input(ctx, tmp_path, capsys):
    missing = tmp_path / "nope"
    text = f"echo hi < {missing}"
    assert handle_builtin(PipeCommand(text, parse_redir(text)), ctx) == 1
    out = capsys.readouterr().out
    assert f"{missing}: No such file or directory" in out
    assert "hi" not in out
    assert ctx.streams.stdin_backup is None