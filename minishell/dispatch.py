"""Recognising and running the shell's own commands."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from minishell.builtins import (
    builtin_cd,
    builtin_echo,
    builtin_env,
    builtin_exit,
    builtin_export,
    builtin_pwd,
    builtin_unset,
)
from minishell.environment import ShellState
from minishell.lexer import CommandArgs, parse_command_args
from minishell.pipeline import PipeCommand
from minishell.redirect import RedirectionError, SavedStreams, setup_redirections

BUILTINS = frozenset({"env", "export", "unset", "exit", "cd", "echo", "pwd"})

_RUNNERS: dict[str, Callable[[ShellState, Sequence[str]], int]] = {
    "env": builtin_env,
    "export": builtin_export,
    "unset": builtin_unset,
    "cd": builtin_cd,
    "echo": builtin_echo,
    "pwd": builtin_pwd,
}


@dataclass
class ExecContext:
    """What running one command line needs besides the command itself."""

    state: ShellState
    pipe_count: int = 0
    exit_status: int = 0
    streams: SavedStreams = field(default_factory=SavedStreams)
    cmd_paths: list[str] | None = None


def is_builtin(cmd: str | None) -> bool:
    """True when *cmd* names one of the shell's own commands."""
    return cmd in BUILTINS


def execute_builtin(args: CommandArgs | None, ctx: ExecContext) -> int:
    """Run the builtin named by ``args.argv[0]`` and record its status."""
    if args is None or not args.argv:
        ctx.state.exit_code = 1
        return 1
    name = args.argv[0]
    if name == "exit":
        result = builtin_exit(ctx.state, args.argv, ctx.pipe_count > 0)
    else:
        runner = _RUNNERS.get(name)
        result = runner(ctx.state, args.argv) if runner is not None else 1
    ctx.state.exit_code = result
    ctx.exit_status = result
    return result


def get_command_args(cmd: PipeCommand) -> CommandArgs | None:
    """Arguments of *cmd*, with its redirections left out when parsed."""
    if cmd.redirection is not None:
        return parse_command_args(cmd.redirection.cmd)
    return parse_command_args(cmd.cmd_pipe)


def handle_builtin(cmd: PipeCommand, ctx: ExecContext) -> int | None:
    """Run *cmd* in the shell itself if it is a builtin.

    Returns its status, or ``None`` when *cmd* is not a builtin.
    """
    args = get_command_args(cmd)
    if args is None:
        return 1
    if not is_builtin(args.cmd):
        return None
    if cmd.redirection is None:
        return execute_builtin(args, ctx)
    try:
        setup_redirections(cmd.redirection, ctx.streams)
    except RedirectionError:
        ctx.streams.restore()
        return 1
    try:
        return execute_builtin(args, ctx)
    finally:
        ctx.streams.restore()