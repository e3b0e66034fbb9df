"""Running a parsed command line: expansion, builtins and external commands."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from contextlib import suppress

from minishell.dispatch import ExecContext, handle_builtin
from minishell.environment import ShellState
from minishell.expansion import expand_str, get_env_paths
from minishell.heredoc import handle_heredoc_and_expand
from minishell.lexer import parse_command_args
from minishell.paths import get_cmd_path
from minishell.pipeline import CommandLine, PipeCommand
from minishell.pipes import exec_pipeline
from minishell.redirect import RedirectionError, SavedStreams, setup_redirections
from minishell.redirections import parse_redir
from minishell.status import (
    handle_status,
    restore_signals,
    setup_child_signals,
    setup_parent_signals,
    signal_flag,
)


def _env_mapping(env: Sequence[str]) -> dict[str, str]:
    mapping = {}
    for entry in env:
        name, sep, value = entry.partition("=")
        if sep:
            mapping[name] = value
    return mapping


def _flush_streams() -> None:
    with suppress(Exception):
        sys.stdout.flush()
    with suppress(Exception):
        sys.stderr.flush()


def expand_commands(commands: Sequence[PipeCommand], state: ShellState) -> None:
    """Expand each command's text and parse its redirections if not done yet."""
    for command in commands:
        command.cmd_pipe = expand_str(command.cmd_pipe, state)
        if command.redirection is None:
            command.redirection = parse_redir(command.cmd_pipe)


def _child_execute(cmd: PipeCommand, ctx: ExecContext, cmd_path: str) -> int:
    setup_child_signals()
    if cmd.redirection is not None:
        try:
            setup_redirections(cmd.redirection, ctx.streams)
        except RedirectionError:
            return 1
        cmd_str = cmd.redirection.cmd
    else:
        cmd_str = cmd.cmd_pipe
    args = parse_command_args(cmd_str)
    if args is None:
        return 1
    _flush_streams()
    try:
        os.execve(cmd_path, args.argv, _env_mapping(ctx.state.env))
    except OSError:
        pass
    sys.stdout.write(f"minishell: {args.cmd}: command not found\n")
    return 127


def _fork_and_execute(cmd: PipeCommand, ctx: ExecContext, cmd_path: str) -> int:
    setup_parent_signals()
    signal_flag.clear()
    _flush_streams()
    try:
        pid = os.fork()
    except OSError:
        ctx.state.exit_code = 1
        return 1
    if pid == 0:
        code = 1
        try:
            code = _child_execute(cmd, ctx, cmd_path)
        except BaseException:
            code = 1
        finally:
            _flush_streams()
            os._exit(code & 0xFF)
    _, status = os.waitpid(pid, 0)
    restore_signals()
    exit_code = handle_status(status)
    ctx.state.exit_code = exit_code
    ctx.exit_status = exit_code
    return exit_code


def _prepare_external_command(cmd: PipeCommand, ctx: ExecContext) -> int:
    text = cmd.redirection.cmd if cmd.redirection is not None else cmd.cmd_pipe
    expanded = expand_str(text, ctx.state)
    ctx.state.exit_code = 0
    args = parse_command_args(expanded)
    if args is None:
        return 1
    cmd_path = get_cmd_path(args.cmd, ctx.cmd_paths)
    if cmd_path is None:
        sys.stdout.write(f"minishell: {args.cmd}: command not found\n")
        sys.stdout.flush()
        ctx.state.exit_code = 127
        return 127
    return _fork_and_execute(cmd, ctx, cmd_path)


def exec_simple_cmd(cmd: PipeCommand | None, ctx: ExecContext) -> int:
    """Run one command outside a pipeline and return its status.

    Builtins run in the shell itself; anything else runs in a child process.
    """
    if cmd is None or (not cmd.cmd_pipe and cmd.redirection is None):
        return 1
    builtin_ret = handle_builtin(cmd, ctx)
    if builtin_ret is not None:
        return builtin_ret
    return _prepare_external_command(cmd, ctx)


def exec_commands(line: CommandLine | None, state: ShellState) -> int:
    """Run every command of *line*; 0 once run, 1 when nothing could run.

    The status of the commands themselves is left in ``state.exit_code``.
    """
    if line is None or not line.commands:
        return 1
    ctx = ExecContext(state=state, cmd_paths=get_env_paths(state.env, "PATH"))
    ctx.pipe_count = line.pipe_count()
    expand_commands(line.commands, state)
    try:
        ready, heredoc_fd = handle_heredoc_and_expand(line, ctx)
        if not ready:
            return 1
        if ctx.pipe_count > 0:
            try:
                exec_pipeline(line.commands, ctx, heredoc_fd)
            finally:
                if heredoc_fd is not None:
                    with suppress(OSError):
                        os.close(heredoc_fd)
        else:
            heredoc_stdin = SavedStreams(stdin_backup=ctx.streams.stdin_backup)
            ctx.streams.stdin_backup = None
            try:
                exec_simple_cmd(line.commands[0], ctx)
            finally:
                heredoc_stdin.restore()
                if heredoc_fd is not None:
                    with suppress(OSError):
                        os.close(heredoc_fd)
    finally:
        for command in line.commands:
            command.redirection = None
    return 0