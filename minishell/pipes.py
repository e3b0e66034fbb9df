"""Running the commands of a pipeline in child processes."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from contextlib import suppress

from minishell.builtins import ShellExit
from minishell.dispatch import ExecContext, execute_builtin, get_command_args, is_builtin
from minishell.lexer import CommandArgs
from minishell.paths import get_cmd_path
from minishell.pipeline import PipeCommand
from minishell.redirect import RedirectionError, setup_redirections
from minishell.status import handle_status, setup_child_signals, setup_parent_signals

STDIN_FD = 0
STDOUT_FD = 1
STDERR_FD = 2


def _close_pipes(pipes: Sequence[tuple[int, int]]) -> None:
    for read_fd, write_fd in pipes:
        with suppress(OSError):
            os.close(read_fd)
        with suppress(OSError):
            os.close(write_fd)


def _create_pipes(count: int) -> list[tuple[int, int]] | None:
    pipes: list[tuple[int, int]] = []
    for _ in range(count):
        try:
            pipes.append(os.pipe())
        except OSError:
            _close_pipes(pipes)
            return None
    return pipes


def _env_mapping(env: Sequence[str]) -> dict[str, str]:
    mapping = {}
    for entry in env:
        name, sep, value = entry.partition("=")
        if sep:
            mapping[name] = value
    return mapping


def _rebind_streams() -> None:
    sys.stdin = open(STDIN_FD, "r", closefd=False)
    sys.stdout = open(STDOUT_FD, "w", closefd=False)
    sys.stderr = open(STDERR_FD, "w", closefd=False)


def _execute_command(args: CommandArgs | None, ctx: ExecContext) -> int:
    if args is None:
        return 1
    cmd_path = get_cmd_path(args.cmd, ctx.cmd_paths)
    if cmd_path is None:
        sys.stdout.write(f"minishell: {args.cmd}: command not found\n")
        return 127
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execve(cmd_path, args.argv, _env_mapping(ctx.state.env))
    except OSError:
        return 127
    return 127


def _run_child(
    index: int,
    cmd: PipeCommand,
    ctx: ExecContext,
    pipes: Sequence[tuple[int, int]],
    heredoc_fd: int | None,
) -> int:
    setup_child_signals()
    if heredoc_fd is not None and index == 0:
        os.dup2(heredoc_fd, STDIN_FD)
        os.close(heredoc_fd)
    elif index > 0:
        os.dup2(pipes[index - 1][0], STDIN_FD)
    if index < ctx.pipe_count:
        os.dup2(pipes[index][1], STDOUT_FD)
    _close_pipes(pipes)
    _rebind_streams()
    args = get_command_args(cmd)
    if args is not None and is_builtin(args.cmd):
        if cmd.redirection is not None:
            try:
                setup_redirections(cmd.redirection, ctx.streams)
            except RedirectionError:
                return 1
        return execute_builtin(args, ctx)
    if cmd.redirection is not None and not cmd.redirection.heredoc_delims:
        try:
            setup_redirections(cmd.redirection, ctx.streams)
        except RedirectionError:
            return 1
    return _execute_command(args, ctx)


def _fork_command(
    index: int,
    cmd: PipeCommand,
    ctx: ExecContext,
    pipes: Sequence[tuple[int, int]],
    heredoc_fd: int | None,
) -> int | None:
    setup_parent_signals()
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        pid = os.fork()
    except OSError:
        if heredoc_fd is not None and index == 0:
            with suppress(OSError):
                os.close(heredoc_fd)
        return None
    if pid == 0:
        code = 1
        try:
            code = _run_child(index, cmd, ctx, pipes, heredoc_fd)
        except ShellExit as exit_request:
            code = exit_request.status
        except BaseException:
            code = 1
        finally:
            with suppress(Exception):
                sys.stdout.flush()
                sys.stderr.flush()
            os._exit(code & 0xFF)
    if heredoc_fd is not None and index == 0:
        with suppress(OSError):
            os.close(heredoc_fd)
    return pid


def wait_pipeline(pids: Sequence[int], ctx: ExecContext) -> int:
    """Wait for every process of a pipeline; the last one sets the status."""
    if not pids:
        return ctx.state.exit_code
    _, status = os.waitpid(pids[-1], 0)
    ctx.state.exit_code = handle_status(status)
    for pid in pids[:-1]:
        with suppress(ChildProcessError):
            os.waitpid(pid, 0)
    ctx.exit_status = ctx.state.exit_code
    return ctx.exit_status


def exec_pipeline(
    commands: Sequence[PipeCommand], ctx: ExecContext, heredoc_fd: int | None
) -> int:
    """Run *commands* joined by pipes and return the last one's status.

    A here-document descriptor, if given, feeds the first command.
    """
    if not commands:
        return 1
    ctx.pipe_count = len(commands) - 1
    pipes = _create_pipes(ctx.pipe_count)
    if pipes is None:
        return 1
    setup_parent_signals()
    pids: list[int] = []
    for index, cmd in enumerate(commands):
        pid = _fork_command(index, cmd, ctx, pipes, heredoc_fd)
        if pid is None:
            _close_pipes(pipes)
            return 1
        pids.append(pid)
    _close_pipes(pipes)
    return wait_pipeline(pids, ctx)