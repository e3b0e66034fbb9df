"""Here-documents: reading the lines of ``<<`` redirections into a pipe."""

from __future__ import annotations

import os
import signal
import sys
from collections.abc import Callable
from types import FrameType

from minishell.dispatch import ExecContext
from minishell.environment import ShellState
from minishell.expansion import expand_str
from minishell.pipeline import CommandLine
from minishell.redirections import ParsedCommand
from minishell.status import handle_status, setup_interactive_signals, signal_flag

STDIN_FD = 0
HEREDOC_PROMPT = "heredoc> "
_QUOTES = ('"', "'")


def is_quoted_delimiter(delimiter: str | None) -> bool:
    """True when *delimiter* is wrapped in a matching pair of quotes."""
    if delimiter is None or len(delimiter) < 2:
        return False
    return delimiter[0] in _QUOTES and delimiter[-1] == delimiter[0]


def remove_quotes(delimiter: str | None) -> str | None:
    """*delimiter* without its surrounding pair of quotes, if it has one."""
    if delimiter is None:
        return None
    if is_quoted_delimiter(delimiter):
        return delimiter[1:-1]
    return delimiter


def expand_heredoc_line(line: str, state: ShellState) -> str:
    """Expand the variables of one here-document line."""
    if "$" not in line:
        return line
    if line == "$?":
        return str(state.exit_code)
    return expand_str(line, state)


def _write_line(fd: int, text: str) -> None:
    os.write(fd, (text + "\n").encode("utf-8", "surrogateescape"))


def process_heredoc(
    fd: int,
    delimiter: str,
    state: ShellState,
    read_line: Callable[[], str | None],
) -> int:
    """Copy lines from *read_line* to *fd* until the delimiter is read.

    Lines are expanded unless the delimiter was quoted. Returns 0 once the
    delimiter is seen, and 1 on end of input or after an interrupt.
    """
    quoted = is_quoted_delimiter(delimiter)
    clean_delim = remove_quotes(delimiter)
    while not signal_flag.received:
        line = read_line()
        if line is None:
            return 1
        if line == clean_delim:
            break
        _write_line(fd, line if quoted else expand_heredoc_line(line, state))
    return 1 if signal_flag.received else 0


def _prompt_line() -> str | None:
    try:
        return input(HEREDOC_PROMPT)
    except EOFError:
        return None


def _setup_parent_heredoc_signals() -> None:
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def _child_interrupt(signum: int, frame: FrameType | None) -> None:
    signal_flag.set()
    sys.stderr.write("\n")
    sys.stderr.flush()
    raise KeyboardInterrupt


def _setup_child_heredoc_signals() -> None:
    signal.signal(signal.SIGINT, _child_interrupt)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def _fill_pipe(parsed: ParsedCommand, state: ShellState, write_fd: int) -> int:
    *earlier, last = parsed.heredoc_delims
    for delimiter in earlier:
        if signal_flag.received:
            break
        null_fd = os.open(os.devnull, os.O_WRONLY)
        try:
            if process_heredoc(null_fd, delimiter, state, _prompt_line):
                return 1
        finally:
            os.close(null_fd)
    if not signal_flag.received:
        if process_heredoc(write_fd, last, state, _prompt_line):
            return 1
    return 0


def _run_child(
    parsed: ParsedCommand, state: ShellState, read_fd: int, write_fd: int
) -> None:
    code = 1
    try:
        _setup_child_heredoc_signals()
        os.close(read_fd)
        code = _fill_pipe(parsed, state, write_fd)
        os.close(write_fd)
    except BaseException:
        code = 1
    finally:
        os._exit(code)


def _wait_child(pid: int, read_fd: int, write_fd: int, ctx: ExecContext) -> int | None:
    os.close(write_fd)
    _, status = os.waitpid(pid, 0)
    setup_interactive_signals()
    if os.WIFSIGNALED(status) or os.WEXITSTATUS(status) != 0:
        os.close(read_fd)
        if os.WIFSIGNALED(status) and os.WTERMSIG(status) == signal.SIGINT:
            exit_code = 130
            sys.stderr.write("\n")
            sys.stderr.flush()
        else:
            exit_code = handle_status(status)
        ctx.exit_status = exit_code
        ctx.state.exit_code = exit_code
        return None
    ctx.exit_status = 0
    ctx.state.exit_code = 0
    return read_fd


def handle_heredoc(parsed: ParsedCommand, ctx: ExecContext) -> int | None:
    """Read *parsed*'s here-documents in a child process.

    Only the last here-document is kept. Returns the read end of a pipe
    holding its text, or ``None`` when reading failed or was interrupted.
    """
    if not parsed.heredoc_delims:
        raise ValueError("command has no here-document")
    try:
        read_fd, write_fd = os.pipe()
    except OSError:
        return None
    signal_flag.clear()
    _setup_parent_heredoc_signals()
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        pid = os.fork()
    except OSError:
        os.close(read_fd)
        os.close(write_fd)
        return None
    if pid == 0:
        _run_child(parsed, ctx.state, read_fd, write_fd)
    return _wait_child(pid, read_fd, write_fd, ctx)


def handle_heredoc_and_expand(
    line: CommandLine, ctx: ExecContext
) -> tuple[bool, int | None]:
    """Prepare the here-document of the first command of *line*.

    Returns whether the line may run, and the here-document's descriptor
    when it is still open. For a single command the here-document is moved
    onto stdin (saved in ``ctx.streams``) and its command is expanded.
    """
    redir = line.commands[0].redirection if line.commands else None
    heredoc_fd: int | None = None
    if redir is not None and redir.heredoc_delims:
        heredoc_fd = handle_heredoc(redir, ctx)
        if heredoc_fd is None:
            return False, None
    if ctx.pipe_count <= 0 and redir is not None and redir.cmd:
        if heredoc_fd is not None:
            ctx.streams.stdin_backup = os.dup(STDIN_FD)
            try:
                os.dup2(heredoc_fd, STDIN_FD)
            except OSError:
                os.close(heredoc_fd)
                return False, None
            os.close(heredoc_fd)
            heredoc_fd = None
        redir.cmd = expand_str(redir.cmd, ctx.state)
    return True, heredoc_fd