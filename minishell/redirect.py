"""Applying a command's redirections to the shell's standard streams."""

from __future__ import annotations

import os
import sys
from contextlib import suppress
from dataclasses import dataclass

from minishell.redirections import ParsedCommand

STDIN_FD = 0
STDOUT_FD = 1
_FILE_MODE = 0o644
_TRUNCATE = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
_APPEND = os.O_WRONLY | os.O_CREAT | os.O_APPEND


class RedirectionError(Exception):
    """A redirection could not be set up; the message was already shown."""


def _report(message: str) -> None:
    sys.stdout.write(f"minishell: {message}\n")
    sys.stdout.flush()


@dataclass
class SavedStreams:
    """Copies of stdin and stdout taken before they were redirected."""

    stdin_backup: int | None = None
    stdout_backup: int | None = None

    def restore(self) -> None:
        """Put the saved streams back and drop the copies."""
        sys.stdout.flush()
        if self.stdin_backup is not None:
            try:
                os.dup2(self.stdin_backup, STDIN_FD)
            except OSError:
                _report("error restoring stdin")
            os.close(self.stdin_backup)
            self.stdin_backup = None
        if self.stdout_backup is not None:
            try:
                os.dup2(self.stdout_backup, STDOUT_FD)
            except OSError:
                _report("error restoring stdout")
            os.close(self.stdout_backup)
            self.stdout_backup = None

    def __enter__(self) -> SavedStreams:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.restore()


def _touch_all(paths: list[str], flags: int) -> None:
    for path in paths:
        try:
            fd = os.open(path, flags, _FILE_MODE)
        except OSError as error:
            _report(f"{path}: Permission denied")
            raise RedirectionError(path) from error
        os.close(fd)


def create_output_files(parsed: ParsedCommand) -> None:
    """Create or truncate every ``>`` target, stopping at the first failure."""
    _touch_all(parsed.output_files, _TRUNCATE)


def create_append_files(parsed: ParsedCommand) -> None:
    """Create every ``>>`` target, keeping existing contents."""
    _touch_all(parsed.append_files, _APPEND)


def open_input(path: str) -> int:
    """Open *path* for reading and return its descriptor."""
    try:
        return os.open(path, os.O_RDONLY)
    except OSError as error:
        _report(f"{path}: No such file or directory")
        raise RedirectionError(path) from error


def redirect_output(path: str | None, append: bool) -> None:
    """Point stdout at *path*, truncating it unless *append* is set."""
    if path is None:
        _report("redirection error: no file specified")
        raise RedirectionError("no file specified")
    try:
        fd = os.open(path, _APPEND if append else _TRUNCATE, _FILE_MODE)
    except OSError as error:
        _report(f"{path}: Permission denied")
        raise RedirectionError(path) from error
    sys.stdout.flush()
    try:
        os.dup2(fd, STDOUT_FD)
    except OSError as error:
        raise RedirectionError(path) from error
    finally:
        os.close(fd)


def _backup_stdout(saved: SavedStreams) -> None:
    if saved.stdout_backup is None:
        try:
            saved.stdout_backup = os.dup(STDOUT_FD)
        except OSError as error:
            _report("dup error")
            raise RedirectionError("dup error") from error


def _setup_input(parsed: ParsedCommand, saved: SavedStreams) -> None:
    if parsed.heredoc_delims or not parsed.input_files:
        return
    fd = open_input(parsed.input_files[-1])
    try:
        saved.stdin_backup = os.dup(STDIN_FD)
        os.dup2(fd, STDIN_FD)
    except OSError as error:
        raise RedirectionError(parsed.input_files[-1]) from error
    finally:
        os.close(fd)


def setup_redirections(parsed: ParsedCommand | None, saved: SavedStreams) -> None:
    """Apply *parsed*'s redirections, recording the old streams in *saved*.

    Every output target is created; stdout goes to the last ``>`` target,
    or to the last ``>>`` target when there is no ``>``. Input comes from
    the last ``<`` target unless the command has a here-document.
    """
    if parsed is None:
        return
    saved.stdin_backup = None
    saved.stdout_backup = None
    with suppress(RedirectionError):
        create_output_files(parsed)
    with suppress(RedirectionError):
        create_append_files(parsed)
    _setup_input(parsed, saved)
    if parsed.output_files or parsed.append_files:
        create_output_files(parsed)
        create_append_files(parsed)
        _backup_stdout(saved)
        if parsed.output_files:
            redirect_output(parsed.output_files[-1], False)
        else:
            redirect_output(parsed.append_files[-1], True)