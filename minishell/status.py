"""Exit statuses, error messages and signal dispositions of the shell."""

from __future__ import annotations

import os
import signal
import sys
from dataclasses import dataclass
from types import FrameType

_SIGNAL_EXIT_CODES = {signal.SIGINT: 130, signal.SIGQUIT: 131}


@dataclass
class SignalFlag:
    """Records that an interrupt arrived while the shell was waiting."""

    received: bool = False

    def set(self) -> None:
        self.received = True

    def clear(self) -> None:
        self.received = False


signal_flag = SignalFlag()


def decode_status(status: int) -> int:
    """Shell exit code for a raw wait status.

    A normal exit gives its code; death by a signal gives 130 for SIGINT,
    131 for SIGQUIT and 128 plus the signal number otherwise.
    """
    if os.WIFEXITED(status):
        return os.WEXITSTATUS(status)
    if os.WIFSIGNALED(status):
        sig = os.WTERMSIG(status)
        return _SIGNAL_EXIT_CODES.get(sig, 128 + sig)
    return 1


def handle_status(status: int) -> int:
    """Like :func:`decode_status`, also reporting interrupts on stderr."""
    if os.WIFSIGNALED(status):
        sig = os.WTERMSIG(status)
        if sig == signal.SIGINT:
            sys.stderr.write("\n")
        elif sig == signal.SIGQUIT:
            sys.stderr.write("Quit (core dumped)\n")
        sys.stderr.flush()
    return decode_status(status)


def print_error(cmd: str | None, arg: str | None, message: str | None) -> None:
    """Write ``minishell: cmd: arg: message`` to stderr, skipping missing parts."""
    parts = ["minishell: "]
    if cmd is not None:
        parts.append(f"{cmd}: ")
    if arg is not None:
        parts.append(f"{arg}: ")
    if message is not None:
        parts.append(message)
    parts.append("\n")
    sys.stderr.write("".join(parts))
    sys.stderr.flush()


def _interactive_handler(signum: int, frame: FrameType | None) -> None:
    if signum == signal.SIGINT:
        signal_flag.set()
        sys.stderr.write("\n")
        sys.stderr.flush()


def setup_interactive_signals() -> None:
    """At the prompt: Ctrl-C starts a fresh line, Ctrl-\\ is ignored."""
    signal.signal(signal.SIGINT, _interactive_handler)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def setup_exec_signals() -> None:
    """Default dispositions while a command line runs."""
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def setup_parent_signals() -> None:
    """Ignore interrupts while waiting for children."""
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def setup_child_signals() -> None:
    """Default dispositions in a child about to run a command."""
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def restore_signals() -> None:
    """Return to the prompt's dispositions."""
    setup_interactive_signals()