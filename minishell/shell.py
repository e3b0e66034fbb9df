"""The interactive loop of the shell."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping, Sequence

from minishell.builtins import ShellExit, increment_shell_level
from minishell.environment import ShellState
from minishell.executor import exec_commands
from minishell.lexer import has_invalid_chars
from minishell.pipeline import parse_pipes, parsing_line
from minishell.status import (
    restore_signals,
    setup_exec_signals,
    setup_interactive_signals,
    signal_flag,
)

try:
    import readline
except ImportError:  # pragma: no cover - platforms without readline
    readline = None

PROMPT = "minishell$ "


def init_state(environ: Mapping[str, str] | None = None) -> ShellState:
    """A fresh shell state holding a copy of *environ* (default: the process's)."""
    source = os.environ if environ is None else environ
    return ShellState(env=[f"{name}={value}" for name, value in source.items()])


def get_user_input() -> str | None:
    """Read one line at the prompt; ``None`` at end of input."""
    if signal_flag.received:
        signal_flag.clear()
    try:
        text = input(PROMPT)
    except EOFError:
        return None
    except KeyboardInterrupt:
        signal_flag.set()
        sys.stderr.write("\n")
        sys.stderr.flush()
        return ""
    if text and readline is not None:
        readline.add_history(text)
    return text


def handle_execution(state: ShellState, user_input: str | None) -> int:
    """Check, parse and run one input line; 1 when the line is rejected."""
    if user_input is None or has_invalid_chars(user_input):
        sys.stdout.write("Error: Invalid input\n")
        sys.stdout.flush()
        return 1
    line = parse_pipes(user_input)
    if line.commands:
        setup_exec_signals()
        try:
            parsing_line(user_input)
            exec_commands(line, state)
        finally:
            restore_signals()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the shell until end of input or ``exit``; return its exit status."""
    state = init_state()
    increment_shell_level(state)
    setup_interactive_signals()
    try:
        while True:
            signal_flag.clear()
            user_input = get_user_input()
            if user_input is None:
                sys.stdout.write("exit\n")
                break
            if user_input:
                try:
                    handle_execution(state, user_input)
                except ShellExit as request:
                    return request.status
    finally:
        sys.stdout.flush()
        if readline is not None and hasattr(readline, "clear_history"):
            readline.clear_history()
    return state.exit_code


if __name__ == "__main__":
    sys.exit(main())