"""Splitting an input line into the commands of a pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

from minishell.lexer import QUOTES, has_invalid_chars, parse_command_args
from minishell.redirections import ParsedCommand, parse_redir


@dataclass
class PipeCommand:
    """One command of a pipeline, with its redirections once parsed."""

    cmd_pipe: str
    redirection: ParsedCommand | None = None


@dataclass
class CommandLine:
    """A whole input line and the commands it is made of."""

    cmd_sep: str
    commands: list[PipeCommand] = field(default_factory=list)

    def pipe_count(self) -> int:
        """Number of pipes joining the commands."""
        return max(len(self.commands) - 1, 0)


def split_pipes(text: str) -> list[str]:
    """Split *text* on ``|`` outside of quotes, dropping empty pieces."""
    pieces: list[str] = []
    current: list[str] = []
    quote: str | None = None
    for char in text:
        if quote is None and char in QUOTES:
            quote = char
        elif quote is not None and char == quote:
            quote = None
        elif quote is None and char == "|":
            pieces.append("".join(current))
            current = []
            continue
        current.append(char)
    pieces.append("".join(current))
    return [piece for piece in pieces if piece]


def parse_pipes(text: str) -> CommandLine:
    """Build the pipeline for *text*."""
    return CommandLine(
        cmd_sep=text,
        commands=[PipeCommand(piece) for piece in split_pipes(text)],
    )


def parsing_line(user_input: str | None) -> list[ParsedCommand | None] | None:
    """Check *user_input* and parse the redirections of each command.

    Returns ``None`` for input with invalid characters or unclosed quotes;
    otherwise one entry per command, ``None`` where redirection syntax fails.
    """
    if user_input is None or has_invalid_chars(user_input):
        return None
    results: list[ParsedCommand | None] = []
    for command in parse_pipes(user_input).commands:
        parsed = parse_redir(command.cmd_pipe)
        if parsed is not None and parsed.cmd:
            parse_command_args(parsed.cmd)
        results.append(parsed)
    return results