"""Extracting redirections from a single command."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

from minishell.lexer import QUOTES, is_space

REDIR_CHARS = ("<", ">")


@dataclass
class ParsedCommand:
    """A command with its redirections taken out."""

    full_cmd: str
    cmd: str = ""
    input_files: list[str] = field(default_factory=list)
    output_files: list[str] = field(default_factory=list)
    append_files: list[str] = field(default_factory=list)
    heredoc_delims: list[str] = field(default_factory=list)


def count_consecutive_chars(text: str, index: int) -> int:
    """Length of the run of equal characters starting at *index*."""
    char = text[index]
    end = index + 1
    while end < len(text) and text[end] == char:
        end += 1
    return end - index


def check_redir_syntax(text: str) -> bool:
    """Check that every redirection operator is valid and has a target."""
    index = 0
    length = len(text)
    while index < length:
        if text[index] in REDIR_CHARS:
            count = count_consecutive_chars(text, index)
            if count > 2:
                sys.stderr.write(
                    "minishell: syntax error near unexpected token "
                    f"`{text[index]}'\n"
                )
                return False
            index += count
            while index < length and is_space(text[index]):
                index += 1
            if index >= length or text[index] in REDIR_CHARS:
                return False
            continue
        index += 1
    return True


def find_file_end(text: str, start: int) -> int:
    """Index just past the redirection target starting at *start*."""
    quote: str | None = None
    index = start
    while index < len(text):
        char = text[index]
        if quote is None and (is_space(char) or char in REDIR_CHARS):
            break
        if quote is None and char in QUOTES:
            quote = char
        elif quote is not None and char == quote:
            quote = None
        index += 1
    return index


def _take_redirection(text: str, index: int, result: ParsedCommand) -> int:
    operator = text[index : index + 2]
    if operator in ("<<", ">>"):
        index += 2
    else:
        operator = text[index]
        index += 1
    while index < len(text) and is_space(text[index]):
        index += 1
    end = find_file_end(text, index)
    target = text[index:end]
    targets = {
        "<": result.input_files,
        ">": result.output_files,
        "<<": result.heredoc_delims,
        ">>": result.append_files,
    }
    targets[operator].append(target)
    return end


def parse_redir(text: str | None) -> ParsedCommand | None:
    """Split *text* into its command and redirections.

    Returns ``None`` when *text* is missing or its redirection syntax is bad.
    Redirection targets keep their quotes.
    """
    if text is None or not check_redir_syntax(text):
        return None
    result = ParsedCommand(full_cmd=text)
    cmd = []
    quote: str | None = None
    index = 0
    while index < len(text):
        char = text[index]
        if quote is None and char in QUOTES:
            quote = char
            cmd.append(char)
        elif quote is not None and char == quote:
            quote = None
            cmd.append(char)
        elif quote is None and char in REDIR_CHARS:
            index = _take_redirection(text, index, result)
            continue
        else:
            cmd.append(char)
        index += 1
    result.cmd = "".join(cmd).strip(" \t")
    return result