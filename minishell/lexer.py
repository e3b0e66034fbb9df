"""Splitting a command string into arguments, with quote handling."""

from __future__ import annotations

from dataclasses import dataclass, field

QUOTES = ("'", '"')
INVALID_CHARS = ("\\", ";")


def is_space(char: str) -> bool:
    """Only the plain space character separates words."""
    return char == " "


def clean_quotes(text: str) -> str:
    """Remove the quote characters that open and close quoted sections."""
    result = []
    quote: str | None = None
    for char in text:
        if quote is None and char in QUOTES:
            quote = char
        elif quote is not None and char == quote:
            quote = None
        else:
            result.append(char)
    return "".join(result)


def count_args(text: str) -> int:
    """Count the words of *text* that start outside of quotes.

    A word that begins with a quote is not counted, and once a quote is
    opened the rest of the string is treated as quoted.
    """
    count = 0
    in_quotes = False
    in_word = False
    for char in text:
        if not in_quotes and char in QUOTES:
            in_quotes = True
            in_word = True
        elif not in_quotes and is_space(char):
            in_word = False
        elif not in_word:
            count += 1
            in_word = True
    return count


def _token_end(cmd_str: str, start: int) -> int:
    quote: str | None = None
    index = start
    while index < len(cmd_str):
        char = cmd_str[index]
        if quote is None and char in QUOTES:
            quote = char
        elif quote is not None and char == quote:
            quote = None
        elif quote is None and is_space(char):
            break
        index += 1
    return index


def split_args(cmd_str: str) -> list[str]:
    """Split *cmd_str* on unquoted spaces and strip quotes from each word."""
    args = []
    index = 0
    length = len(cmd_str)
    while index < length:
        while index < length and is_space(cmd_str[index]):
            index += 1
        if index >= length:
            break
        end = _token_end(cmd_str, index)
        args.append(clean_quotes(cmd_str[index:end]))
        index = end
    return args


@dataclass
class CommandArgs:
    """The argument vector of one command."""

    argv: list[str] = field(default_factory=list)

    @property
    def cmd(self) -> str:
        return self.argv[0] if self.argv else ""

    @property
    def argc(self) -> int:
        return len(self.argv)


def parse_command_args(cmd_str: str | None) -> CommandArgs | None:
    """Parse *cmd_str* into arguments; ``None`` when it holds no word."""
    if cmd_str is None:
        return None
    argv = split_args(cmd_str)
    if not argv:
        return None
    return CommandArgs(argv)


def has_invalid_chars(cmd: str | None) -> bool:
    """True for unquoted backslashes or semicolons, or an unclosed quote."""
    if cmd is None:
        return True
    quote: str | None = None
    for char in cmd:
        if quote is None and char in QUOTES:
            quote = char
        elif quote is not None and char == quote:
            quote = None
        elif quote is None and char in INVALID_CHARS:
            return True
    return quote is not None