"""Expansion of ``$NAME`` and ``$?`` in command strings."""

from __future__ import annotations

from minishell.environment import ShellState, find_env_var, get_env_value


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def get_var_value(name: str | None, env: list[str] | None) -> str:
    """Value of *name* in *env*, or an empty string when it is unset."""
    if name is None or env is None:
        return ""
    index = find_env_var(env, name)
    if index is None:
        return ""
    return get_env_value(env[index]) or ""


def handle_variable(text: str, index: int, state: ShellState) -> tuple[str, int]:
    """Expand the variable name starting at *index*.

    Returns the value and the index just past the name.
    """
    if index < len(text) and text[index] == "?":
        return str(state.exit_code), index + 1
    end = index
    while end < len(text) and _is_name_char(text[end]):
        end += 1
    return get_var_value(text[index:end], state.env), end


def expand_str(text: str | None, state: ShellState | None) -> str:
    """Replace variables in *text*, leaving single-quoted parts alone."""
    if text is None or state is None:
        return ""
    result: list[str] = []
    in_quotes = False
    index = 0
    while index < len(text):
        char = text[index]
        if char == "'":
            result.append(char)
            in_quotes = not in_quotes
            index += 1
        elif char == "$" and not in_quotes:
            index += 1
            following = text[index] if index < len(text) else ""
            if following and (_is_alpha(following) or following in "_?"):
                value, index = handle_variable(text, index, state)
                result.append(value)
            else:
                result.append("$")
        else:
            result.append(char)
            index += 1
    return "".join(result)


def get_env_paths(env: list[str], var_name: str) -> list[str] | None:
    """Split the value of the first entry starting with *var_name* on ``:``.

    Empty fields are dropped; ``None`` when no entry matches.
    """
    for entry in env:
        if entry.startswith(var_name):
            value = entry[len(var_name) + 1 :]
            return [part for part in value.split(":") if part]
    return None