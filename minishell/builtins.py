"""The commands the shell runs itself: cd, echo, env, exit, export, pwd, unset."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence

from minishell.environment import (
    MAX_EXPORTS,
    ShellState,
    find_env_var,
    get_env_name,
    get_env_value,
    sorted_env,
    update_env,
)

_C_SPACES = " \t\n\v\f\r"


class ShellExit(Exception):
    """Raised by ``exit`` outside a pipeline; the shell should stop."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_alnum(char: str) -> bool:
    return char.isascii() and char.isalnum()


def _atoi(text: str) -> int:
    """Leading integer of *text*, skipping blanks; 0 when there is none."""
    text = text.lstrip(_C_SPACES)
    sign = 1
    if text[:1] in ("+", "-"):
        if text[0] == "-":
            sign = -1
        text = text[1:]
    digits = []
    for char in text:
        if not _is_digit(char):
            break
        digits.append(char)
    return sign * int("".join(digits)) if digits else 0


def expand_home_path(path: str | None) -> str | None:
    """Replace a leading ``~`` or ``~/`` with the process's ``HOME``."""
    if path is None or not path.startswith("~"):
        return path
    home = os.environ.get("HOME")
    if home is None:
        return path
    if path == "~":
        return home
    if path[1] == "/":
        return home + path[1:]
    return path


def update_env_var(state: ShellState, name: str, value: str | None) -> None:
    """Set *name* to *value* in the shell's environment."""
    update_env(state.env, name, value)


def is_valid_identifier(text: str | None) -> bool:
    """True for a name made of letters, digits and ``_`` not starting with a digit."""
    if not text or _is_digit(text[0]):
        return False
    for char in text.split("=", 1)[0]:
        if not _is_alnum(char) and char != "_":
            return False
    return True


def _is_unset_identifier(text: str) -> bool:
    if not text or (not _is_alpha(text[0]) and text[0] != "_"):
        return False
    return all(_is_alnum(char) or char == "_" for char in text[1:])


def is_valid_n_option(text: str | None) -> bool:
    """True for ``-n``, ``-nnn`` and forms like ``-ne`` that echo treats as -n."""
    if not text or not text.startswith("-n"):
        return False
    return all(char in "ne" for char in text[2:])


def format_export_line(var: str) -> str:
    """The ``declare -x`` line that ``export`` lists for *var*."""
    if "=" in var:
        name, value = var.split("=", 1)
        return f'declare -x {name}="{value}"'
    return f"declare -x {var}"


def increment_shell_level(state: ShellState) -> None:
    """Raise ``SHLVL`` when started from this shell, else set it to 1."""
    shlvl_index: int | None = None
    shlvl_value = 0
    minishell_exists = False
    for index, entry in enumerate(state.env):
        if entry.startswith("MINISHELL="):
            minishell_exists = True
        if entry.startswith("SHLVL="):
            shlvl_index = index
            shlvl_value = _atoi(entry[len("SHLVL="):])
    if minishell_exists:
        shlvl_value += 1
    else:
        shlvl_value = 1
        update_env(state.env, "MINISHELL", "1")
    if shlvl_index is not None:
        state.env[shlvl_index] = f"SHLVL={shlvl_value}"
    else:
        update_env(state.env, "SHLVL", str(shlvl_value))


def _env_value(state: ShellState, name: str) -> str | None:
    index = find_env_var(state.env, name)
    if index is None:
        return None
    return state.env[index][len(name) + 1:]


def builtin_cd(state: ShellState, args: Sequence[str]) -> int:
    """Change directory and keep ``PWD`` and ``OLDPWD`` up to date."""
    try:
        old_pwd = os.getcwd()
    except OSError:
        return 1
    if len(args) < 2:
        target = _env_value(state, "HOME")
        if target is None:
            sys.stdout.write("minishell: cd: HOME not set\n")
            return 1
    elif args[1] == "-":
        target = _env_value(state, "OLDPWD")
        if target is None:
            sys.stdout.write("minishell: cd: OLDPWD not set\n")
            return 1
        sys.stdout.write(f"{target}\n")
    else:
        target = expand_home_path(args[1])
    try:
        os.chdir(target)
    except OSError:
        shown = args[1] if len(args) > 1 else target
        sys.stdout.write(f"minishell: cd: {shown}: No such file or directory\n")
        return 1
    try:
        current = os.getcwd()
    except OSError:
        return 0
    update_env_var(state, "OLDPWD", old_pwd)
    update_env_var(state, "PWD", current)
    return 0


def builtin_echo(state: ShellState, args: Sequence[str]) -> int:
    """Print the arguments separated by spaces; ``-n`` drops the newline."""
    words = list(args[1:])
    newline = True
    while words and is_valid_n_option(words[0]):
        newline = False
        words.pop(0)
    sys.stdout.write(" ".join(words))
    if newline:
        sys.stdout.write("\n")
    return 0


def builtin_env(state: ShellState, args: Sequence[str]) -> int:
    """Print the environment, sorted; no options or arguments are taken."""
    if len(args) > 1:
        sys.stderr.write("env: no options or arguments are supported\n")
        return 1
    for entry in sorted_env(state.env):
        sys.stdout.write(f"{entry}\n")
    return 0


def _is_numeric(text: str) -> bool:
    if not text:
        return False
    body = text[1:] if text[0] in "+-" else text
    return all(_is_digit(char) for char in body)


def builtin_exit(state: ShellState, args: Sequence[str], in_pipeline: bool) -> int:
    """Work out the exit status; outside a pipeline raise :class:`ShellExit`."""
    if not in_pipeline:
        sys.stdout.write("exit\n")
    if len(args) < 2:
        status = state.exit_code
    elif not _is_numeric(args[1]):
        sys.stderr.write(f"exit: {args[1]}: numeric argument required\n")
        status = 2
    elif len(args) > 2:
        sys.stderr.write("exit: too many arguments\n")
        status = 1
    else:
        status = _atoi(args[1]) & 255
    state.exit_code = status
    if not in_pipeline:
        raise ShellExit(status)
    return status


def builtin_export(state: ShellState, args: Sequence[str]) -> int:
    """Set or mark variables for export, or list them all without arguments."""
    if len(args) < 2:
        for var in sorted(list(state.env) + list(state.export_vars)):
            sys.stdout.write(f"{format_export_line(var)}\n")
        return 0
    ret = 0
    for arg in args[1:]:
        name = get_env_name(arg)
        if not is_valid_identifier(name):
            sys.stdout.write(
                f"minishell: export: '{arg}': not a valid identifier\n"
            )
            ret = 1
            continue
        if "=" in arg:
            update_env_var(state, name, get_env_value(arg) or "")
        elif name not in state.export_vars and len(state.export_vars) < MAX_EXPORTS:
            state.export_vars.append(name)
    return ret


def builtin_pwd(state: ShellState, args: Sequence[str]) -> int:
    """Print the current directory."""
    try:
        cwd = os.getcwd()
    except OSError as error:
        sys.stdout.write(f"pwd: {error.strerror}\n")
        return 1
    sys.stdout.write(f"{cwd}\n")
    return 0


def builtin_unset(state: ShellState, args: Sequence[str]) -> int:
    """Remove variables from the environment and from the export list."""
    for arg in args[1:]:
        if not _is_unset_identifier(arg):
            sys.stderr.write(
                f"minishell: unset: `{arg}': not a valid identifier\n"
            )
            continue
        index = find_env_var(state.env, arg)
        if index is not None:
            del state.env[index]
        if arg in state.export_vars:
            state.export_vars.remove(arg)
    return 0