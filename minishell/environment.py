"""Shell state and helpers for ``NAME=value`` environment lists."""

from __future__ import annotations

from dataclasses import dataclass, field

MAX_EXPORTS = 100


@dataclass
class ShellState:
    """Everything the shell keeps between commands."""

    env: list[str] = field(default_factory=list)
    exit_code: int = 0
    export_vars: list[str] = field(default_factory=list)


def find_env_var(env: list[str] | None, name: str | None) -> int | None:
    """Index of the entry defining *name*, or ``None`` when there is none."""
    if env is None or name is None:
        return None
    prefix = f"{name}="
    for index, entry in enumerate(env):
        if entry.startswith(prefix):
            return index
    return None


def create_env_string(name: str, value: str | None) -> str:
    """Build a ``NAME=value`` entry; a missing value gives ``NAME=``."""
    return f"{name}={value if value is not None else ''}"


def update_env(env: list[str], name: str, value: str | None) -> None:
    """Set *name* to *value* in *env*, replacing or appending the entry."""
    entry = create_env_string(name, value)
    index = find_env_var(env, name)
    if index is None:
        env.append(entry)
    else:
        env[index] = entry


def get_env_name(var: str | None) -> str | None:
    """The part of *var* before its first ``=``, or all of it."""
    if var is None:
        return None
    return var.split("=", 1)[0]


def get_env_value(var: str | None) -> str | None:
    """The part of *var* after its first ``=``; ``None`` without one."""
    if var is None or "=" not in var:
        return None
    return var.split("=", 1)[1]


def sorted_env(env: list[str] | None) -> list[str]:
    """A sorted copy of *env*, ordered byte by byte."""
    return sorted(env or [])