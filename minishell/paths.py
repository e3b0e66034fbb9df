"""Locating the executable for a command name."""

from __future__ import annotations

import os
from collections.abc import Sequence

_DIRECT_PREFIXES = ("/", ".", "~")


def get_cmd_path(cmd: str | None, cmd_paths: Sequence[str] | None) -> str | None:
    """Path of the executable to run for *cmd*, or ``None``.

    A name starting with ``/``, ``.`` or ``~`` is used as it stands;
    any other name is looked up in each directory of *cmd_paths* in order.
    """
    if cmd is None:
        return None
    if cmd[:1] in _DIRECT_PREFIXES and cmd[:1]:
        return cmd if os.access(cmd, os.X_OK) else None
    if not cmd_paths:
        return None
    for directory in cmd_paths:
        candidate = f"{directory}/{cmd}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None