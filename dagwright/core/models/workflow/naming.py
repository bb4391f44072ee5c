"""Node naming rules shared by builders, config and assembly."""

from __future__ import annotations

import re

NODE_NAME_PATTERN = re.compile(r'[A-Za-z0-9_\-:.]+')

MAX_NODE_NAME_LENGTH = 128


def node_name_problem(name: str | None) -> str | None:
    """Return a short description of what is wrong with *name*, or None if valid."""
    if name is None or not name.strip():
        return 'node name must be a non-empty string'
    if len(name) > MAX_NODE_NAME_LENGTH:
        return f'node name has {len(name)} characters (max {MAX_NODE_NAME_LENGTH})'
    if NODE_NAME_PATTERN.fullmatch(name) is None:
        return 'node name contains invalid characters'
    return None
