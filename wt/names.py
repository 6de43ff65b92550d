from __future__ import annotations

import re

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.\-]")
_DASH_RUNS = re.compile(r"-{2,}")


def sanitize_branch_name(branch: str) -> str:
    """Turn a branch name into a flat directory name (``fix/bug-1`` -> ``fix-bug-1``)."""
    name = _UNSAFE_CHARS.sub("-", branch)
    name = _DASH_RUNS.sub("-", name)
    return name.strip("-")
