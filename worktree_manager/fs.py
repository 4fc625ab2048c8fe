"""Filesystem helpers for worktree-manager."""

from __future__ import annotations

import re
from pathlib import Path

_UNSAFE_PATTERN = re.compile(r"[^A-Za-z0-9-]+")
_DASH_RUN_PATTERN = re.compile(r"-+")


def worktree_directory_name(branch: str) -> str:
    """Produce a directory name for a branch, preserving case.

    `feature/user-auth` becomes `feature-user-auth`, `fix_bug_123` becomes
    `fix-bug-123`.
    """

    name = branch.replace("/", "-").replace("_", "-")
    name = _UNSAFE_PATTERN.sub("", name)
    name = _DASH_RUN_PATTERN.sub("-", name)
    return name.strip("-")


def pr_directory_name(number: int, hint: str = "") -> str:
    return hint or f"pr-{number}"


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def is_within(path: Path, parent: Path) -> bool:
    resolved = path.resolve()
    resolved_parent = parent.resolve()
    return resolved == resolved_parent or resolved_parent in resolved.parents
