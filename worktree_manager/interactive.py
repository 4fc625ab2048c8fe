"""Interactive prompt helpers built on InquirerPy."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice

from .exceptions import UserAbort, ValidationError
from .models import WorktreeEntry


def _ensure_tty() -> None:
    if not sys.stdin.isatty():
        raise ValidationError(
            "Interactive mode requires a TTY. Provide the missing arguments to run non-interactively."
        )


def fuzzy_select(message: str, choices: Sequence[Choice | str]) -> Any:
    _ensure_tty()
    try:
        return inquirer.fuzzy(message=message, choices=list(choices)).execute()
    except KeyboardInterrupt as exc:  # pragma: no cover - user cancel
        raise UserAbort("User cancelled the prompt.") from exc


def build_worktree_choices(entries: Sequence[WorktreeEntry]) -> list[Choice]:
    """One choice per worktree, valued by its path."""

    choices: list[Choice] = []
    seen: set[str] = set()
    for entry in entries:
        key = str(entry.path)
        if key in seen:
            raise ValidationError(f"Duplicate worktree path detected: {key}")
        seen.add(key)
        choices.append(Choice(value=key, name=f"{entry.name} ({entry.branch or 'detached'}) · {entry.path}"))
    return choices


def prompt_worktree(entries: Sequence[WorktreeEntry]) -> Path:
    if not entries:
        raise ValidationError("No worktrees available.")
    selection = fuzzy_select("Select worktree", build_worktree_choices(entries))
    if not selection:
        raise UserAbort("No worktree selected.")
    return Path(str(selection))


__all__ = ["fuzzy_select", "build_worktree_choices", "prompt_worktree"]
