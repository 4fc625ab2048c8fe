"""Lifecycle hook scripts stored in `.worktree/hooks`."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .config import METADATA_DIR_NAME, RepoLayout
from .exceptions import DetachedHeadError, GitCommandError, HookError, ValidationError
from .git import worktree_branch
from .models import TemplateData
from .templates import render_text

logger = logging.getLogger(__name__)

POST_CREATE = "post-create"
POST_DELETE = "post-delete"


def extract_shebang(content: str) -> tuple[str, str]:
    """Split a script into its shebang interpreter and the remaining body."""

    if not content.startswith("#!"):
        return "", content
    first_line, newline, remaining = content.partition("\n")
    if not newline:
        return content[2:], ""
    return first_line[2:], remaining


def run_hook(hook_path: Path, data: TemplateData) -> bool:
    """Render and execute `hook_path` inside the worktree directory.

    Returns False without doing anything when the hook is missing or not
    executable.
    """

    if not hook_path.is_file() or not os.access(hook_path, os.X_OK):
        logger.debug("Skipping hook %s: missing or not executable", hook_path)
        return False
    try:
        source = hook_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise HookError(f"failed to read hook script {hook_path.name}: {exc}") from exc
    interpreter, body = extract_shebang(render_text(source, data, name=hook_path.name))
    command = interpreter.split()
    if not command:
        raise HookError(f"no shebang found in hook script {hook_path.name}")

    with tempfile.TemporaryDirectory(prefix="wtm-hook-") as tmp:
        script = Path(tmp) / hook_path.name
        script.write_text(body, encoding="utf-8")
        logger.debug("Running hook %s with %s", hook_path.name, " ".join(command))
        try:
            result = subprocess.run([*command, str(script)], cwd=str(data.directory))
        except OSError as exc:
            raise HookError(f"hook script {hook_path.name} could not start: {exc}") from exc
    if result.returncode != 0:
        raise HookError(f"hook script {hook_path.name} exited with status {result.returncode}")
    return True


def run_named_hook(layout: RepoLayout, name: str, data: TemplateData) -> bool:
    return run_hook(layout.hook_path(name), data)


@dataclass(frozen=True, slots=True)
class HookContext:
    root: Path
    data: TemplateData


def infer_hook_context(cwd: Path) -> HookContext:
    """Work out root, directory and branch for `wtm hook` from `cwd`.

    `cwd` must be a worktree directory directly below the root that holds
    `.worktree`.
    """

    directory = cwd.expanduser().resolve()
    root = next(
        (candidate for candidate in (directory, *directory.parents) if (candidate / METADATA_DIR_NAME).is_dir()),
        None,
    )
    if root is None:
        raise ValidationError(f"Not in a worktree directory: {METADATA_DIR_NAME} directory not found.")
    if directory.parent != root:
        raise ValidationError(
            "Must be run from a branch directory (direct child of the root), not a subdirectory."
        )
    try:
        branch = worktree_branch(directory)
    except (DetachedHeadError, GitCommandError):
        branch = directory.name
    return HookContext(root=root, data=TemplateData(branch=branch, directory=directory, root_directory=root))


__all__ = [
    "POST_CREATE",
    "POST_DELETE",
    "extract_shebang",
    "run_hook",
    "run_named_hook",
    "infer_hook_context",
    "HookContext",
]
