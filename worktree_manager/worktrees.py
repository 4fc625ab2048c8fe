"""Core business logic for worktree operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.table import Table

from . import git
from .config import RepoLayout
from .exceptions import (
    DetachedHeadError,
    GitCommandError,
    HookError,
    TemplateRenderError,
    ValidationError,
    WorktreeManagerError,
)
from .fs import ensure_directory, is_within, pr_directory_name, worktree_directory_name
from .github import GitHubCLI, parse_remote_slug
from .hooks import POST_CREATE, POST_DELETE, run_named_hook
from .models import BranchReference, PullRequestReference, ResolutionTier, TemplateData, WorktreeEntry
from .pr import resolve_pull_request
from .refs import REMOTE_PREFIX, classify
from .templates import process_files

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_BRANCH = "main"


@dataclass(frozen=True, slots=True)
class CreatedWorktree:
    branch: str
    path: Path


def init_repository(
    repo: str,
    directory: Path | None,
    *,
    new: bool = False,
    initial_branch: str = DEFAULT_INITIAL_BRANCH,
    run_hooks: bool = True,
    console: Console,
) -> tuple[RepoLayout, CreatedWorktree]:
    """Create a managed root: `.bare`, `.worktree/` and a default-branch worktree."""

    target = directory or Path(_directory_from_repo(repo))
    if target.exists():
        raise ValidationError(f"Directory '{target}' already exists.")
    layout = RepoLayout.from_root(target)
    ensure_directory(layout.files_dir)
    ensure_directory(layout.hooks_dir)

    console.print(f"Initializing repository in {layout.root}")
    if new:
        bare = git.init_bare(layout.bare_dir)
        bare.create_initial_branch(initial_branch)
    else:
        url = git.convert_github_shorthand(repo)
        with console.status(f"Cloning {url}…"):
            bare = git.clone_bare(url, layout.bare_dir)
            bare.configure_remote_tracking()
            bare.fetch()

    default_branch = bare.default_branch()
    path = layout.worktree_path(worktree_directory_name(default_branch) or default_branch)
    console.print(f"Creating worktree for default branch: {default_branch}")
    bare.worktree_add(path, default_branch)
    created = CreatedWorktree(branch=default_branch, path=path)
    _prepare_worktree(layout, created, run_hooks=run_hooks, console=console)
    return layout, created


def _directory_from_repo(repo: str) -> str:
    name = repo.rstrip("/").replace(":", "/").rsplit("/", 1)[-1].removesuffix(".git")
    if not name:
        raise ValidationError(f"Cannot derive a directory name from '{repo}'.")
    return name


def add_worktree(
    layout: RepoLayout,
    base_ref: str,
    new_branch: str | None = None,
    directory: str | None = None,
    *,
    run_hooks: bool = True,
    github: GitHubCLI | None = None,
    console: Console,
) -> CreatedWorktree:
    """Create a worktree for a branch, remote branch, tag, commit or PR.

    `base_ref` may be `pr/<number>[/<name>]`; the PR lands in a directory named
    after `<name>`, `directory`, `new_branch` or `pr-<number>`, in that order.
    """

    parsed = classify(base_ref)
    bare = git.BareRepository(layout.bare_dir)
    if isinstance(parsed, PullRequestReference):
        created = _add_pull_request(
            layout,
            bare,
            parsed,
            pr_directory_name(parsed.number, parsed.directory_hint or directory or new_branch or ""),
            github=github,
            console=console,
        )
    else:
        created = _add_branch(layout, bare, parsed, base_ref, new_branch, directory, console=console)
    _prepare_worktree(layout, created, run_hooks=run_hooks, console=console)
    return created


def _add_pull_request(
    layout: RepoLayout,
    bare: git.BareRepository,
    ref: PullRequestReference,
    directory: str,
    *,
    github: GitHubCLI | None,
    console: Console,
) -> CreatedWorktree:
    path = _new_worktree_path(layout, directory)
    with console.status(f"Fetching PR #{ref.number}…"):
        resolution = resolve_pull_request(bare, ref.number, directory, github=github)
    logger.debug("PR #%s resolved via %s", ref.number, resolution.used_tier.value)
    if resolution.used_tier is ResolutionTier.GH_CLI:
        title = _pull_request_title(bare, ref.number, github)
        if title:
            console.print(f"PR #{ref.number}: {title}")
    branch = resolution.local_branch_name
    console.print(f"Creating worktree for PR #{ref.number} (branch: {branch})")
    bare.worktree_add(path, branch)
    return CreatedWorktree(branch=branch, path=path)


def _pull_request_title(bare: git.BareRepository, number: int, github: GitHubCLI | None) -> str:
    if github is None or not github.available():
        return ""
    try:
        return github.pull_request_title(parse_remote_slug(bare.remote_url()), number)
    except WorktreeManagerError as exc:
        logger.debug("No title for PR #%s: %s", number, exc)
        return ""


def _add_branch(
    layout: RepoLayout,
    bare: git.BareRepository,
    ref: BranchReference,
    base_ref: str,
    new_branch: str | None,
    directory: str | None,
    *,
    console: Console,
) -> CreatedWorktree:
    if new_branch:
        branch, start_point = new_branch, base_ref
    else:
        branch, start_point = ref.local_name, ref.start_point
    name = directory or worktree_directory_name(branch)
    if not name:
        raise ValidationError(f"Cannot derive a directory name from '{branch}'; pass one explicitly.")
    path = _new_worktree_path(layout, name)

    if bare.local_branch_exists(branch):
        console.print(f"Creating worktree for existing branch: {branch}")
        bare.worktree_add(path, branch)
    elif bare.remote_branch_exists(branch):
        remote_ref = f"{REMOTE_PREFIX}{branch}"
        console.print(f"Creating branch '{branch}' tracking '{remote_ref}'")
        bare.worktree_add(path, branch, start_point=remote_ref)
    elif start_point:
        console.print(f"Creating new branch '{branch}' from '{start_point}'")
        bare.worktree_add(path, branch, start_point=start_point)
    else:
        console.print(f"Creating worktree for '{branch}'")
        bare.worktree_add(path, branch)
    return CreatedWorktree(branch=branch, path=path)


def _new_worktree_path(layout: RepoLayout, directory: str) -> Path:
    path = layout.worktree_path(directory)
    if path.exists():
        raise ValidationError(f"Directory '{directory}' already exists.")
    return path


def _prepare_worktree(
    layout: RepoLayout,
    created: CreatedWorktree,
    *,
    run_hooks: bool,
    console: Console,
) -> None:
    data = TemplateData(branch=created.branch, directory=created.path, root_directory=layout.root)
    if layout.files_dir.is_dir():
        console.print("Processing files…")
        try:
            process_files(layout.files_dir, created.path, data)
        except TemplateRenderError as exc:
            console.print(f"[yellow]Failed to process files: {exc}[/yellow]")
    if run_hooks:
        _run_hook_with_warning(layout, POST_CREATE, data, console)


def _run_hook_with_warning(layout: RepoLayout, name: str, data: TemplateData, console: Console) -> None:
    if not layout.hook_path(name).is_file():
        return
    console.print(f"Running {name} hook…")
    try:
        run_named_hook(layout, name, data)
    except (HookError, TemplateRenderError) as exc:
        console.print(f"[yellow]{name.capitalize()} hook failed: {exc}[/yellow]")


def remove_worktree(
    layout: RepoLayout,
    directory: Path,
    *,
    force: bool = False,
    delete_branch: bool = False,
    run_hooks: bool = True,
    cwd: Path | None = None,
    console: Console,
) -> str | None:
    """Remove a worktree and return the branch it had checked out, if any."""

    path = directory if directory.is_absolute() else layout.root / directory
    if not path.exists():
        raise ValidationError(f"Directory '{directory}' does not exist.")
    if is_within(cwd or Path.cwd(), path):
        raise ValidationError("Cannot remove the worktree you are currently in.")

    branch: str | None
    try:
        branch = git.worktree_branch(path)
    except DetachedHeadError as exc:
        if not force:
            raise DetachedHeadError(
                f"Worktree '{directory}' is in detached HEAD state; use --force to remove it anyway."
            ) from exc
        branch = None

    if not force:
        if git.has_uncommitted_changes(path):
            raise ValidationError("Worktree has uncommitted changes, use --force to remove anyway.")
        if git.has_untracked_files(path):
            console.print("[yellow]⚠ Worktree has untracked files[/yellow]")

    if run_hooks:
        data = TemplateData(branch=branch or path.name, directory=path, root_directory=layout.root)
        _run_hook_with_warning(layout, POST_DELETE, data, console)

    bare = git.BareRepository(layout.bare_dir)
    with console.status("Removing worktree…"):
        bare.worktree_remove(path, force=force)

    if delete_branch:
        if branch is None:
            console.print("[yellow]Worktree had no branch checked out; nothing to delete.[/yellow]")
        else:
            console.print(f"Deleting branch '{branch}'…")
            try:
                bare.delete_branch(branch)
            except GitCommandError as exc:
                console.print(f"[yellow]Failed to delete branch: {exc}[/yellow]")
            else:
                console.print("[green]✓ Branch deleted[/green]")
    return branch


def list_worktrees(layout: RepoLayout) -> list[WorktreeEntry]:
    return git.BareRepository(layout.bare_dir).worktree_list()


def render_worktrees_table(entries: Sequence[WorktreeEntry], console: Console) -> None:
    table = Table(title="Worktrees", show_lines=False)
    table.add_column("Name", no_wrap=True)
    table.add_column("Branch", no_wrap=True)
    table.add_column("Path")
    table.add_column("Status", no_wrap=True)
    for entry in entries:
        table.add_row(entry.name, entry.branch or "detached", str(entry.path), entry.status)
    console.print(table)


def render_worktrees_json(entries: Sequence[WorktreeEntry], console: Console) -> None:
    payload = [
        {
            "name": entry.name,
            "branch": entry.branch,
            "head": entry.head,
            "path": str(entry.path),
            "status": entry.status,
        }
        for entry in entries
    ]
    console.print_json(data=payload)


__all__ = [
    "CreatedWorktree",
    "init_repository",
    "add_worktree",
    "remove_worktree",
    "list_worktrees",
    "render_worktrees_table",
    "render_worktrees_json",
]
