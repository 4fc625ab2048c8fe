"""Typer CLI entrypoint for worktree-manager."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console

from . import __version__
from .config import RepoLayout, Settings, load_layout, load_settings
from .exceptions import UserAbort, WorktreeManagerError
from .github import GitHubCLI
from .hooks import infer_hook_context, run_hook
from .interactive import prompt_worktree
from .refs import PR_PREFIX, parse_pr_number
from .worktrees import (
    DEFAULT_INITIAL_BRANCH,
    add_worktree,
    init_repository,
    list_worktrees,
    remove_worktree,
    render_worktrees_json,
    render_worktrees_table,
)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Git worktree manager with templates, hooks and PR checkout.",
)


@dataclass(slots=True)
class AppState:
    settings: Settings
    console: Console
    verbose: bool = False

    def github(self) -> GitHubCLI:
        return GitHubCLI(executable=self.settings.gh_executable, timeout=self.settings.gh_timeout)

    def run_hooks(self, no_hooks: bool) -> bool:
        return not (no_hooks or self.settings.hooks_disabled)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"worktree-manager {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the worktree-manager version and exit.",
    ),
) -> None:
    _ = version  # handled via callback
    configure_logging(verbose)
    console = Console()
    try:
        settings = load_settings()
    except WorktreeManagerError as exc:
        _fail(console, exc)
    ctx.obj = AppState(settings=settings, console=console, verbose=verbose)


def _require_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):  # pragma: no cover
        raise typer.Exit(1)
    return state


def _fail(console: Console, exc: Exception, code: int = 1) -> NoReturn:
    console.print(f"[red]Error:[/red] {exc}", highlight=False)
    raise typer.Exit(code) from exc


@app.command()
def init(
    ctx: typer.Context,
    repo: str = typer.Argument(..., help="GitHub owner/repo, a git URL, or a name when used with --new."),
    directory: Optional[Path] = typer.Argument(None, help="Root directory to create (defaults to the repo name)."),
    new: bool = typer.Option(False, "--new", help="Create a new repository instead of cloning."),
    branch: str = typer.Option(
        DEFAULT_INITIAL_BRANCH,
        "--branch",
        "-b",
        help="Initial branch name for --new repositories.",
    ),
    no_hooks: bool = typer.Option(False, "--no-hooks", help="Skip running post-create hooks."),
) -> None:
    """Initialize a new worktree-managed repository around a bare clone."""
    state = _require_state(ctx)
    try:
        layout, created = init_repository(
            repo,
            directory,
            new=new,
            initial_branch=branch,
            run_hooks=state.run_hooks(no_hooks),
            console=state.console,
        )
    except WorktreeManagerError as exc:
        _fail(state.console, exc)
    state.console.print("[green]✓ Repository initialized successfully[/green]")
    state.console.print(f"  Root directory: {layout.root}")
    state.console.print(f"  Default branch worktree: {created.path}")


@app.command()
def add(
    ctx: typer.Context,
    base_branch: str = typer.Argument(..., help="Branch, origin/<branch>, tag, commit, or pr/<number>[/<name>]."),
    new_branch: Optional[str] = typer.Argument(None, help="Branch to create from the base branch."),
    directory: Optional[str] = typer.Argument(None, help="Directory name for the worktree."),
    no_hooks: bool = typer.Option(False, "--no-hooks", help="Skip running post-create hooks."),
) -> None:
    """Add a worktree for an existing or new branch, or a pull request.

    If the branch doesn't exist it is created from the base branch.
    """
    state = _require_state(ctx)
    _add(state, base_branch, new_branch, directory, no_hooks=no_hooks)


@app.command()
def pr(
    ctx: typer.Context,
    number: str = typer.Argument(..., help="Pull request number."),
    directory: Optional[str] = typer.Argument(None, help="Directory name (defaults to pr-<number>)."),
    no_hooks: bool = typer.Option(False, "--no-hooks", help="Skip running post-create hooks."),
) -> None:
    """Check out a pull request (alias for `add pr/<number>`)."""
    state = _require_state(ctx)
    try:
        pr_number = parse_pr_number(number)
    except WorktreeManagerError as exc:
        _fail(state.console, exc)
    _add(state, f"{PR_PREFIX}{pr_number}", directory, None, no_hooks=no_hooks)


def _add(
    state: AppState,
    base_branch: str,
    new_branch: str | None,
    directory: str | None,
    *,
    no_hooks: bool,
) -> None:
    try:
        created = add_worktree(
            load_layout(),
            base_branch,
            new_branch,
            directory,
            run_hooks=state.run_hooks(no_hooks),
            github=state.github(),
            console=state.console,
        )
    except WorktreeManagerError as exc:
        _fail(state.console, exc)
    state.console.print("[green]✓ Worktree created successfully[/green]")
    state.console.print(f"  Branch: {created.branch}")
    state.console.print(f"  Directory: {created.path}")


@app.command()
def rm(
    ctx: typer.Context,
    directory: Optional[Path] = typer.Argument(
        None,
        help="Worktree directory. If omitted, an interactive picker is shown.",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Force removal even with uncommitted changes."),
    delete_branch: bool = typer.Option(False, "--delete-branch", "-d", help="Also delete the branch."),
    no_hooks: bool = typer.Option(False, "--no-hooks", help="Skip running post-delete hooks."),
) -> None:
    """Remove a worktree and optionally delete its branch."""
    state = _require_state(ctx)
    try:
        layout = load_layout()
        target = directory
        if target is None:
            target = prompt_worktree(list_worktrees(layout))
        remove_worktree(
            layout,
            target,
            force=force,
            delete_branch=delete_branch,
            run_hooks=state.run_hooks(no_hooks),
            console=state.console,
        )
    except UserAbort as exc:
        state.console.print("Selection cancelled.")
        raise typer.Exit(1) from exc
    except WorktreeManagerError as exc:
        _fail(state.console, exc)
    state.console.print("[green]✓ Worktree removed successfully[/green]")


@app.command()
def ls(
    ctx: typer.Context,
    json_: bool = typer.Option(False, "--json", help="Output JSON instead of a table."),
) -> None:
    """List all worktrees."""
    state = _require_state(ctx)
    try:
        entries = list_worktrees(load_layout())
    except WorktreeManagerError as exc:
        _fail(state.console, exc)
    if json_:
        render_worktrees_json(entries, state.console)
        return
    if not entries:
        state.console.print("No worktrees registered for this repository.")
        return
    render_worktrees_table(entries, state.console)


@app.command()
def hook(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Hook name under .worktree/hooks/."),
) -> None:
    """Render and execute a hook script for the current worktree.

    Must be run from a branch directory (a direct child of the root). Templates
    see `branch`, `directory` and `root_directory`.
    """
    state = _require_state(ctx)
    try:
        context = infer_hook_context(Path.cwd())
        hook_path = RepoLayout(context.root).hook_path(name)
        if not run_hook(hook_path, context.data):
            state.console.print(f"[yellow]Hook '{name}' not found or not executable: {hook_path}[/yellow]")
    except WorktreeManagerError as exc:
        _fail(state.console, exc)


__all__ = ["app", "configure_logging"]
