"""Thin wrappers around git CLI commands."""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from .exceptions import DetachedHeadError, GitCommandError, ValidationError
from .models import WorktreeEntry

logger = logging.getLogger(__name__)

# Git's well-known empty tree object.
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
FALLBACK_DEFAULT_BRANCHES = ("main", "master", "develop")
_GITHUB_SHORTHAND_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*/[A-Za-z0-9_.-]+$")


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    command = ["git", *args]
    logger.debug("Running %s", " ".join(command))
    result = subprocess.run(
        command,
        cwd=str(cwd) if cwd else None,
        text=True,
        capture_output=True,
    )
    if check and result.returncode != 0:
        raise GitCommandError(command, result.returncode, stdout=result.stdout, stderr=result.stderr)
    return result


class RepositoryReferenceQuery(Protocol):
    """What the PR resolver needs from a repository."""

    def local_branch_exists(self, branch: str) -> bool: ...

    def remote_branch_exists(self, branch: str) -> bool: ...

    def fetch_refspec(self, refspec: str) -> None: ...

    def remote_url(self) -> str: ...


@dataclass(slots=True)
class BareRepository:
    """The bare repository shared by every worktree of a managed root."""

    git_dir: Path
    remote: str = "origin"

    def _git(self, args: Sequence[str], *, check: bool = True) -> subprocess.CompletedProcess[str]:
        return run_git([f"--git-dir={self.git_dir}", *args], check=check)

    def local_branch_exists(self, branch: str) -> bool:
        return self._ref_exists(f"refs/heads/{branch}")

    def remote_branch_exists(self, branch: str) -> bool:
        return self._ref_exists(f"refs/remotes/{self.remote}/{branch}")

    def _ref_exists(self, ref: str) -> bool:
        result = self._git(["show-ref", "--verify", "--quiet", ref], check=False)
        return result.returncode == 0

    def fetch_refspec(self, refspec: str) -> None:
        self._git(["fetch", self.remote, refspec])

    def fetch(self, *, prune: bool = True) -> None:
        args = ["fetch", self.remote]
        if prune:
            args.append("--prune")
        self._git(args)

    def remote_url(self) -> str:
        return self._git(["remote", "get-url", self.remote]).stdout.strip()

    def configure_remote_tracking(self) -> None:
        """Make fetches populate refs/remotes/<remote>/* like a normal clone.

        `git clone --bare` maps remote branches straight onto refs/heads/*, so
        without this `origin/<branch>` start points never exist.
        """
        self._git([
            "config",
            f"remote.{self.remote}.fetch",
            f"+refs/heads/*:refs/remotes/{self.remote}/*",
        ])

    def default_branch(self) -> str:
        result = self._git(["symbolic-ref", "--short", "HEAD"], check=False)
        branch = result.stdout.strip()
        if result.returncode == 0 and branch and self.local_branch_exists(branch):
            return branch
        result = self._git(["symbolic-ref", f"refs/remotes/{self.remote}/HEAD"], check=False)
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip().removeprefix(f"refs/remotes/{self.remote}/")
        for candidate in FALLBACK_DEFAULT_BRANCHES:
            if self.local_branch_exists(candidate):
                return candidate
        result = self._git(["branch", "--format=%(refname:short)"], check=False)
        branches = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if result.returncode != 0 or not branches:
            raise ValidationError("No branches found in the bare repository.")
        return branches[0]

    def worktree_add(self, path: Path, branch: str, start_point: str | None = None) -> None:
        """Add a worktree at `path`.

        Without a start point `branch` must already resolve (branch, tag or
        commit); with one, `branch` is created from it.
        """
        args = ["worktree", "add"]
        if start_point:
            args.extend(["-b", branch, str(path), start_point])
        else:
            args.extend([str(path), branch])
        self._git(args)
        # Submodules are optional; a repository without them makes this fail.
        run_git(["-C", str(path), "submodule", "update", "--init", "--recursive"], check=False)

    def worktree_remove(self, path: Path, *, force: bool = False) -> None:
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        args.append(str(path))
        self._git(args)

    def worktree_list(self) -> list[WorktreeEntry]:
        output = self._git(["worktree", "list", "--porcelain"])
        return parse_worktree_porcelain(output.stdout)

    def delete_branch(self, branch: str) -> None:
        self._git(["branch", "-D", branch])

    def create_initial_branch(self, branch: str) -> None:
        """Point HEAD at `branch` and give it an empty initial commit."""
        ensure_git_user_configured()
        self._git(["symbolic-ref", "HEAD", f"refs/heads/{branch}"])
        commit = self._git(["commit-tree", EMPTY_TREE, "-m", "Initial commit"]).stdout.strip()
        self._git(["update-ref", f"refs/heads/{branch}", commit])


def parse_worktree_porcelain(text: str) -> list[WorktreeEntry]:
    """Parse `git worktree list --porcelain`, leaving out the bare repository."""

    entries: list[WorktreeEntry] = []
    current: dict[str, str | bool] = {}
    for line in text.splitlines() + [""]:
        if not line.strip():
            if current.get("worktree") and not current.get("bare"):
                branch_value = current.get("branch")
                entries.append(
                    WorktreeEntry(
                        path=Path(str(current["worktree"])),
                        branch=_sanitize_branch(str(branch_value)) if branch_value else None,
                        head=str(current["HEAD"]) if current.get("HEAD") else None,
                        is_locked=bool(current.get("locked")),
                        is_prunable=bool(current.get("prunable")),
                    )
                )
            current = {}
            continue
        key, _, value = line.partition(" ")
        if key in {"bare", "detached", "locked", "prunable"}:
            current[key] = True
        else:
            current[key] = value.strip()
    return entries


def _sanitize_branch(value: str) -> str:
    return value.strip().removeprefix("refs/heads/")


def convert_github_shorthand(repo: str) -> str:
    """Turn `owner/repo` into an SSH clone URL; full URLs pass through."""

    if repo.startswith(("http://", "https://", "git@")):
        return repo
    if _GITHUB_SHORTHAND_RE.match(repo) and not Path(repo).exists():
        return f"git@github.com:{repo.removesuffix('.git')}.git"
    return repo


def clone_bare(url: str, dest: Path) -> BareRepository:
    run_git(["clone", "--bare", url, str(dest)])
    return BareRepository(dest)


def init_bare(dest: Path) -> BareRepository:
    run_git(["init", "--bare", str(dest)])
    return BareRepository(dest)


def ensure_git_user_configured() -> None:
    if run_git(["config", "--get", "user.name"], check=False).returncode != 0:
        raise ValidationError(
            'git user.name is not configured. Please run:\n  git config --global user.name "Your Name"'
        )
    if run_git(["config", "--get", "user.email"], check=False).returncode != 0:
        raise ValidationError(
            'git user.email is not configured. Please run:\n  git config --global user.email "you@example.com"'
        )


def worktree_branch(path: Path) -> str:
    """Return the branch checked out in the worktree at `path`."""

    branch = run_git(["-C", str(path), "rev-parse", "--abbrev-ref", "HEAD"]).stdout.strip()
    if not branch or branch == "HEAD":
        raise DetachedHeadError(f"Worktree {path} is in detached HEAD state.")
    return branch


def has_uncommitted_changes(path: Path) -> bool:
    result = run_git(["-C", str(path), "diff-index", "--quiet", "HEAD", "--"], check=False)
    if result.returncode == 1:
        return True
    if result.returncode != 0:
        raise GitCommandError(result.args, result.returncode, stdout=result.stdout, stderr=result.stderr)
    return False


def has_untracked_files(path: Path) -> bool:
    result = run_git(["-C", str(path), "ls-files", "--others", "--exclude-standard"])
    return bool(result.stdout.strip())


__all__ = [
    "run_git",
    "RepositoryReferenceQuery",
    "BareRepository",
    "parse_worktree_porcelain",
    "convert_github_shorthand",
    "clone_bare",
    "init_bare",
    "worktree_branch",
    "has_uncommitted_changes",
    "has_untracked_files",
]
