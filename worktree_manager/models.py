"""Shared dataclasses used throughout the CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Union


class RefKind(enum.Enum):
    BRANCH = "branch"
    PULL_REQUEST = "pull-request"


@dataclass(frozen=True, slots=True)
class BranchReference:
    """A local branch, `origin/<branch>`, tag or commit-ish.

    `start_point` is the remote-tracking ref to branch from when `local_name`
    does not exist locally yet, or empty when there is none.
    """

    local_name: str
    start_point: str = ""

    @property
    def kind(self) -> RefKind:
        return RefKind.BRANCH


@dataclass(frozen=True, slots=True)
class PullRequestReference:
    """A `pr/<number>[/<name>]` reference."""

    number: int
    directory_hint: str = ""

    @property
    def kind(self) -> RefKind:
        return RefKind.PULL_REQUEST


ParsedReference = Union[BranchReference, PullRequestReference]


class ResolutionTier(enum.Enum):
    GH_CLI = "gh-cli"
    REFSPEC = "refspec"


@dataclass(frozen=True, slots=True)
class PRResolution:
    local_branch_name: str
    used_tier: ResolutionTier


@dataclass(frozen=True, slots=True)
class RepoSlug:
    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class TemplateData:
    """Values exposed to file templates and hook scripts."""

    branch: str
    directory: Path
    root_directory: Path

    def as_context(self) -> dict[str, str]:
        return {
            "branch": self.branch,
            "directory": str(self.directory),
            "root_directory": str(self.root_directory),
        }


@dataclass(slots=True)
class WorktreeEntry:
    path: Path
    branch: str | None
    head: str | None = None
    is_locked: bool = False
    is_prunable: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def status(self) -> str:
        if self.is_locked:
            return "locked"
        if self.is_prunable:
            return "prunable"
        return "active"


__all__ = [
    "RefKind",
    "BranchReference",
    "PullRequestReference",
    "ParsedReference",
    "ResolutionTier",
    "PRResolution",
    "RepoSlug",
    "TemplateData",
    "WorktreeEntry",
]
