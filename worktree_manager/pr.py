"""Fetch a pull request into a local branch of the bare repository.

Three strategies are tried in order, stopping at the first that succeeds:

1. `gh`: look up the PR's head branch and fetch the PR into a branch of that
   name. The local branch follows the author's branch, not the caller's name.
2. `pull/<n>/head:<name>` fetched from origin into the caller's branch name.
3. `+refs/pull/<n>/head:refs/heads/<name>`, for remotes that reject the short
   form or when the branch already exists and the update is not a fast-forward.

Failures of the first two strategies are only logged. Refs written by a failed
attempt are left in place; the next fetch overwrites them.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .exceptions import (
    GitCommandError,
    PRFetchFailed,
    PRMetadataUnavailable,
    UnsupportedRemoteError,
    ValidationError,
)
from .git import RepositoryReferenceQuery
from .github import parse_remote_slug
from .models import PRResolution, RepoSlug, ResolutionTier

logger = logging.getLogger(__name__)


class PRMetadataSource(Protocol):
    def available(self) -> bool: ...

    def head_branch(self, slug: RepoSlug, number: int) -> str: ...


def primary_refspec(number: int, branch: str) -> str:
    return f"pull/{number}/head:{branch}"


def alternate_refspec(number: int, branch: str) -> str:
    return f"+refs/pull/{number}/head:refs/heads/{branch}"


def resolve_pull_request(
    repo: RepositoryReferenceQuery,
    number: int,
    desired_branch: str,
    *,
    github: PRMetadataSource | None = None,
) -> PRResolution:
    """Make sure a local branch holding PR `number` exists and return its name.

    Raises `PRFetchFailed` with git's output from the last attempt when no
    strategy worked.
    """

    if number <= 0:
        raise ValidationError("PR number must be positive.")
    if not desired_branch:
        raise ValidationError("Branch name for the PR cannot be empty.")

    if github is not None and github.available():
        try:
            head = _fetch_with_metadata(repo, number, github)
        except (PRMetadataUnavailable, UnsupportedRemoteError, GitCommandError) as exc:
            logger.debug("gh lookup for PR #%s failed, falling back to refspec: %s", number, exc)
        else:
            return PRResolution(local_branch_name=head, used_tier=ResolutionTier.GH_CLI)
    else:
        logger.debug("PR metadata tool unavailable, using refspec fetch for PR #%s", number)

    try:
        repo.fetch_refspec(primary_refspec(number, desired_branch))
    except GitCommandError as exc:
        logger.debug("Fetching pull/%s/head failed, retrying with full refspec: %s", number, exc)
    else:
        return PRResolution(local_branch_name=desired_branch, used_tier=ResolutionTier.REFSPEC)

    try:
        repo.fetch_refspec(alternate_refspec(number, desired_branch))
    except GitCommandError as exc:
        raise PRFetchFailed(number, exc.output or str(exc)) from exc
    return PRResolution(local_branch_name=desired_branch, used_tier=ResolutionTier.REFSPEC)


def _fetch_with_metadata(
    repo: RepositoryReferenceQuery,
    number: int,
    github: PRMetadataSource,
) -> str:
    slug = parse_remote_slug(repo.remote_url())
    head = github.head_branch(slug, number)
    if not head:
        raise PRMetadataUnavailable(f"PR #{number} metadata has no head branch")
    repo.fetch_refspec(primary_refspec(number, head))
    return head


__all__ = [
    "PRMetadataSource",
    "resolve_pull_request",
    "primary_refspec",
    "alternate_refspec",
]
