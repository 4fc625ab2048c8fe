"""Classify user-supplied branch and pull request references.

Everything here is pure string analysis; the repository is never queried.
"""

from __future__ import annotations

import re

from .exceptions import InvalidPRSyntax, InvalidReference, ValidationError
from .models import BranchReference, ParsedReference, PullRequestReference

PR_PREFIX = "pr/"
REMOTE_PREFIX = "origin/"

_PR_RE = re.compile(r"^pr/(?P<number>[0-9]+)(?:/(?P<name>[^/]+))?$")


def classify(ref: str) -> ParsedReference:
    """Decide how a worktree should be created for `ref`.

    `pr/<number>` and `pr/<number>/<name>` become a `PullRequestReference`;
    `pr/` is reserved, so anything else under it is rejected instead of being
    treated as a branch name. `origin/<branch>` is split into the local branch
    name and the remote-tracking start point. Other remotes are not recognised
    and, like tags and commits, pass through unchanged.
    """

    if not ref:
        raise InvalidReference("Reference cannot be empty.")
    if ref.startswith(PR_PREFIX):
        return _classify_pull_request(ref)
    if ref.startswith(REMOTE_PREFIX) and len(ref) > len(REMOTE_PREFIX):
        return BranchReference(local_name=ref[len(REMOTE_PREFIX) :], start_point=ref)
    return BranchReference(local_name=ref)


def _classify_pull_request(ref: str) -> PullRequestReference:
    match = _PR_RE.match(ref)
    if not match:
        raise InvalidPRSyntax(
            f"Invalid PR reference '{ref}'. Use pr/<number> or pr/<number>/<name>."
        )
    number = int(match.group("number"))
    if number <= 0:
        raise InvalidPRSyntax(f"Invalid PR reference '{ref}': PR number must be positive.")
    return PullRequestReference(number=number, directory_hint=match.group("name") or "")


def parse_pr_number(text: str) -> int:
    """Validate the bare number given to `wtm pr`."""

    value = text.strip()
    if not value.isascii() or not value.isdigit():
        raise ValidationError(f"Invalid PR number: {text}")
    number = int(value)
    if number <= 0:
        raise ValidationError("PR number must be positive.")
    return number


__all__ = ["classify", "parse_pr_number", "PR_PREFIX", "REMOTE_PREFIX"]
