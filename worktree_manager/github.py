"""Pull request metadata via the GitHub CLI (`gh`)."""

from __future__ import annotations

import json
import logging
import re
import shutil
import subprocess
from dataclasses import dataclass

from .exceptions import MetadataToolMissing, PRMetadataUnavailable, UnsupportedRemoteError
from .models import RepoSlug

logger = logging.getLogger(__name__)

_GITHUB_REMOTE_RE = re.compile(
    r"^(?:git@github\.com:|https?://github\.com/)(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?$"
)


def tool_available(name: str) -> bool:
    return shutil.which(name) is not None


def parse_remote_slug(url: str) -> RepoSlug:
    """Extract owner/name from a GitHub remote URL.

    Only `git@github.com:<owner>/<repo>` and `http(s)://github.com/<owner>/<repo>`
    are recognised, each with an optional `.git` suffix.
    """

    match = _GITHUB_REMOTE_RE.match(url.strip())
    if not match:
        raise UnsupportedRemoteError(f"Unsupported remote URL: {url}")
    return RepoSlug(owner=match.group("owner"), name=match.group("name"))


@dataclass(slots=True)
class GitHubCLI:
    executable: str = "gh"
    timeout: float = 30.0

    def available(self) -> bool:
        return tool_available(self.executable)

    def head_branch(self, slug: RepoSlug, number: int) -> str:
        """Return the source branch name the PR author pushed."""
        data = self._pr_view(slug, number, "headRefName")
        head = data.get("headRefName")
        return head.strip() if isinstance(head, str) else ""

    def pull_request_title(self, slug: RepoSlug, number: int) -> str:
        data = self._pr_view(slug, number, "title")
        title = data.get("title")
        return title.strip() if isinstance(title, str) else ""

    def _pr_view(self, slug: RepoSlug, number: int, fields: str) -> dict:
        command = [
            self.executable,
            "pr",
            "view",
            str(number),
            "--repo",
            str(slug),
            "--json",
            fields,
        ]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise MetadataToolMissing(f"{self.executable} command not found") from None
        except subprocess.TimeoutExpired as exc:
            raise PRMetadataUnavailable(
                f"{self.executable} timed out after {self.timeout:g}s"
            ) from exc
        if result.returncode != 0:
            raise PRMetadataUnavailable(
                f"{self.executable} pr view failed: {result.stderr.strip()}"
            )
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise PRMetadataUnavailable(
                f"{self.executable} returned invalid JSON: {result.stdout[:200]}"
            ) from exc
        if not isinstance(data, dict):
            raise PRMetadataUnavailable(f"{self.executable} returned unexpected JSON: {data!r}")
        return data


__all__ = ["tool_available", "parse_remote_slug", "GitHubCLI"]
