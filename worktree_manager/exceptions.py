"""Custom error hierarchy for worktree-manager."""

from __future__ import annotations


class WorktreeManagerError(RuntimeError):
    """Base error for the CLI."""


class ConfigError(WorktreeManagerError):
    """Raised when an environment setting holds an unusable value."""


class RootNotFoundError(WorktreeManagerError):
    """Raised when no directory containing `.bare` is found above the start path."""


class ValidationError(WorktreeManagerError):
    """Raised when user input fails validation."""


class InvalidReference(ValidationError):
    """Raised for an empty branch or PR reference."""


class InvalidPRSyntax(ValidationError):
    """Raised when a `pr/` reference is not `pr/<number>` or `pr/<number>/<name>`."""


class GitCommandError(WorktreeManagerError):
    """Raised when an underlying git command fails."""

    def __init__(
        self,
        command: list[str],
        returncode: int,
        *,
        stdout: str | None = None,
        stderr: str | None = None,
    ):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        message = f"git command failed (exit {returncode}): {' '.join(command)}"
        details = self.output
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)

    @property
    def output(self) -> str:
        """Combined stdout/stderr, the way git prints it to a terminal."""
        return "\n".join(
            section
            for section in (self.stdout.strip(), self.stderr.strip())
            if section
        )


class DetachedHeadError(WorktreeManagerError):
    """Raised when a worktree has no branch checked out."""


class UnsupportedRemoteError(WorktreeManagerError):
    """Raised when a remote URL does not point at a GitHub repository."""


class PRMetadataUnavailable(WorktreeManagerError):
    """Raised when pull request metadata cannot be obtained."""


class MetadataToolMissing(PRMetadataUnavailable):
    """Raised when the metadata tool is not installed at all."""


class PRFetchFailed(WorktreeManagerError):
    """Raised when every strategy for fetching a pull request failed."""

    def __init__(self, number: int, diagnostics: str = ""):
        self.number = number
        self.diagnostics = diagnostics.strip()
        message = f"failed to fetch PR #{number}"
        if self.diagnostics:
            message = f"{message}: {self.diagnostics}"
        super().__init__(message)


class TemplateRenderError(WorktreeManagerError):
    """Raised when a template file cannot be rendered or written."""


class HookError(WorktreeManagerError):
    """Raised when a hook script cannot be prepared or exits non-zero."""


class UserAbort(WorktreeManagerError):
    """Raised when the user cancels an interactive flow."""


__all__ = [
    "WorktreeManagerError",
    "ConfigError",
    "RootNotFoundError",
    "ValidationError",
    "InvalidReference",
    "InvalidPRSyntax",
    "GitCommandError",
    "DetachedHeadError",
    "UnsupportedRemoteError",
    "PRMetadataUnavailable",
    "MetadataToolMissing",
    "PRFetchFailed",
    "TemplateRenderError",
    "HookError",
    "UserAbort",
]
