"""Managed repository layout and environment settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .exceptions import ConfigError, RootNotFoundError

BARE_DIR_NAME = ".bare"
METADATA_DIR_NAME = ".worktree"

DEFAULT_GH_EXECUTABLE = "gh"
DEFAULT_GH_TIMEOUT = 30.0

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"", "0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class RepoLayout:
    """Filesystem locations under a managed root directory."""

    root: Path

    @classmethod
    def from_root(cls, root: Path) -> "RepoLayout":
        return cls(root=root.expanduser().resolve())

    @property
    def bare_dir(self) -> Path:
        return self.root / BARE_DIR_NAME

    @property
    def metadata_dir(self) -> Path:
        return self.root / METADATA_DIR_NAME

    @property
    def files_dir(self) -> Path:
        return self.metadata_dir / "files"

    @property
    def hooks_dir(self) -> Path:
        return self.metadata_dir / "hooks"

    def hook_path(self, name: str) -> Path:
        return self.hooks_dir / name

    def worktree_path(self, directory: str) -> Path:
        return self.root / directory


@dataclass(frozen=True, slots=True)
class Settings:
    gh_executable: str = DEFAULT_GH_EXECUTABLE
    gh_timeout: float = DEFAULT_GH_TIMEOUT
    hooks_disabled: bool = False


def find_root(start: Path | None = None) -> Path:
    """Walk up from `start` to the directory holding `.bare`."""

    current = (start or Path.cwd()).expanduser().resolve()
    for candidate in (current, *current.parents):
        if (candidate / BARE_DIR_NAME).is_dir():
            return candidate
    raise RootNotFoundError(
        f"Not in a worktree-managed repository (no {BARE_DIR_NAME} directory found above {current})."
    )


def load_layout(start: Path | None = None) -> RepoLayout:
    return RepoLayout.from_root(find_root(start))


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    gh_executable = env.get("WTM_GH_BIN", "").strip() or DEFAULT_GH_EXECUTABLE
    return Settings(
        gh_executable=gh_executable,
        gh_timeout=_parse_timeout(env.get("WTM_GH_TIMEOUT")),
        hooks_disabled=_parse_bool("WTM_NO_HOOKS", env.get("WTM_NO_HOOKS")),
    )


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_GH_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"WTM_GH_TIMEOUT must be a number of seconds, got {raw!r}.") from None
    if value <= 0:
        raise ConfigError("WTM_GH_TIMEOUT must be greater than zero.")
    return value


def _parse_bool(name: str, raw: str | None) -> bool:
    value = (raw or "").strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{name} must be one of {sorted(_TRUTHY | _FALSY - {''})}, got {raw!r}.")


__all__ = [
    "RepoLayout",
    "Settings",
    "find_root",
    "load_layout",
    "load_settings",
]
