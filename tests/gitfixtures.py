"""Throwaway git repositories for integration tests."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

GIT_AVAILABLE = shutil.which("git") is not None


def git(*args: str, cwd: Path) -> str:
    result = subprocess.run(["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True)
    return result.stdout.strip()


@unittest.skipUnless(GIT_AVAILABLE, "git executable not available")
class GitRepoTestCase(unittest.TestCase):
    """Provides an `origin` repository with `main`, `feature/login` and PR #42.

    Git runs against a private global config so user identity and default
    branch do not depend on the machine running the tests.
    """

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name).resolve()

        gitconfig = self.tmp / "gitconfig"
        gitconfig.write_text(
            "[user]\n\tname = Test User\n\temail = test@example.com\n"
            "[init]\n\tdefaultBranch = main\n"
            "[advice]\n\tdetachedHead = false\n"
        )
        patcher = mock.patch.dict(
            os.environ,
            {
                "GIT_CONFIG_GLOBAL": str(gitconfig),
                "GIT_CONFIG_NOSYSTEM": "1",
                "WTM_GH_BIN": "wtm-test-missing-gh",
            },
        )
        patcher.start()
        self.addCleanup(patcher.stop)

        self.origin = self.tmp / "origin"
        self.origin.mkdir()
        git("init", cwd=self.origin)
        git("symbolic-ref", "HEAD", "refs/heads/main", cwd=self.origin)
        self._commit("README.md", "hello\n", "Initial commit")

        git("checkout", "-b", "feature/login", cwd=self.origin)
        self._commit("login.py", "print('login')\n", "Add login")

        git("checkout", "-b", "pr-source", "main", cwd=self.origin)
        self._commit("fix.txt", "fixed\n", "Fix typo")
        git("update-ref", "refs/pull/42/head", "pr-source", cwd=self.origin)
        git("checkout", "main", cwd=self.origin)
        git("branch", "-D", "pr-source", cwd=self.origin)

    def _commit(self, name: str, content: str, message: str) -> None:
        (self.origin / name).write_text(content)
        git("add", name, cwd=self.origin)
        git("commit", "-m", message, cwd=self.origin)
