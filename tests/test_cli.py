"""Tests for the Typer command surface."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from gitfixtures import GitRepoTestCase
from typer.testing import CliRunner

from worktree_manager import __version__
from worktree_manager.cli import app


class CliBasicsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def test_version(self) -> None:
        result = self.runner.invoke(app, ["--version"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_invalid_pr_number(self) -> None:
        result = self.runner.invoke(app, ["pr", "abc"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid PR number", result.output)

    def test_invalid_setting(self) -> None:
        with mock.patch.dict(os.environ, {"WTM_GH_TIMEOUT": "never"}):
            result = self.runner.invoke(app, ["ls"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("WTM_GH_TIMEOUT", result.output)

    def test_outside_managed_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cwd = os.getcwd()
            os.chdir(tmp)
            try:
                result = self.runner.invoke(app, ["ls"])
            finally:
                os.chdir(cwd)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Not in a worktree-managed repository", result.output)


class CliWorkflowTests(GitRepoTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.runner = CliRunner()
        self._cwd = os.getcwd()
        self.addCleanup(os.chdir, self._cwd)
        os.chdir(self.tmp)
        result = self.runner.invoke(app, ["init", str(self.origin), "project"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.root = self.tmp / "project"
        os.chdir(self.root)

    def test_add_ls_and_rm(self) -> None:
        result = self.runner.invoke(app, ["add", "main", "topic"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Worktree created successfully", result.output)
        self.assertTrue((self.root / "topic").is_dir())

        result = self.runner.invoke(app, ["ls", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"branch": "topic"', result.output)

        result = self.runner.invoke(app, ["rm", "topic", "--delete-branch"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertFalse((self.root / "topic").exists())

    def test_pr_command(self) -> None:
        result = self.runner.invoke(app, ["pr", "42"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("pr-42", result.output)
        self.assertTrue((self.root / "pr-42" / "fix.txt").exists())

    def test_pr_fetch_failure_reports_error(self) -> None:
        result = self.runner.invoke(app, ["add", "pr/999"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("failed to fetch PR #999", result.output)

    def test_hook_command(self) -> None:
        hook = self.root / ".worktree" / "hooks" / "setup"
        hook.write_text("#!/bin/sh\necho '{{ branch }}' > setup-ran.txt\n")
        hook.chmod(0o755)
        os.chdir(self.root / "main")

        result = self.runner.invoke(app, ["hook", "setup"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual((self.root / "main" / "setup-ran.txt").read_text(), "main\n")

    def test_no_hooks_environment(self) -> None:
        hook = self.root / ".worktree" / "hooks" / "post-create"
        hook.write_text("#!/bin/sh\ntouch hook-ran.txt\n")
        hook.chmod(0o755)

        with mock.patch.dict(os.environ, {"WTM_NO_HOOKS": "1"}):
            result = self.runner.invoke(app, ["add", "feature/login"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertFalse(Path(self.root / "feature-login" / "hook-ran.txt").exists())


if __name__ == "__main__":
    unittest.main()
