"""Tests for hook script rendering and execution."""

from __future__ import annotations

import os
import shutil
import tempfile
import unittest
from pathlib import Path

from worktree_manager.config import RepoLayout
from worktree_manager.exceptions import HookError, ValidationError
from worktree_manager.hooks import POST_CREATE, extract_shebang, infer_hook_context, run_hook, run_named_hook
from worktree_manager.models import TemplateData


class ExtractShebangTests(unittest.TestCase):
    def test_splits_interpreter_and_body(self) -> None:
        self.assertEqual(
            extract_shebang("#!/usr/bin/env bash\necho hi\n"),
            ("/usr/bin/env bash", "echo hi\n"),
        )

    def test_shebang_only(self) -> None:
        self.assertEqual(extract_shebang("#!/bin/sh"), ("/bin/sh", ""))

    def test_no_shebang(self) -> None:
        self.assertEqual(extract_shebang("echo hi\n"), ("", "echo hi\n"))


@unittest.skipIf(os.name != "posix" or shutil.which("sh") is None, "requires a POSIX shell")
class RunHookTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()
        self.layout = RepoLayout(self.root)
        self.layout.hooks_dir.mkdir(parents=True)
        self.worktree = self.root / "feature-login"
        self.worktree.mkdir()
        self.data = TemplateData(branch="feature/login", directory=self.worktree, root_directory=self.root)

    def _write_hook(self, content: str, mode: int = 0o755) -> Path:
        path = self.layout.hook_path(POST_CREATE)
        path.write_text(content)
        path.chmod(mode)
        return path

    def test_renders_and_runs_in_worktree(self) -> None:
        self._write_hook("#!/bin/sh\necho '{{ branch }}' > marker.txt\npwd >> marker.txt\n")

        self.assertTrue(run_named_hook(self.layout, POST_CREATE, self.data))

        lines = (self.worktree / "marker.txt").read_text().splitlines()
        self.assertEqual(lines[0], "feature/login")
        self.assertEqual(Path(lines[1]).resolve(), self.worktree)

    def test_interpreter_arguments(self) -> None:
        self._write_hook("#!/bin/sh -e\necho ok > marker.txt\n")

        self.assertTrue(run_named_hook(self.layout, POST_CREATE, self.data))
        self.assertEqual((self.worktree / "marker.txt").read_text(), "ok\n")

    def test_missing_hook_is_skipped(self) -> None:
        self.assertFalse(run_named_hook(self.layout, POST_CREATE, self.data))

    def test_non_executable_hook_is_skipped(self) -> None:
        self._write_hook("#!/bin/sh\necho ran > marker.txt\n", mode=0o644)

        self.assertFalse(run_named_hook(self.layout, POST_CREATE, self.data))
        self.assertFalse((self.worktree / "marker.txt").exists())

    def test_missing_shebang(self) -> None:
        path = self._write_hook("echo hi\n")

        with self.assertRaises(HookError) as ctx:
            run_hook(path, self.data)
        self.assertIn("no shebang", str(ctx.exception))

    def test_undecodable_hook(self) -> None:
        path = self.layout.hook_path(POST_CREATE)
        path.write_bytes(b"#!/bin/sh\necho caf\xe9 > marker.txt\n")
        path.chmod(0o755)

        with self.assertRaises(HookError):
            run_hook(path, self.data)
        self.assertFalse((self.worktree / "marker.txt").exists())

    def test_non_zero_exit(self) -> None:
        self._write_hook("#!/bin/sh\nexit 3\n")

        with self.assertRaises(HookError) as ctx:
            run_named_hook(self.layout, POST_CREATE, self.data)
        self.assertIn("status 3", str(ctx.exception))

    def test_unknown_interpreter(self) -> None:
        self._write_hook("#!/definitely/not/a/shell\n:\n")

        with self.assertRaises(HookError):
            run_named_hook(self.layout, POST_CREATE, self.data)


@unittest.skipIf(shutil.which("git") is None, "git executable not available")
class InferHookContextTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()
        (self.root / ".worktree").mkdir()
        self.worktree = self.root / "feature-login"
        (self.worktree / "src").mkdir(parents=True)

    def test_branch_falls_back_to_directory_name(self) -> None:
        context = infer_hook_context(self.worktree)

        self.assertEqual(context.root, self.root)
        self.assertEqual(context.data.directory, self.worktree)
        self.assertEqual(context.data.root_directory, self.root)
        self.assertEqual(context.data.branch, "feature-login")

    def test_rejects_subdirectories(self) -> None:
        with self.assertRaises(ValidationError):
            infer_hook_context(self.worktree / "src")

    def test_rejects_directories_outside_a_root(self) -> None:
        with tempfile.TemporaryDirectory() as other:
            with self.assertRaises(ValidationError):
                infer_hook_context(Path(other))


if __name__ == "__main__":
    unittest.main()
