"""Tests for directory naming helpers."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from worktree_manager.fs import ensure_directory, is_within, pr_directory_name, worktree_directory_name


class WorktreeDirectoryNameTests(unittest.TestCase):
    def test_examples(self) -> None:
        cases = {
            "main": "main",
            "feature/user-auth": "feature-user-auth",
            "fix_bug_123": "fix-bug-123",
            "Feature/MixedCase": "Feature-MixedCase",
            "release/v1.2": "release-v12",
            "a//b__c": "a-b-c",
            "/leading/": "leading",
            "weird@{chars}!": "weirdchars",
        }
        for branch, expected in cases.items():
            with self.subTest(branch=branch):
                self.assertEqual(worktree_directory_name(branch), expected)

    def test_nothing_usable(self) -> None:
        self.assertEqual(worktree_directory_name("@@@"), "")


class PRDirectoryNameTests(unittest.TestCase):
    def test_defaults_to_number(self) -> None:
        self.assertEqual(pr_directory_name(42), "pr-42")

    def test_hint_wins(self) -> None:
        self.assertEqual(pr_directory_name(42, "fix-typo"), "fix-typo")


class PathHelperTests(unittest.TestCase):
    def test_is_within_and_ensure_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            nested = root / "a" / "b"
            ensure_directory(nested)
            ensure_directory(nested)

            self.assertTrue(nested.is_dir())
            self.assertTrue(is_within(nested, root))
            self.assertTrue(is_within(root, root))
            self.assertFalse(is_within(root, nested))
            self.assertFalse(is_within(root / "ab", root / "a"))


if __name__ == "__main__":
    unittest.main()
