"""Tests for the worktree picker helpers."""

from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from worktree_manager.exceptions import UserAbort, ValidationError
from worktree_manager.interactive import build_worktree_choices, prompt_worktree
from worktree_manager.models import WorktreeEntry


class BuildWorktreeChoicesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.entries = [
            WorktreeEntry(path=Path("/work/project/main"), branch="main"),
            WorktreeEntry(path=Path("/work/project/pr-42"), branch=None, is_locked=True),
        ]

    def test_one_choice_per_worktree(self) -> None:
        choices = build_worktree_choices(self.entries)

        self.assertEqual([choice.value for choice in choices], [str(entry.path) for entry in self.entries])
        self.assertIn("detached", choices[1].name)

    def test_duplicate_paths_raise_validation_error(self) -> None:
        duplicate_entries = self.entries + [WorktreeEntry(path=self.entries[0].path, branch="other")]

        with self.assertRaises(ValidationError):
            build_worktree_choices(duplicate_entries)


class PromptWorktreeTests(unittest.TestCase):
    def test_no_worktrees(self) -> None:
        with self.assertRaises(ValidationError):
            prompt_worktree([])

    def test_requires_tty(self) -> None:
        entries = [WorktreeEntry(path=Path("/work/project/main"), branch="main")]
        with mock.patch("worktree_manager.interactive.sys.stdin") as stdin:
            stdin.isatty.return_value = False
            with self.assertRaises(ValidationError):
                prompt_worktree(entries)

    def test_returns_selected_path(self) -> None:
        entries = [WorktreeEntry(path=Path("/work/project/main"), branch="main")]
        with mock.patch("worktree_manager.interactive.fuzzy_select", return_value="/work/project/main"):
            self.assertEqual(prompt_worktree(entries), Path("/work/project/main"))

    def test_empty_selection_aborts(self) -> None:
        entries = [WorktreeEntry(path=Path("/work/project/main"), branch="main")]
        with mock.patch("worktree_manager.interactive.fuzzy_select", return_value=None):
            with self.assertRaises(UserAbort):
                prompt_worktree(entries)


if __name__ == "__main__":
    unittest.main()
