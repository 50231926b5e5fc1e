import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from core.contracts.models import Change, ChangeStatus, DiffBlock, Repository
from core.diff.aggregator import DiffBuilder, aggregate
from core.diff.renderer import GitDiffEngine, render_block
from utils.errors import DiffError
from utils.git import get_staged_diff

REPO_A = Repository(root=Path("/work/a"))
REPO_B = Repository(root=Path("/work/b"))


class FakeEngine:
    def __init__(self):
        self.calls = []

    def diff(self, repository, changes):
        self.calls.append((repository, list(changes)))
        return "".join(
            f"diff --git a/{c.path.name} b/{c.path.name}\n+{c.status.value}\n" for c in changes
        )


def resolve_by_prefix(change):
    for repository in (REPO_A, REPO_B):
        if repository.root in change.path.parents:
            return repository
    return None


class TestRenderBlock(unittest.TestCase):

    def test_block_starts_with_repository_header(self):
        changes = [Change(path=Path("/work/a/app.py"))]

        block = render_block(REPO_A, changes, FakeEngine())

        self.assertEqual(block.repository, REPO_A)
        self.assertEqual(
            block.text,
            "Repository: /work/a\ndiff --git a/app.py b/app.py\n+modified\n",
        )

    def test_engine_errors_propagate(self):
        engine = MagicMock()
        engine.diff.side_effect = DiffError("unreadable")

        with self.assertRaises(DiffError):
            render_block(REPO_A, [Change(path=Path("/work/a/app.py"))], engine)


class TestAggregate(unittest.TestCase):

    def test_joins_blocks_with_single_newline(self):
        blocks = [
            DiffBlock(repository=REPO_A, text="Repository: /work/a\n+a\n"),
            DiffBlock(repository=REPO_B, text="Repository: /work/b\n+b\n"),
        ]

        self.assertEqual(aggregate(blocks), "Repository: /work/a\n+a\n\nRepository: /work/b\n+b\n")

    def test_no_blocks_gives_empty_text(self):
        self.assertEqual(aggregate([]), "")


class TestGitDiffEngine(unittest.TestCase):

    @patch("core.diff.renderer.get_staged_diff", return_value="diff text")
    def test_passes_paths_relative_to_root(self, mock_diff):
        changes = [
            Change(path=Path("/work/a/src/new.py"), status=ChangeStatus.RENAMED, old_path=Path("/work/a/src/old.py")),
            Change(path=Path("/work/a/README.md")),
            Change(path=Path("/work/a/README.md")),
        ]

        result = GitDiffEngine().diff(REPO_A, changes)

        self.assertEqual(result, "diff text")
        mock_diff.assert_called_once_with(Path("/work/a"), ["src/old.py", "src/new.py", "README.md"])

    @patch("core.diff.renderer.get_staged_diff")
    def test_path_outside_repository_is_a_diff_error(self, mock_diff):
        with self.assertRaises(DiffError):
            GitDiffEngine().diff(REPO_A, [Change(path=Path("/work/b/x.py"))])
        mock_diff.assert_not_called()

    @patch("subprocess.run")
    def test_get_staged_diff_includes_binary_patches(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="diff --git a/x b/x\n", stderr="")

        result = get_staged_diff("/work/a", ["x"])

        self.assertEqual(result, "diff --git a/x b/x\n")
        mock_run.assert_called_once_with(
            ["git", "diff", "--cached", "--binary", "--no-color", "--no-ext-diff", "--", ":(literal)x"],
            cwd="/work/a",
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    @patch("subprocess.run")
    def test_get_staged_diff_failure_raises(self, mock_run):
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal: bad object")

        with self.assertRaises(DiffError) as cm:
            get_staged_diff("/work/a", ["x"])
        self.assertIn("fatal: bad object", str(cm.exception))

    @patch("subprocess.run")
    def test_get_staged_diff_matches_glob_characters_literally(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")

        get_staged_diff("/work/a", ["src/*.py", "docs/[draft].md"])

        command = mock_run.call_args.args[0]
        self.assertEqual(command[-3:], ["--", ":(literal)src/*.py", ":(literal)docs/[draft].md"])


class TestDiffBuilder(unittest.TestCase):

    def test_two_repositories_produce_two_headed_blocks(self):
        engine = FakeEngine()
        builder = DiffBuilder(resolver=resolve_by_prefix, engine=engine)
        changes = [
            Change(path=Path("/work/a/app.py")),
            Change(path=Path("/work/b/new.py"), status=ChangeStatus.ADDED),
        ]

        diff, repositories = builder.build(changes)

        self.assertEqual(repositories, [REPO_A, REPO_B])
        blocks = diff.split("\nRepository: ")
        self.assertEqual(len(blocks), 2)
        self.assertTrue(blocks[0].startswith("Repository: /work/a\n"))
        self.assertTrue(blocks[1].startswith("/work/b\n"))
        self.assertEqual(len(engine.calls), 2)

    def test_unresolvable_changes_give_empty_diff(self):
        engine = FakeEngine()
        builder = DiffBuilder(resolver=resolve_by_prefix, engine=engine)

        diff, repositories = builder.build([Change(path=Path("/elsewhere/x.py"))])

        self.assertEqual(diff, "")
        self.assertEqual(repositories, [])
        self.assertEqual(engine.calls, [])


if __name__ == "__main__":
    unittest.main()
