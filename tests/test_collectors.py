import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from core.collectors.change_collector import StagedChangeCollector, parse_name_status
from core.contracts.models import Change, ChangeStatus
from utils.errors import CollectorError
from utils.git import get_repository_root, get_staged_name_status


class TestParseNameStatus(unittest.TestCase):

    def test_parses_plain_and_rename_entries(self):
        output = "M\x00src/app.py\x00A\x00docs/new.md\x00R087\x00old.py\x00new.py\x00D\x00gone.txt\x00"

        changes = parse_name_status(output, Path("/repo"))

        self.assertEqual(changes, [
            Change(path=Path("/repo/src/app.py"), status=ChangeStatus.MODIFIED),
            Change(path=Path("/repo/docs/new.md"), status=ChangeStatus.ADDED),
            Change(path=Path("/repo/new.py"), status=ChangeStatus.RENAMED, old_path=Path("/repo/old.py")),
            Change(path=Path("/repo/gone.txt"), status=ChangeStatus.DELETED),
        ])

    def test_empty_output(self):
        self.assertEqual(parse_name_status("", Path("/repo")), [])

    def test_unknown_status_letter(self):
        changes = parse_name_status("X\x00weird\x00", Path("/repo"))

        self.assertEqual(changes[0].status, ChangeStatus.UNKNOWN)


class TestStagedChangeCollector(unittest.TestCase):

    @patch("core.collectors.change_collector.get_staged_name_status")
    @patch("core.collectors.change_collector.get_repository_root")
    def test_collects_from_several_repositories_in_order(self, mock_root, mock_status):
        mock_root.side_effect = [Path("/a"), Path("/b")]
        mock_status.side_effect = ["M\x00x.py\x00", "A\x00y.py\x00"]

        changes = StagedChangeCollector(["/a", "/b/sub"]).collect()

        self.assertEqual([c.path for c in changes], [Path("/a/x.py"), Path("/b/y.py")])
        mock_status.assert_any_call(Path("/a"))
        mock_status.assert_any_call(Path("/b"))

    @patch("core.collectors.change_collector.get_staged_name_status")
    @patch("core.collectors.change_collector.get_repository_root")
    def test_skips_directories_outside_git(self, mock_root, mock_status):
        mock_root.side_effect = [None, Path("/a")]
        mock_status.return_value = "M\x00x.py\x00"

        changes = StagedChangeCollector(["/tmp", "/a"]).collect()

        self.assertEqual(len(changes), 1)
        mock_status.assert_called_once_with(Path("/a"))

    @patch("core.collectors.change_collector.get_staged_name_status")
    @patch("core.collectors.change_collector.get_repository_root", return_value=Path("/a"))
    def test_same_repository_is_listed_once(self, mock_root, mock_status):
        mock_status.return_value = "M\x00x.py\x00"

        changes = StagedChangeCollector(["/a", "/a/src"]).collect()

        self.assertEqual(len(changes), 1)
        mock_status.assert_called_once()

    @patch("subprocess.run")
    def test_name_status_command(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="M\x00x.py\x00", stderr="")

        self.assertEqual(get_staged_name_status("/a"), "M\x00x.py\x00")
        mock_run.assert_called_once_with(
            ["git", "diff", "--cached", "--name-status", "-z"],
            cwd="/a",
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    @patch("subprocess.run", side_effect=FileNotFoundError)
    def test_git_not_found(self, mock_run):
        with self.assertRaises(CollectorError) as cm:
            get_staged_name_status("/a")
        self.assertIn("Git is not installed", str(cm.exception))

    @patch("subprocess.run")
    def test_git_error(self, mock_run):
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal: not a git repository")

        with self.assertRaises(CollectorError) as cm:
            get_staged_name_status("/a")
        self.assertIn("Failed to list staged changes", str(cm.exception))

    @patch("utils.git.shutil.which", return_value=None)
    @patch("subprocess.run", side_effect=FileNotFoundError)
    def test_collect_raises_when_git_is_missing(self, mock_run, mock_which):
        with self.assertRaises(CollectorError) as cm:
            StagedChangeCollector(["."]).collect()
        self.assertIn("Git is not installed", str(cm.exception))

    @patch("utils.git.shutil.which", return_value="/usr/bin/git")
    @patch("subprocess.run", side_effect=FileNotFoundError)
    def test_missing_directory_is_not_a_repository(self, mock_run, mock_which):
        self.assertIsNone(get_repository_root("/no/such/dir"))


if __name__ == "__main__":
    unittest.main()
