from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from core.contracts.models import Change, ChangeStatus
from utils.git import get_repository_root, get_staged_name_status
from utils.logger import logger


def parse_name_status(output: str, root: Path) -> List[Change]:
    """
    Parses ``git diff --cached --name-status -z`` output into Changes.

    Renames and copies carry two paths (source, destination); every other
    status carries one.
    """
    fields = output.split("\x00")
    changes: List[Change] = []
    i = 0
    while i < len(fields):
        letter = fields[i]
        if not letter:
            i += 1
            continue
        status = ChangeStatus.from_git(letter)
        if status in (ChangeStatus.RENAMED, ChangeStatus.COPIED):
            if i + 2 >= len(fields):
                logger.warning(f"Truncated name-status entry for {letter!r}, ignoring it.")
                break
            old_path, new_path = fields[i + 1], fields[i + 2]
            changes.append(Change(path=root / new_path, status=status, old_path=root / old_path))
            i += 3
        else:
            if i + 1 >= len(fields):
                logger.warning(f"Truncated name-status entry for {letter!r}, ignoring it.")
                break
            changes.append(Change(path=root / fields[i + 1], status=status))
            i += 2
    return changes


class StagedChangeCollector:
    """
    Collects the staged changes of one or more repositories.
    """

    def __init__(self, repo_dirs: Optional[Iterable[Union[str, Path]]] = None):
        self.repo_dirs: Sequence[Path] = [Path(d) for d in (repo_dirs or ["."])]

    def collect(self) -> List[Change]:
        """
        Lists staged changes with absolute paths, in repository order then git order.

        Directories that are not inside a git work tree are skipped.

        Raises:
            CollectorError: If git is missing or a listing fails.
        """
        changes: List[Change] = []
        seen_roots = set()
        for repo_dir in self.repo_dirs:
            root = get_repository_root(repo_dir)
            if root is None:
                logger.warning(f"{repo_dir} is not inside a git repository, skipping it.")
                continue
            if root in seen_roots:
                continue
            seen_roots.add(root)

            repo_changes = parse_name_status(get_staged_name_status(root), root)
            logger.info(f"Found {len(repo_changes)} staged change(s) in {root}")
            changes.extend(repo_changes)
        return changes
