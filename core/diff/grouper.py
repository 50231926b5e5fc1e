from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from core.contracts.models import Change, ChangeGroup, Repository
from utils.errors import CollectorError
from utils.git import get_repository_root
from utils.logger import logger

Resolver = Callable[[Change], Optional[Repository]]


def group_changes(changes: Iterable[Change], resolve: Resolver) -> ChangeGroup:
    """
    Partitions changes by owning repository.

    Changes keep their relative input order inside each bucket, and buckets are
    ordered by the first change seen for each repository. Changes that resolve
    to no repository are dropped.
    """
    groups: ChangeGroup = {}
    dropped = 0
    for change in changes:
        repository = resolve(change)
        if repository is None:
            dropped += 1
            continue
        groups.setdefault(repository, []).append(change)

    if dropped:
        logger.warning(f"Dropped {dropped} change(s) that belong to no known repository.")
    return groups


def _nearest_existing_dir(path: Path) -> Optional[Path]:
    # Deleted files (and their directories) are gone from disk.
    for candidate in (path.parent, *path.parent.parents):
        if candidate.is_dir():
            return candidate
    return None


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


class RepositoryResolver:
    """
    Finds the repository owning a change with ``git rev-parse --show-toplevel``.

    Lookups are cached per directory, so a batch of changes costs at most one
    git call per distinct directory.
    """

    def __init__(self):
        self._cache: Dict[Path, Optional[Repository]] = {}

    def __call__(self, change: Change) -> Optional[Repository]:
        return self.resolve(change)

    def resolve(self, change: Change) -> Optional[Repository]:
        directory = _nearest_existing_dir(change.path)
        if directory is None:
            return None

        if directory not in self._cache:
            try:
                root = get_repository_root(directory)
            except CollectorError as e:
                logger.warning(f"Cannot resolve the repository of {change.path}: {e}")
                root = None
            self._cache[directory] = Repository(root=root) if root else None
            logger.debug(f"Resolved {directory} -> {root}")

        repository = self._cache[directory]
        if repository is None or not _is_within(change.path, repository.root):
            return None
        return repository
