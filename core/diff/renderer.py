from typing import List, Sequence

from core.contracts.diff_engine import DiffEngine
from core.contracts.models import Change, DiffBlock, Repository
from utils.errors import DiffError
from utils.git import get_staged_diff

HEADER_TEMPLATE = "Repository: {root}\n"


class GitDiffEngine:
    """Computes staged unified diffs with the git command line."""

    def diff(self, repository: Repository, changes: Sequence[Change]) -> str:
        paths: List[str] = []
        for change in changes:
            for path in (change.old_path, change.path):
                if path is None:
                    continue
                try:
                    relative = path.relative_to(repository.root).as_posix()
                except ValueError:
                    raise DiffError(f"{path} is outside repository {repository.root}")
                if relative not in paths:
                    paths.append(relative)
        return get_staged_diff(repository.root, paths)


def render_block(repository: Repository, changes: Sequence[Change], engine: DiffEngine) -> DiffBlock:
    """
    Renders one repository's changes as a header line plus a unified diff.

    Raises:
        DiffError: If the engine cannot compute the diff.
    """
    text = HEADER_TEMPLATE.format(root=repository.root.as_posix()) + engine.diff(repository, changes)
    return DiffBlock(repository=repository, text=text)
