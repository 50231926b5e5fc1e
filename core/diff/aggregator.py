from typing import Iterable, List, Optional, Sequence, Tuple

from core.contracts.diff_engine import DiffEngine
from core.contracts.models import Change, DiffBlock, Repository
from core.diff.grouper import RepositoryResolver, Resolver, group_changes
from core.diff.renderer import GitDiffEngine, render_block
from utils.logger import logger


def aggregate(blocks: Iterable[DiffBlock]) -> str:
    """Joins diff blocks with a single newline between them."""
    return "\n".join(block.text for block in blocks)


class DiffBuilder:
    """
    Turns a flat list of changes into one prompt-ready diff text, one block
    per repository.
    """

    def __init__(self, resolver: Optional[Resolver] = None, engine: Optional[DiffEngine] = None):
        self.resolver = resolver or RepositoryResolver()
        self.engine = engine or GitDiffEngine()

    def build(self, changes: Sequence[Change]) -> Tuple[str, List[Repository]]:
        """
        Returns:
            The aggregated diff ("" when nothing resolved) and the repositories
            that contributed a block, in block order.

        Raises:
            DiffError: If any repository's diff cannot be computed.
        """
        groups = group_changes(changes, self.resolver)
        logger.info(f"Grouped {len(changes)} change(s) into {len(groups)} repositories.")

        blocks = [render_block(repository, group, self.engine) for repository, group in groups.items()]
        return aggregate(blocks), [block.repository for block in blocks]
