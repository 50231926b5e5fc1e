from typing import Protocol, Sequence

from .models import Change, Repository


class DiffEngine(Protocol):
    def diff(self, repository: Repository, changes: Sequence[Change]) -> str:
        """
        Returns the unified diff of ``changes`` relative to the repository root,
        using ``\\n`` line separators.

        Raises:
            DiffError: If the diff cannot be computed.
        """
        ...
