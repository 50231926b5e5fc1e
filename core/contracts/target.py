from typing import Protocol


class MessageTarget(Protocol):
    """Where a generated commit message ends up."""

    def set_text(self, text: str) -> None:
        ...
