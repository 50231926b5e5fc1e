from typing import Protocol


class UsageCounter(Protocol):
    """Counts successful generations."""

    def record_hit(self) -> int:
        ...
