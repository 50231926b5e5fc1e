from typing import Protocol

from .models import Notification


class Notifier(Protocol):
    """Shows a pipeline failure to the user. Fire-and-forget."""

    def notify(self, notification: Notification) -> None:
        ...
