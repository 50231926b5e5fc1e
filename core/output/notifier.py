from rich.console import Console
from rich.markup import escape

from core.contracts.models import Notification, NotificationKind
from utils.logger import logger

TITLES = {
    NotificationKind.EMPTY_DIFF: "No changes to describe",
    NotificationKind.PROMPT_TOO_LARGE: "The diff is too large for the model",
    NotificationKind.NO_TARGET: "No commit message destination available",
    NotificationKind.BACKEND_ERROR: "Commit message generation failed",
    NotificationKind.DIFF_FAILED: "Could not compute the diff",
}

HINTS = {
    NotificationKind.EMPTY_DIFF: "Stage some changes with 'git add' first.",
    NotificationKind.PROMPT_TOO_LARGE: "Stage fewer files or raise 'prompt.max_tokens'.",
    NotificationKind.NO_TARGET: "Check the --output path or the commit message file.",
}


def describe(notification: Notification) -> str:
    title = TITLES[notification.kind]
    detail = notification.message or HINTS.get(notification.kind, "")
    return f"{title}: {detail}" if detail else title


class ConsoleNotifier:
    """Prints notifications with rich."""

    def __init__(self, console: Console):
        self.console = console

    def notify(self, notification: Notification) -> None:
        logger.debug(f"Notification: {notification.kind.value} {notification.message or ''}")
        style = "bold red" if notification.kind in (NotificationKind.BACKEND_ERROR, NotificationKind.DIFF_FAILED) else "bold yellow"
        self.console.print(f"[{style}]{escape(describe(notification))}[/{style}]")


class LogNotifier:
    """Sends notifications to the log only. Used in hook mode, where git owns the terminal."""

    def notify(self, notification: Notification) -> None:
        if notification.kind in (NotificationKind.BACKEND_ERROR, NotificationKind.DIFF_FAILED):
            logger.error(describe(notification))
        else:
            logger.warning(describe(notification))
