from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from utils.logger import logger


class MessageFile:
    """Writes the message into a file, e.g. the one git passes to prepare-commit-msg."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def open(cls, path: Union[str, Path, None]) -> Optional["MessageFile"]:
        """Returns a target for ``path``, or None if it cannot be written to."""
        if path is None:
            return None
        path = Path(path)
        if not path.parent.is_dir() or path.is_dir():
            logger.warning(f"Commit message file {path} is not writable.")
            return None
        return cls(path)

    def set_text(self, text: str) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)
        logger.debug(f"Wrote commit message to {self.path}")


class ConsoleTarget:
    """Shows the message in a panel and remembers it for the caller."""

    def __init__(self, console: Console):
        self.console = console
        self.text: Optional[str] = None

    def set_text(self, text: str) -> None:
        self.text = text
        self.console.print(Panel(
            Text(text),
            title="[bold cyan]Generated commit message[/bold cyan]",
            border_style="cyan",
            expand=False,
        ))
