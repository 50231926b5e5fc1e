from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChangeStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    TYPE_CHANGED = "type_changed"
    UNKNOWN = "unknown"

    @classmethod
    def from_git(cls, letter: str) -> "ChangeStatus":
        """Maps a ``git diff --name-status`` letter (e.g. ``M``, ``R100``) to a status."""
        return _GIT_STATUS.get(letter[:1].upper(), cls.UNKNOWN)


_GIT_STATUS = {
    "A": ChangeStatus.ADDED,
    "M": ChangeStatus.MODIFIED,
    "D": ChangeStatus.DELETED,
    "R": ChangeStatus.RENAMED,
    "C": ChangeStatus.COPIED,
    "T": ChangeStatus.TYPE_CHANGED,
}


class Change(BaseModel):
    """One staged file-level edit, snapshotted when the command starts."""
    model_config = ConfigDict(frozen=True)

    path: Path
    status: ChangeStatus = ChangeStatus.MODIFIED
    old_path: Optional[Path] = None


class Repository(BaseModel):
    """A git work tree, identified by its root directory."""
    model_config = ConfigDict(frozen=True)

    root: Path


# Insertion-ordered: repositories appear in the order they were first seen.
ChangeGroup = Dict[Repository, List[Change]]


class DiffBlock(BaseModel):
    repository: Repository
    text: str


class CompletionStatus(str, Enum):
    SUCCESS = "success"
    EMPTY_DIFF = "empty_diff"
    PROMPT_TOO_LARGE = "prompt_too_large"
    NO_TARGET = "no_target"
    BACKEND_ERROR = "backend_error"
    DIFF_FAILED = "diff_failed"


class CompletionResult(BaseModel):
    status: CompletionStatus
    message: Optional[str] = None
    error: Optional[str] = None
    token_count: Optional[int] = None
    repositories: List[Repository] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is CompletionStatus.SUCCESS


class NotificationKind(str, Enum):
    EMPTY_DIFF = "empty_diff"
    PROMPT_TOO_LARGE = "prompt_too_large"
    NO_TARGET = "no_target"
    BACKEND_ERROR = "backend_error"
    DIFF_FAILED = "diff_failed"


class Notification(BaseModel):
    kind: NotificationKind
    message: Optional[str] = None

    @classmethod
    def empty_diff(cls) -> "Notification":
        return cls(kind=NotificationKind.EMPTY_DIFF)

    @classmethod
    def prompt_too_large(cls) -> "Notification":
        return cls(kind=NotificationKind.PROMPT_TOO_LARGE)

    @classmethod
    def no_target(cls) -> "Notification":
        return cls(kind=NotificationKind.NO_TARGET)

    @classmethod
    def backend_error(cls, message: str) -> "Notification":
        return cls(kind=NotificationKind.BACKEND_ERROR, message=message)

    @classmethod
    def diff_failed(cls, message: str) -> "Notification":
        return cls(kind=NotificationKind.DIFF_FAILED, message=message)
