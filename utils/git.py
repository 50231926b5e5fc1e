import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from utils.errors import AICommitsException, CollectorError, DiffError

PathLike = Union[str, Path]


def is_git_repository(path: Optional[PathLike] = None) -> bool:
    """Checks if the given directory (default: cwd) is inside a Git work tree."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip() == "true"
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return False


def get_repository_root(path: PathLike) -> Optional[Path]:
    """
    Returns the top-level directory of the work tree containing ``path``.

    Returns:
        The absolute root path, or None if ``path`` is not inside a work tree.

    Raises:
        CollectorError: If git is not installed.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
            encoding="utf-8",
        )
    except FileNotFoundError:
        if shutil.which("git") is None:
            raise CollectorError("Git is not installed or not in PATH.")
        return None
    except (subprocess.CalledProcessError, NotADirectoryError):
        return None
    root = result.stdout.strip()
    return Path(root) if root else None


def get_hooks_dir(path: Optional[PathLike] = None) -> Path:
    """
    Returns the hooks directory of the repository at ``path``, honouring
    worktrees and ``core.hooksPath``.

    Raises:
        AICommitsException: If git is missing or ``path`` is not a repository.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--git-path", "hooks"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
            encoding="utf-8",
        )
    except FileNotFoundError:
        raise AICommitsException("Git is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        raise AICommitsException(f"Failed to locate the hooks directory: {e.stderr.strip()}")
    hooks_dir = Path(result.stdout.strip())
    return hooks_dir if hooks_dir.is_absolute() else Path(path or ".") / hooks_dir


def get_staged_name_status(root: PathLike) -> str:
    """
    Lists the staged files of a repository.

    Returns:
        The NUL-separated output of ``git diff --cached --name-status -z``.

    Raises:
        CollectorError: If git is missing or the command fails.
    """
    try:
        result = subprocess.run(
            ["git", "diff", "--cached", "--name-status", "-z"],
            cwd=root,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise CollectorError("Git is not installed or not in PATH.")
    if result.returncode != 0:
        raise CollectorError(f"Failed to list staged changes in {root}: {result.stderr.strip()}")
    return result.stdout


def get_staged_diff(root: PathLike, paths: Sequence[str]) -> str:
    """
    Retrieves the staged unified diff of ``paths`` relative to ``root``.

    Binary files are included in git's binary patch format. Paths are matched
    literally, so glob characters in file names select only that file.

    Raises:
        DiffError: If the git command fails.
    """
    command = ["git", "diff", "--cached", "--binary", "--no-color", "--no-ext-diff", "--", *(f":(literal){p}" for p in paths)]
    try:
        result = subprocess.run(
            command,
            cwd=root,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise DiffError("Git is not installed or not in PATH.")
    except OSError as e:
        raise DiffError(f"Could not run git in {root}: {e}") from e

    if result.returncode != 0:
        raise DiffError(f"Failed to get git diff in {root}: {result.stderr.strip()}")
    return result.stdout


def commit(message: str, cwd: Optional[PathLike] = None) -> None:
    """
    Creates a Git commit with the given message.

    Args:
        message: The commit message.
        cwd: The repository to commit in. Defaults to the current directory.

    Raises:
        AICommitsException: If the git commit command fails.
    """
    try:
        subprocess.run(
            ["git", "commit", "-m", message],
            cwd=cwd,
            check=True,
            capture_output=True, # Capture output to check for errors
            text=True,
        )
    except FileNotFoundError:
        raise AICommitsException("Git is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        error_message = e.stderr.strip()
        raise AICommitsException(f"Failed to create commit: {error_message}")
