"""
Local working copy access.

This module provides the WorkingCopy class, which answers the questions the
publish service asks about the local checkout: which branch is checked
out, which paths changed, whether anything besides the git metadata is
left, and what a file's bytes are.
"""

from __future__ import annotations

import logging
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from ghcommit.core.errors import LocalIOError, PublishError

logger = logging.getLogger(__name__)

METADATA_DIR = ".git"

# Porcelain codes that carry a second (origin) path in -z output
_ORIGIN_PATH_CODES = {"R", "C"}


class WorkingCopyError(PublishError):
    """Raised when the working copy cannot be inspected."""

    pass


def parse_porcelain(output: str) -> dict[str, str]:
    """
    Parse ``git status --porcelain -z`` output.

    The effective code of a path is its worktree column, falling back to
    the index column when the worktree is unmodified, so staged additions
    and staged deletions are reported as such.

    A rename is followed by the path it came from; that path is reported
    as deleted unless it has a status line of its own. The source of a
    copy stays in place and is not reported.

    Args:
        output: Raw NUL-separated porcelain output

    Returns:
        Dict mapping path to its single-character status code

    Example:
        >>> parse_porcelain("?? new.txt\\0 M app.py\\0R  b.txt\\0a.txt\\0")
        {'new.txt': '?', 'app.py': 'M', 'b.txt': 'R', 'a.txt': 'D'}
    """
    statuses: dict[str, str] = {}
    renamed_from: list[str] = []
    records = iter(output.split("\0"))

    for record in records:
        if len(record) < 4:
            continue

        index_code, worktree_code, path = record[0], record[1], record[3:]

        # Renames and copies, staged or intent-to-add, are followed by their origin
        if index_code in _ORIGIN_PATH_CODES or worktree_code in _ORIGIN_PATH_CODES:
            origin = next(records, "")
            if "R" in (index_code, worktree_code) and origin:
                renamed_from.append(origin)

        statuses[path] = worktree_code if worktree_code != " " else index_code

    for origin in renamed_from:
        statuses.setdefault(origin, "D")

    return statuses


class WorkingCopy:
    """
    A local git working copy.

    Example:
        >>> wc = WorkingCopy(Path("."))
        >>> wc.current_branch()
        'main'
        >>> wc.status()
        {'docs/index.md': 'M'}
    """

    def __init__(self, root: Path) -> None:
        """
        Open a working copy.

        Args:
            root: Working copy root (the directory holding .git)

        Raises:
            WorkingCopyError: If root is not a git working copy
        """
        self.root = Path(root).resolve()

        try:
            self.repo = Repo(self.root)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise WorkingCopyError(f"Not a git repository: {self.root}") from e

    def current_branch(self) -> str:
        """
        Name of the checked-out branch.

        Raises:
            WorkingCopyError: If HEAD is detached
        """
        try:
            return self.repo.active_branch.name
        except TypeError as e:
            raise WorkingCopyError(
                f"HEAD is detached in {self.root}; pass the base branch explicitly"
            ) from e

    def status(self) -> dict[str, str]:
        """
        Per-path change codes relative to the checked-out revision.

        Returns:
            Dict mapping working-copy-relative paths to status codes
        """
        try:
            output = self.repo.git.status("--porcelain", "-z", "--untracked-files=all")
        except GitCommandError as e:
            raise WorkingCopyError(f"git status failed: {e.stderr or e}") from e

        statuses = parse_porcelain(output)
        logger.debug("Working copy status: %d changed paths", len(statuses))
        return statuses

    def only_metadata_remains(self) -> bool:
        """Whether the root holds nothing but the git metadata directory."""
        try:
            names = [entry.name for entry in self.root.iterdir()]
        except OSError as e:
            raise LocalIOError(f"Failed to list {self.root}: {e}", path=str(self.root)) from e

        return names == [METADATA_DIR]

    def path_for(self, relative: str) -> Path:
        """Absolute path of a working-copy-relative path."""
        return self.root / relative

    def read_bytes(self, relative: str) -> bytes:
        """
        Read a file from the working copy.

        Raises:
            LocalIOError: If the file cannot be read
        """
        try:
            return self.path_for(relative).read_bytes()
        except OSError as e:
            raise LocalIOError(f"Failed to read {relative}: {e}", path=relative) from e

    def write_bytes(self, relative: str, content: bytes) -> None:
        """
        Write a file into the working copy.

        Raises:
            LocalIOError: If the file cannot be written
        """
        try:
            self.path_for(relative).write_bytes(content)
        except OSError as e:
            raise LocalIOError(f"Failed to write {relative}: {e}", path=relative) from e

    def remove(self, relative: str) -> None:
        """
        Remove a file from the working copy.

        Raises:
            LocalIOError: If the file cannot be removed
        """
        try:
            self.path_for(relative).unlink()
        except OSError as e:
            raise LocalIOError(f"Failed to remove {relative}: {e}", path=relative) from e
