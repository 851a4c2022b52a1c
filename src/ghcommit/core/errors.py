"""
Exceptions raised by the commit-synthesis engine.

Every error aborts the remaining pipeline steps. Remote failures are
raised by the GitHub client (see ghcommit.core.github.client) and pass
through the engine untouched.
"""

from __future__ import annotations


class PublishError(Exception):
    """Base exception for commit-synthesis failures."""

    pass


class RefNotFoundError(PublishError):
    """Raised when a branch does not exist on the remote."""

    def __init__(self, branch: str) -> None:
        self.branch = branch
        super().__init__(f"Branch '{branch}' not found on the remote repository")


class UnsupportedStatusError(PublishError):
    """Raised when the working copy reports a change code we cannot classify."""

    def __init__(self, path: str, code: str) -> None:
        self.path = path
        self.code = code
        super().__init__(f"Unsupported status code {code} for file {path}")


class LocalIOError(PublishError):
    """Raised when reading, writing or removing a local file fails."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class AllDeletedWithoutFlagError(PublishError):
    """Raised when every file was removed but empty trees are not allowed."""

    def __init__(self) -> None:
        super().__init__(
            "All files in the repository have been deleted, but the "
            "--allow-empty-tree parameter has not been set to true. "
            "Please use it if you actually want to commit these changes "
            "(the repo will be empty as the result). Aborting."
        )


class ConcurrentModificationError(PublishError):
    """Raised when a non-forced ref update is rejected by the remote."""

    def __init__(self, branch: str, commit_sha: str) -> None:
        self.branch = branch
        self.commit_sha = commit_sha
        super().__init__(
            f"Branch '{branch}' moved while publishing; refusing to overwrite it "
            f"with {commit_sha[:8]}"
        )
