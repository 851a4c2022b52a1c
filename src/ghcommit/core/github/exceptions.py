"""
Exceptions for GitHub API operations.
"""

from __future__ import annotations


class GitHubClientError(Exception):
    """Error from GitHub client operations."""

    pass


class RemoteAPIError(GitHubClientError):
    """
    A remote API call failed.

    Attributes:
        status: HTTP status code, when the failure came from the API
        command: The command that was run, when known
        response: Raw response text returned by the API
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        command: list[str] | None = None,
        response: str = "",
    ) -> None:
        super().__init__(message)
        self.status = status
        self.command = command
        self.response = response

    @property
    def is_rate_limited(self) -> bool:
        """Whether the failure is a primary or secondary rate limit."""
        if self.status == 429:
            return True
        text = f"{self} {self.response}".lower()
        return self.status == 403 and "rate limit" in text


class NotFoundError(RemoteAPIError):
    """The requested remote object does not exist (HTTP 404)."""

    pass


class TreeTooLargeError(RemoteAPIError):
    """
    A recursive tree listing came back truncated.

    Removing paths resubmits the whole parent tree, so deletions and the
    empty-commit cleanup cannot be applied to such a tree.
    """

    def __init__(self, tree_sha: str) -> None:
        super().__init__(f"Tree {tree_sha[:8]} is too large to list; cannot apply deletions")
        self.tree_sha = tree_sha
