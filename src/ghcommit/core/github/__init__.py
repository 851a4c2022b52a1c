"""
GitHub integration for gh-commit.

Provides the git-data API client that the publish service drives, plus
the dispatchers that carry its calls.
"""

from ghcommit.core.github.backend import RemoteRepository
from ghcommit.core.github.client import GitHubClient
from ghcommit.core.github.dispatch import ApiDispatcher, GhCliDispatcher, RateLimitWaiter
from ghcommit.core.github.exceptions import (
    GitHubClientError,
    NotFoundError,
    RemoteAPIError,
    TreeTooLargeError,
)
from ghcommit.core.github.models import (
    GitCommit,
    GitReference,
    GitTree,
    GitTreeItem,
    RepoInfo,
    TreeDescriptor,
    TreeEntry,
)

__all__ = [
    "ApiDispatcher",
    "GhCliDispatcher",
    "GitCommit",
    "GitHubClient",
    "GitHubClientError",
    "GitReference",
    "GitTree",
    "GitTreeItem",
    "NotFoundError",
    "RateLimitWaiter",
    "RemoteAPIError",
    "RemoteRepository",
    "RepoInfo",
    "TreeDescriptor",
    "TreeEntry",
    "TreeTooLargeError",
]
