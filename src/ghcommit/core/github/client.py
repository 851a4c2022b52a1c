"""
GitHub git-data API client for gh-commit.

Provides the RemoteRepository implementation used by the publish service,
talking to GitHub's blob, tree, commit and ref endpoints through an
ApiDispatcher (by default the `gh` CLI wrapped in a rate-limit waiter).
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any

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
    RepoInfo,
    TreeDescriptor,
)

logger = logging.getLogger(__name__)

# Tree items that GitHub rebuilds from paths and must not be resubmitted
_DERIVED_TREE_TYPES = {"tree"}


class GitHubClient:
    """
    Client for GitHub's git-data API.

    Example:
        >>> client = GitHubClient.from_gh_cli(RepoInfo.parse("octo/hello"))
        >>> ref = client.get_ref("heads/main")
        >>> commit = client.get_commit(ref.sha)
        >>> print(commit.tree_sha)
    """

    def __init__(self, repo: RepoInfo, dispatcher: ApiDispatcher) -> None:
        """
        Initialize GitHubClient.

        Args:
            repo: Repository coordinates
            dispatcher: Dispatcher used for every API call
        """
        self.repo = repo
        self.dispatcher = dispatcher

    @classmethod
    def from_gh_cli(
        cls,
        repo: RepoInfo,
        *,
        rate_limit_retries: int = 3,
        rate_limit_wait: float = 60.0,
        timeout: int = 120,
    ) -> GitHubClient:
        """
        Create a client that calls GitHub through `gh api`.

        Args:
            repo: Repository coordinates (its host selects the gh host)
            rate_limit_retries: How many times to retry a rate-limited call
            rate_limit_wait: Seconds to wait before each retry
            timeout: Seconds to wait for a single call

        Returns:
            GitHubClient instance
        """
        dispatcher = RateLimitWaiter(
            GhCliDispatcher(hostname=repo.host, timeout=timeout),
            retries=rate_limit_retries,
            wait_seconds=rate_limit_wait,
        )
        return cls(repo, dispatcher)

    @staticmethod
    def is_gh_available() -> bool:
        """
        Check if GitHub CLI is installed and authenticated.

        Returns:
            True if gh is available and authenticated
        """
        try:
            result = subprocess.run(
                ["gh", "auth", "status"],
                capture_output=True,
                text=True,
                check=False,
            )
            return result.returncode == 0
        except (OSError, FileNotFoundError):
            return False

    @staticmethod
    def get_remote_url(project_dir: Path) -> str | None:
        """
        Get git remote origin URL.

        Args:
            project_dir: Working copy directory

        Returns:
            Remote URL or None
        """
        try:
            result = subprocess.run(
                ["git", "remote", "get-url", "origin"],
                cwd=project_dir,
                capture_output=True,
                text=True,
                check=False,
            )
            if result.returncode == 0:
                return result.stdout.strip()
            return None
        except (OSError, FileNotFoundError):
            return None

    @classmethod
    def repo_from_project_dir(cls, project_dir: Path) -> RepoInfo:
        """
        Resolve the repository from the working copy's origin remote.

        Raises:
            GitHubClientError: If there is no usable origin remote
        """
        remote_url = cls.get_remote_url(project_dir)
        if not remote_url:
            raise GitHubClientError(
                "No git remote 'origin' found. Pass the repository with -R OWNER/REPO."
            )

        repo = RepoInfo.from_remote_url(remote_url)
        if repo is None:
            raise GitHubClientError(f"Remote URL is not a GitHub repository: {remote_url}")
        return repo

    def _path(self, suffix: str) -> str:
        return f"{self.repo.api_prefix}/{suffix}"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_ref(self, ref: str) -> GitReference | None:
        ref = ref.removeprefix("refs/")
        try:
            data = self.dispatcher.request("GET", self._path(f"git/ref/{ref}"))
        except NotFoundError:
            return None
        return GitReference.from_api(data)

    def get_commit(self, sha: str) -> GitCommit:
        data = self.dispatcher.request("GET", self._path(f"git/commits/{sha}"))
        return GitCommit.from_api(data)

    def get_tree(self, sha: str, recursive: bool = False) -> GitTree:
        suffix = f"git/trees/{sha}"
        if recursive:
            suffix += "?recursive=1"
        data = self.dispatcher.request("GET", self._path(suffix))
        return GitTree.from_api(data)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_blob(self, content: str, encoding: str) -> str:
        data = self.dispatcher.request(
            "POST",
            self._path("git/blobs"),
            {"content": content, "encoding": encoding},
        )
        sha = data.get("sha")
        if not sha:
            raise RemoteAPIError("GitHub did not return a SHA for the new blob")
        return str(sha)

    def create_tree(self, descriptor: TreeDescriptor) -> str:
        """
        Create a tree from a descriptor.

        Without removals the entries are layered onto the parent tree via
        ``base_tree``. With removals the parent tree is listed recursively,
        removed paths are left out and the complete tree is submitted, so
        a removal is always expressed by omission.

        Raises:
            RemoteAPIError: If the parent tree listing is truncated or a
                call fails
        """
        if not descriptor.removals:
            payload: dict[str, Any] = {
                "base_tree": descriptor.parent_tree_sha,
                "tree": [entry.to_api() for entry in descriptor.entries],
            }
        else:
            payload = {"tree": self._full_tree_without_removals(descriptor)}

        data = self.dispatcher.request("POST", self._path("git/trees"), payload)
        sha = data.get("sha")
        if not sha:
            raise RemoteAPIError("GitHub did not return a SHA for the new tree")
        return str(sha)

    def _full_tree_without_removals(self, descriptor: TreeDescriptor) -> list[dict[str, str]]:
        parent = self.get_tree(descriptor.parent_tree_sha, recursive=True)
        if parent.truncated:
            raise TreeTooLargeError(descriptor.parent_tree_sha)

        removed = set(descriptor.removals)
        replaced = {entry.path for entry in descriptor.entries}

        items: list[dict[str, str]] = []
        for item in parent.items:
            if item.type in _DERIVED_TREE_TYPES:
                continue
            if item.path in removed or item.path in replaced:
                continue
            items.append({"path": item.path, "mode": item.mode, "type": item.type, "sha": item.sha})

        items.extend(entry.to_api() for entry in descriptor.entries)
        logger.debug("Rebuilding tree with %d items, %d paths removed", len(items), len(removed))
        return items

    def create_commit(self, message: str, tree_sha: str, parent_sha: str) -> str:
        data = self.dispatcher.request(
            "POST",
            self._path("git/commits"),
            {"message": message, "tree": tree_sha, "parents": [parent_sha]},
        )
        sha = data.get("sha")
        if not sha:
            raise RemoteAPIError("GitHub did not return a SHA for the new commit")
        return str(sha)

    def create_ref(self, ref: str, sha: str) -> GitReference:
        data = self.dispatcher.request(
            "POST",
            self._path("git/refs"),
            {"ref": ref, "sha": sha},
        )
        return GitReference.from_api(data)

    def update_ref(self, ref: str, sha: str, force: bool = True) -> GitReference:
        ref = ref.removeprefix("refs/")
        data = self.dispatcher.request(
            "PATCH",
            self._path(f"git/refs/{ref}"),
            {"sha": sha, "force": force},
        )
        return GitReference.from_api(data)
