"""
GitHub data models for gh-commit.

Defines Pydantic models for repository coordinates and the git-data API
objects (refs, commits, trees) exchanged with GitHub.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

DEFAULT_HOST = "github.com"

# Mode/type used for every file we upload
BLOB_MODE = "100644"
BLOB_TYPE = "blob"


class RepoInfo(BaseModel):
    """
    GitHub repository coordinates.

    Parsed from an ``OWNER/REPO`` argument, a ``HOST/OWNER/REPO`` argument
    or a git remote URL (SSH or HTTPS format).

    Example:
        >>> RepoInfo.parse("octo/hello").full_name
        'octo/hello'
        >>> RepoInfo.from_remote_url("git@github.com:user/repo.git").owner
        'user'
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description="Repository owner (user or organization)")
    repo: str = Field(..., description="Repository name")
    host: str = Field(default=DEFAULT_HOST, description="GitHub host name")

    @computed_field
    @property
    def full_name(self) -> str:
        """Full repository name (owner/repo)."""
        return f"{self.owner}/{self.repo}"

    @computed_field
    @property
    def url(self) -> str:
        """Web URL for the repository."""
        return f"https://{self.host}/{self.owner}/{self.repo}"

    @property
    def api_prefix(self) -> str:
        """Path prefix for repository-scoped API calls."""
        return f"repos/{self.owner}/{self.repo}"

    def __str__(self) -> str:
        if self.host == DEFAULT_HOST:
            return self.full_name
        return f"{self.host}/{self.full_name}"

    @classmethod
    def parse(cls, value: str) -> RepoInfo:
        """
        Parse a repository argument.

        Accepts ``OWNER/REPO``, ``HOST/OWNER/REPO`` and remote URLs.

        Args:
            value: Repository argument

        Returns:
            RepoInfo instance

        Raises:
            ValueError: If the value cannot be parsed
        """
        value = value.strip()
        if "://" in value or value.startswith("git@"):
            parsed = cls.from_remote_url(value)
            if parsed is None:
                raise ValueError(f"Invalid repository URL: {value}")
            return parsed

        parts = value.split("/")
        if len(parts) == 2 and all(parts):
            return cls(owner=parts[0], repo=parts[1])
        if len(parts) == 3 and all(parts):
            return cls(host=parts[0], owner=parts[1], repo=parts[2])

        raise ValueError(
            f'Expected the "[HOST/]OWNER/REPO" format, got "{value}"'
        )

    @classmethod
    def from_remote_url(cls, remote_url: str) -> RepoInfo | None:
        """
        Parse repository info from a git remote URL.

        Handles formats:
        - git@github.com:user/repo.git
        - ssh://git@github.com/user/repo.git
        - https://github.com/user/repo.git
        - https://github.example.com/user/repo

        Args:
            remote_url: Git remote URL

        Returns:
            RepoInfo or None if the URL is not recognized
        """
        if not remote_url:
            return None

        # SCP-like SSH format: git@host:user/repo.git
        ssh_match = re.match(
            r"^[\w.-]+@([^:/]+):([^/]+)/([^/]+?)(?:\.git)?/?$",
            remote_url,
        )
        if ssh_match:
            return cls(
                host=ssh_match.group(1),
                owner=ssh_match.group(2),
                repo=ssh_match.group(3),
            )

        # URL format: https://host/user/repo.git or ssh://git@host/user/repo.git
        url_match = re.match(
            r"^(?:https?|ssh|git)://(?:[^@/]+@)?([^/:]+)(?::\d+)?/([^/]+)/([^/]+?)(?:\.git)?/?$",
            remote_url,
        )
        if url_match:
            return cls(
                host=url_match.group(1),
                owner=url_match.group(2),
                repo=url_match.group(3),
            )

        return None


class GitReference(BaseModel):
    """A git reference (branch) as returned by the refs API."""

    model_config = ConfigDict(frozen=True)

    ref: str = Field(..., description="Full ref name, e.g. refs/heads/main")
    sha: str = Field(..., description="SHA of the commit the ref points at")
    url: str = Field(default="", description="API URL of the ref")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GitReference:
        """Create a GitReference from a refs API response."""
        obj = data.get("object") or {}
        return cls(
            ref=str(data.get("ref", "")),
            sha=str(obj.get("sha", "")),
            url=str(data.get("url") or ""),
        )


class GitCommit(BaseModel):
    """A commit object as returned by the git commits API."""

    model_config = ConfigDict(frozen=True)

    sha: str
    tree_sha: str
    parent_shas: tuple[str, ...] = ()
    message: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GitCommit:
        """Create a GitCommit from a git commits API response."""
        tree = data.get("tree") or {}
        parents = data.get("parents") or []
        return cls(
            sha=str(data.get("sha", "")),
            tree_sha=str(tree.get("sha", "")),
            parent_shas=tuple(str(p.get("sha", "")) for p in parents if isinstance(p, dict)),
            message=str(data.get("message") or ""),
        )


class GitTreeItem(BaseModel):
    """One item of a (recursive) tree listing."""

    model_config = ConfigDict(frozen=True)

    path: str
    mode: str
    type: str
    sha: str


class GitTree(BaseModel):
    """A tree listing as returned by the git trees API."""

    model_config = ConfigDict(frozen=True)

    sha: str
    items: tuple[GitTreeItem, ...] = ()
    truncated: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GitTree:
        """Create a GitTree from a git trees API response."""
        items = tuple(
            GitTreeItem(
                path=str(item["path"]),
                mode=str(item["mode"]),
                type=str(item["type"]),
                sha=str(item["sha"]),
            )
            for item in data.get("tree") or []
        )
        return cls(
            sha=str(data.get("sha", "")),
            items=items,
            truncated=bool(data.get("truncated", False)),
        )


class TreeEntry(BaseModel):
    """
    A file entry submitted when creating a tree.

    The content identifier is mandatory: deletions are never expressed as
    entries, so an entry without a blob cannot be built.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1)
    sha: str = Field(..., min_length=1, description="SHA of an uploaded blob")
    mode: str = BLOB_MODE
    type: str = BLOB_TYPE

    def to_api(self) -> dict[str, str]:
        """Serialize for the create-tree API."""
        return {"path": self.path, "mode": self.mode, "type": self.type, "sha": self.sha}


class TreeDescriptor(BaseModel):
    """
    Description of a tree to create on top of a parent tree.

    ``entries`` are layered onto ``parent_tree_sha``. Paths listed in
    ``removals`` are dropped from the parent tree; they are never sent as
    entries.
    """

    model_config = ConfigDict(frozen=True)

    parent_tree_sha: str = Field(..., min_length=1)
    entries: tuple[TreeEntry, ...] = ()
    removals: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_disjoint(self) -> TreeDescriptor:
        overlap = {entry.path for entry in self.entries} & set(self.removals)
        if overlap:
            raise ValueError(
                f"Paths cannot be both uploaded and removed: {', '.join(sorted(overlap))}"
            )
        return self

    @property
    def paths(self) -> list[str]:
        """Paths of the submitted entries, in order."""
        return [entry.path for entry in self.entries]
