"""
Data models for the publish service.

Defines Pydantic models for change sets, remote snapshots, planned file
changes, publish requests and their results. All of them are scoped to a
single publish request.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from ghcommit.core.github.models import GitReference, RepoInfo

# Well-known identifier of the tree with zero entries
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


class ExitCode(IntEnum):
    """Exit codes for gh-commit, relied upon by calling scripts."""

    SUCCESS = 0
    """Commit published (including empty-tree and empty-commit paths)."""

    GENERAL_ERROR = 1
    """Any fatal error."""

    NO_NEW_FILES = 10
    """Nothing to commit and no empty commit was requested."""


class ChangeSet(BaseModel):
    """
    Local changes bucketed by kind.

    Paths are relative to the working copy root and appear in at most one
    of the three sequences.
    """

    model_config = ConfigDict(frozen=True)

    added: tuple[str, ...] = ()
    updated: tuple[str, ...] = ()
    deleted: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_disjoint(self) -> ChangeSet:
        seen: set[str] = set()
        for path in (*self.added, *self.updated, *self.deleted):
            if path in seen:
                raise ValueError(f"Path {path} appears in more than one change bucket")
            seen.add(path)
        return self

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to publish."""
        return not (self.added or self.updated or self.deleted)

    @property
    def uploads(self) -> tuple[str, ...]:
        """Paths whose content must be uploaded (updated first, then added)."""
        return self.updated + self.added


class RemoteCommitRef(BaseModel):
    """Snapshot of a branch head taken at read time."""

    model_config = ConfigDict(frozen=True)

    branch: str
    commit_sha: str
    tree_sha: str


class FileAction(str, Enum):
    """What a planned change does to the remote tree."""

    KEEP = "keep"
    UPLOAD = "upload"
    REMOVE = "remove"


class FileChange(BaseModel):
    """A path paired with the action the tree builder takes for it."""

    model_config = ConfigDict(frozen=True)

    path: str
    action: FileAction


class CommitDescriptor(BaseModel):
    """A commit to create: one tree, exactly one parent."""

    model_config = ConfigDict(frozen=True)

    message: str
    tree_sha: str = Field(..., min_length=1)
    parent_sha: str = Field(..., min_length=1)


class SynthesisState(str, Enum):
    """Path chosen by the empty-state policy for one request."""

    ALL_DELETED = "all_deleted"
    NO_CHANGES = "no_changes"
    FORCE_EMPTY = "force_empty"
    NORMAL_PUBLISH = "normal_publish"


class PublishOutcome(str, Enum):
    """Terminal outcome of a publish request that did not fail."""

    PUBLISHED = "published"
    NO_OP = "no_op"


class PublishRequest(BaseModel):
    """
    Everything the publish service needs for one request.

    Example:
        >>> request = PublishRequest(
        ...     working_dir=Path("."),
        ...     repo=RepoInfo.parse("octo/hello"),
        ...     base_branch="main",
        ...     branch="main",
        ...     message="Update docs",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    working_dir: Path = Field(description="Working copy root")
    repo: RepoInfo = Field(description="Remote repository")
    base_branch: str = Field(min_length=1, description="Branch read as parent")
    branch: str = Field(min_length=1, description="Branch to publish to")
    message: str = Field(description="Commit message")
    delete_path: str = Field(
        default="",
        description="Only deletions under this prefix are applied remotely",
    )
    create_empty_commit: bool = False
    allow_empty_commit: bool = False
    allow_empty_tree: bool = False


class PublishResult(BaseModel):
    """Result of a publish request."""

    outcome: PublishOutcome
    state: SynthesisState
    repo: RepoInfo
    branch: str
    commit_sha: str | None = None
    ref: GitReference | None = None
    message: str = ""

    @computed_field
    @property
    def exit_code(self) -> int:
        """Process exit code for this result."""
        if self.outcome == PublishOutcome.NO_OP:
            return int(ExitCode.NO_NEW_FILES)
        return int(ExitCode.SUCCESS)

    def summary(self) -> str:
        """Generate a human-readable summary of the result."""
        if self.outcome == PublishOutcome.NO_OP:
            return self.message or "no new files to commit"
        sha = self.commit_sha[:8] if self.commit_sha else "?"
        return f"published {sha} to {self.repo}:{self.branch} ({self.state.value})"
