"""
Pytest configuration and shared fixtures.

Provides temporary git working copies, an in-memory remote repository that
records every call, and sample publish requests.
"""

import hashlib
import subprocess
from pathlib import Path
from typing import Any

import pytest

from ghcommit.core.config import clear_cache
from ghcommit.core.github.exceptions import RemoteAPIError
from ghcommit.core.github.models import (
    GitCommit,
    GitReference,
    GitTree,
    GitTreeItem,
    RepoInfo,
    TreeDescriptor,
)
from ghcommit.core.publish.models import EMPTY_TREE_SHA, PublishRequest

# ==============================================================================
# In-memory remote
# ==============================================================================


def _sha(*parts: str) -> str:
    return hashlib.sha1("\0".join(parts).encode()).hexdigest()


class FakeRemote:
    """
    In-memory RemoteRepository.

    Trees are stored flat (path -> blob sha), commits keep their tree and
    parents, and every call is appended to ``calls`` as (name, args).
    """

    def __init__(self) -> None:
        self.blobs: dict[str, tuple[str, str]] = {}
        self.trees: dict[str, dict[str, str]] = {EMPTY_TREE_SHA: {}}
        self.commits: dict[str, GitCommit] = {}
        self.refs: dict[str, str] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_on: dict[str, Exception] = {}

    # -- seeding helpers -------------------------------------------------

    def seed_branch(self, branch: str, files: dict[str, str]) -> GitCommit:
        """Create a branch whose head commit holds ``files``."""
        tree: dict[str, str] = {}
        for path, content in files.items():
            sha = _sha("blob", content)
            self.blobs[sha] = (content, "utf-8")
            tree[path] = sha
        tree_sha = self._store_tree(tree)
        commit = GitCommit(sha=_sha("commit", "seed", branch, tree_sha), tree_sha=tree_sha)
        self.commits[commit.sha] = commit
        self.refs[f"heads/{branch}"] = commit.sha
        return commit

    def tree_files(self, tree_sha: str) -> dict[str, str]:
        """Path -> decoded content of every file in a tree."""
        return {path: self.blobs[sha][0] for path, sha in self.trees[tree_sha].items()}

    def head(self, branch: str) -> GitCommit:
        return self.commits[self.refs[f"heads/{branch}"]]

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def writes(self) -> list[str]:
        return [name for name in self.call_names() if name.startswith(("create_", "update_"))]

    def _store_tree(self, tree: dict[str, str]) -> str:
        if not tree:
            return EMPTY_TREE_SHA
        sha = _sha("tree", *(f"{p}={s}" for p, s in sorted(tree.items())))
        self.trees[sha] = dict(tree)
        return sha

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise self.fail_on[name]

    # -- RemoteRepository ------------------------------------------------

    def get_ref(self, ref: str) -> GitReference | None:
        self._record("get_ref", ref)
        ref = ref.removeprefix("refs/")
        if ref not in self.refs:
            return None
        return GitReference(ref=f"refs/{ref}", sha=self.refs[ref])

    def get_commit(self, sha: str) -> GitCommit:
        self._record("get_commit", sha)
        return self.commits[sha]

    def get_tree(self, sha: str, recursive: bool = False) -> GitTree:
        self._record("get_tree", sha, recursive)
        items = tuple(
            GitTreeItem(path=path, mode="100644", type="blob", sha=blob)
            for path, blob in sorted(self.trees[sha].items())
        )
        return GitTree(sha=sha, items=items)

    def create_blob(self, content: str, encoding: str) -> str:
        self._record("create_blob", content, encoding)
        sha = _sha("blob", content)
        self.blobs[sha] = (content, encoding)
        return sha

    def create_tree(self, descriptor: TreeDescriptor) -> str:
        self._record("create_tree", descriptor)
        tree = dict(self.trees[descriptor.parent_tree_sha])
        for path in descriptor.removals:
            tree.pop(path, None)
        for entry in descriptor.entries:
            assert entry.sha in self.blobs, f"tree references unknown blob {entry.sha}"
            tree[entry.path] = entry.sha
        return self._store_tree(tree)

    def create_commit(self, message: str, tree_sha: str, parent_sha: str) -> str:
        self._record("create_commit", message, tree_sha, parent_sha)
        assert tree_sha in self.trees, f"commit references unknown tree {tree_sha}"
        assert parent_sha in self.commits, f"commit references unknown parent {parent_sha}"
        sha = _sha("commit", message, tree_sha, parent_sha, str(len(self.commits)))
        self.commits[sha] = GitCommit(
            sha=sha, tree_sha=tree_sha, parent_shas=(parent_sha,), message=message
        )
        return sha

    def create_ref(self, ref: str, sha: str) -> GitReference:
        self._record("create_ref", ref, sha)
        key = ref.removeprefix("refs/")
        if key in self.refs:
            raise RemoteAPIError("Reference already exists", status=422)
        self.refs[key] = sha
        return GitReference(ref=ref, sha=sha)

    def update_ref(self, ref: str, sha: str, force: bool = True) -> GitReference:
        self._record("update_ref", ref, sha, force)
        key = ref.removeprefix("refs/")
        self.refs[key] = sha
        return GitReference(ref=f"refs/{key}", sha=sha)


@pytest.fixture
def remote() -> FakeRemote:
    """Provide a FakeRemote whose main branch holds README.md and docs/index.md."""
    fake = FakeRemote()
    fake.seed_branch("main", {"README.md": "# Test Repo\n", "docs/index.md": "Docs\n"})
    return fake


# ==============================================================================
# Git working copies
# ==============================================================================


def git(repo: Path, *args: str) -> str:
    """Run a git command in ``repo`` and return its stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """
    Create a temporary git working copy on branch main.

    Creates and commits:
    - README.md
    - docs/index.md
    """
    repo = tmp_path / "repo"
    repo.mkdir()

    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "commit.gpgsign", "false")

    (repo / "README.md").write_text("# Test Repo\n")
    (repo / "docs").mkdir()
    (repo / "docs" / "index.md").write_text("Docs\n")
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", "Initial commit")

    return repo


@pytest.fixture
def make_request(git_repo: Path):
    """Factory for PublishRequests against ``git_repo``."""

    def _make(**overrides: Any) -> PublishRequest:
        fields: dict[str, Any] = {
            "working_dir": git_repo,
            "repo": RepoInfo(owner="octo", repo="hello"),
            "base_branch": "main",
            "branch": "main",
            "message": "Commit message",
        }
        fields.update(overrides)
        return PublishRequest(**fields)

    return _make


# ==============================================================================
# Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep user config and GH_COMMIT_* variables out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "GH_COMMIT_BRANCH",
        "GH_COMMIT_MESSAGE",
        "GH_COMMIT_DELETE_PATH",
        "GH_COMMIT_RATE_LIMIT_RETRIES",
        "GH_COMMIT_RATE_LIMIT_WAIT",
        "GH_COMMIT_FORCE_UPDATE",
    ):
        # setenv first so values loaded from .env files are undone at teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def run_git():
    """Provide the git() helper to tests that need to shape a working copy."""
    return git
