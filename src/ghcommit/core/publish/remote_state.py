"""Resolve a remote branch to its head commit and root tree."""

from __future__ import annotations

import logging

from ghcommit.core.errors import RefNotFoundError
from ghcommit.core.github.backend import RemoteRepository
from ghcommit.core.publish.models import RemoteCommitRef

logger = logging.getLogger(__name__)


def read_remote_state(remote: RemoteRepository, branch: str) -> RemoteCommitRef:
    """
    Read the current head of a remote branch.

    Args:
        remote: Remote repository
        branch: Branch name (without refs/heads/)

    Returns:
        RemoteCommitRef with the head commit and its root tree

    Raises:
        RefNotFoundError: If the branch does not exist remotely
    """
    ref = remote.get_ref(f"heads/{branch}")
    if ref is None:
        raise RefNotFoundError(branch)

    commit = remote.get_commit(ref.sha)
    logger.debug("Branch %s is at %s (tree %s)", branch, commit.sha[:8], commit.tree_sha[:8])

    return RemoteCommitRef(branch=branch, commit_sha=commit.sha, tree_sha=commit.tree_sha)
