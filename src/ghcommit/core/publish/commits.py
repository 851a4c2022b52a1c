"""Commit assembly."""

from __future__ import annotations

import logging

from ghcommit.core.github.backend import RemoteRepository
from ghcommit.core.publish.models import CommitDescriptor, RemoteCommitRef

logger = logging.getLogger(__name__)


def assemble_commit(
    remote: RemoteRepository,
    tree_sha: str,
    parent: RemoteCommitRef,
    message: str,
) -> str:
    """
    Create a commit linking ``tree_sha`` to the parent's head commit.

    Returns:
        SHA of the new commit
    """
    descriptor = CommitDescriptor(message=message, tree_sha=tree_sha, parent_sha=parent.commit_sha)
    commit_sha = remote.create_commit(
        descriptor.message, descriptor.tree_sha, descriptor.parent_sha
    )
    logger.debug(
        "Created commit %s (tree %s, parent %s)",
        commit_sha[:8],
        tree_sha[:8],
        parent.commit_sha[:8],
    )
    return commit_sha
