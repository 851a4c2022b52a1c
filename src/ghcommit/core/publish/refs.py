"""
Branch reference publishing.

Moves a branch to a new commit with a read-then-write sequence. This is
not a compare-and-swap: a writer racing between the read and the write
can be overwritten when updates are forced.
"""

from __future__ import annotations

import logging

from ghcommit.core.errors import ConcurrentModificationError
from ghcommit.core.github.backend import RemoteRepository
from ghcommit.core.github.exceptions import RemoteAPIError
from ghcommit.core.github.models import GitReference

logger = logging.getLogger(__name__)

# GitHub answers a rejected non-fast-forward update with 422
_REJECTED_UPDATE_STATUS = 422


class RefPublisher:
    """
    Points a branch at a commit, creating the branch when needed.

    Example:
        >>> publisher = RefPublisher(remote)
        >>> ref = publisher.publish("main", commit_sha)
    """

    def __init__(self, remote: RemoteRepository, force: bool = True) -> None:
        """
        Initialize the publisher.

        Args:
            remote: Remote repository
            force: Allow non-fast-forward updates of existing branches
        """
        self.remote = remote
        self.force = force

    def publish(self, branch: str, commit_sha: str) -> GitReference:
        """
        Create or move ``branch`` to ``commit_sha``.

        Raises:
            ConcurrentModificationError: If a non-forced update is rejected
            RemoteAPIError: If any other remote call fails
        """
        existing = self.remote.get_ref(f"heads/{branch}")

        if existing is None:
            logger.info("Creating branch %s at %s", branch, commit_sha[:8])
            return self.remote.create_ref(f"refs/heads/{branch}", commit_sha)

        logger.info(
            "Moving branch %s from %s to %s", branch, existing.sha[:8], commit_sha[:8]
        )
        try:
            return self.remote.update_ref(f"heads/{branch}", commit_sha, force=self.force)
        except RemoteAPIError as e:
            if not self.force and e.status == _REJECTED_UPDATE_STATUS:
                raise ConcurrentModificationError(branch, commit_sha) from e
            raise
