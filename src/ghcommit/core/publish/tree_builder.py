"""
Content and tree building.

Uploads local file content as remote blobs and describes the new tree as
those blobs layered onto the parent tree. Deleted paths never become
entries; they are either removals (inside the delete scope) or left alone.
"""

from __future__ import annotations

import base64
import logging

from ghcommit.core.github.backend import RemoteRepository
from ghcommit.core.github.models import TreeDescriptor, TreeEntry
from ghcommit.core.publish.models import ChangeSet, FileAction, FileChange
from ghcommit.core.workcopy import WorkingCopy

logger = logging.getLogger(__name__)


def encode_content(content: bytes) -> tuple[str, str]:
    """
    Encode file bytes for the blob API.

    Returns:
        (content, encoding): UTF-8 text as-is, anything else as base64
    """
    try:
        return content.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        return base64.b64encode(content).decode("ascii"), "base64"


class TreeBuilder:
    """
    Builds remote trees from a ChangeSet.

    Example:
        >>> builder = TreeBuilder(remote, working_copy, delete_scope="docs/")
        >>> descriptor = builder.build(change_set, parent_tree_sha)
        >>> tree_sha = builder.create(descriptor)
    """

    def __init__(
        self,
        remote: RemoteRepository,
        working_copy: WorkingCopy,
        delete_scope: str = "",
    ) -> None:
        """
        Initialize the builder.

        Args:
            remote: Remote repository to upload to
            working_copy: Source of file content
            delete_scope: Only deletions starting with this prefix are applied
        """
        self.remote = remote
        self.working_copy = working_copy
        self.delete_scope = delete_scope

    def in_delete_scope(self, path: str) -> bool:
        """Whether a deletion of ``path`` is applied to the remote tree."""
        return path.startswith(self.delete_scope)

    def plan(self, change_set: ChangeSet) -> list[FileChange]:
        """
        Decide what happens to every path of a ChangeSet.

        Deletions come first, then updated and added paths.
        """
        changes: list[FileChange] = []

        for path in change_set.deleted:
            if self.in_delete_scope(path):
                changes.append(FileChange(path=path, action=FileAction.REMOVE))
            else:
                logger.debug("Leaving %s in place: outside delete scope %r", path, self.delete_scope)
                changes.append(FileChange(path=path, action=FileAction.KEEP))

        for path in change_set.uploads:
            changes.append(FileChange(path=path, action=FileAction.UPLOAD))

        return changes

    def upload(self, path: str) -> TreeEntry:
        """
        Upload one file as a blob.

        Raises:
            LocalIOError: If the file cannot be read
            RemoteAPIError: If the upload fails
        """
        content, encoding = encode_content(self.working_copy.read_bytes(path))
        sha = self.remote.create_blob(content, encoding)
        logger.debug("Uploaded %s as blob %s (%s)", path, sha[:8], encoding)
        return TreeEntry(path=path, sha=sha)

    def build(self, change_set: ChangeSet, parent_tree_sha: str) -> TreeDescriptor:
        """
        Upload content and describe the resulting tree.

        Args:
            change_set: Classified local changes
            parent_tree_sha: Tree the changes are layered onto

        Returns:
            TreeDescriptor whose entries are exactly the uploaded blobs
        """
        entries: list[TreeEntry] = []
        removals: list[str] = []

        for change in self.plan(change_set):
            if change.action == FileAction.UPLOAD:
                entries.append(self.upload(change.path))
            elif change.action == FileAction.REMOVE:
                removals.append(change.path)

        return TreeDescriptor(
            parent_tree_sha=parent_tree_sha,
            entries=tuple(entries),
            removals=tuple(removals),
        )

    def create(self, descriptor: TreeDescriptor) -> str:
        """
        Create the described tree remotely and return its SHA.

        A descriptor without entries or removals describes the parent tree
        itself, so no call is made.
        """
        if not descriptor.entries and not descriptor.removals:
            logger.debug("No tree changes; reusing %s", descriptor.parent_tree_sha[:8])
            return descriptor.parent_tree_sha

        tree_sha = self.remote.create_tree(descriptor)
        logger.debug(
            "Created tree %s: %d entries, %d removals on %s",
            tree_sha[:8],
            len(descriptor.entries),
            len(descriptor.removals),
            descriptor.parent_tree_sha[:8],
        )
        return tree_sha
