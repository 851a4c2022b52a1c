"""
Publish service.

Drives one publish request end to end: inspect the working copy, read the
base branch, let the empty-state policy choose a path, then build the
tree, create the commit and move the target branch.

Nothing is retried or swallowed here. Any failure aborts the remaining
steps, and a tree, commit or ref is only created once everything it
depends on exists.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from ghcommit.core.errors import AllDeletedWithoutFlagError, LocalIOError
from ghcommit.core.github.backend import RemoteRepository
from ghcommit.core.github.models import GitReference, TreeDescriptor
from ghcommit.core.publish.classifier import classify
from ghcommit.core.publish.commits import assemble_commit
from ghcommit.core.publish.models import (
    EMPTY_TREE_SHA,
    ChangeSet,
    PublishOutcome,
    PublishRequest,
    PublishResult,
    RemoteCommitRef,
    SynthesisState,
)
from ghcommit.core.publish.policy import EMPTY_COMMIT_MARKER, NO_NEW_FILES_MESSAGE, decide_state
from ghcommit.core.publish.refs import RefPublisher
from ghcommit.core.publish.remote_state import read_remote_state
from ghcommit.core.publish.tree_builder import TreeBuilder
from ghcommit.core.workcopy import WorkingCopy

logger = logging.getLogger(__name__)


class PublishEventCallback(Protocol):
    """Protocol for publish service event callbacks."""

    def on_progress(self, message: str) -> None:
        """Called with a progress line (e.g., "Deleted files: a.txt")."""
        ...

    def on_status(self, message: str, level: str = "info") -> None:
        """
        Called when a status message should be displayed.

        Args:
            message: Status message
            level: Message level (info, success, warning, error)
        """
        ...


class LoggingPublishCallback:
    """Callback that forwards events to the module logger."""

    def on_progress(self, message: str) -> None:
        logger.info(message)

    def on_status(self, message: str, level: str = "info") -> None:
        if level == "error":
            logger.error(message)
        elif level == "warning":
            logger.warning(message)
        else:
            logger.info(message)


@dataclass
class _Synthesis:
    """State shared by the handlers of one request."""

    request: PublishRequest
    working_copy: WorkingCopy
    base: RemoteCommitRef
    change_set: ChangeSet | None


class PublishService:
    """
    Publishes a working copy as a commit on a remote branch.

    Example:
        >>> client = GitHubClient.from_gh_cli(RepoInfo.parse("octo/hello"))
        >>> service = PublishService(client)
        >>> result = service.publish(request)
        >>> print(result.summary())
    """

    def __init__(
        self,
        remote: RemoteRepository,
        *,
        force_update: bool = True,
        callback: PublishEventCallback | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            remote: Remote repository to publish to
            force_update: Allow non-fast-forward branch updates
            callback: Receiver for progress and status lines
        """
        self.remote = remote
        self.force_update = force_update
        self.callback: PublishEventCallback = callback or LoggingPublishCallback()

        self._handlers: dict[SynthesisState, Callable[[_Synthesis], PublishResult]] = {
            SynthesisState.ALL_DELETED: self._publish_empty_tree,
            SynthesisState.NO_CHANGES: self._report_no_changes,
            SynthesisState.FORCE_EMPTY: self._publish_empty_commit,
            SynthesisState.NORMAL_PUBLISH: self._publish_changes,
        }

    def publish(self, request: PublishRequest) -> PublishResult:
        """
        Run one publish request.

        Local inspection (including classification) happens before any
        remote call; the base branch is read before any remote write.

        Returns:
            PublishResult (PUBLISHED or NO_OP)

        Raises:
            WorkingCopyError: If the working copy cannot be inspected
            UnsupportedStatusError: If a path has an unknown change code
            RefNotFoundError: If the base branch does not exist
            AllDeletedWithoutFlagError: If everything was deleted and empty
                trees are not allowed
            LocalIOError: If a local file operation fails
            RemoteAPIError: If a remote call fails
        """
        working_copy = WorkingCopy(request.working_dir)

        all_deleted = working_copy.only_metadata_remains()
        change_set = None if all_deleted else classify(working_copy.status())

        base = read_remote_state(self.remote, request.base_branch)

        state = decide_state(
            all_deleted=all_deleted,
            change_set=change_set,
            create_empty_commit=request.create_empty_commit,
            allow_empty_commit=request.allow_empty_commit,
        )
        logger.debug(
            "Publishing %s:%s onto %s via %s",
            request.repo,
            request.branch,
            base.branch,
            state.value,
        )

        synthesis = _Synthesis(
            request=request,
            working_copy=working_copy,
            base=base,
            change_set=change_set,
        )
        return self._handlers[state](synthesis)

    def _publish_commit(self, synthesis: _Synthesis, commit_sha: str) -> GitReference:
        publisher = RefPublisher(self.remote, force=self.force_update)
        return publisher.publish(synthesis.request.branch, commit_sha)

    def _published(
        self,
        synthesis: _Synthesis,
        state: SynthesisState,
        commit_sha: str,
        ref: GitReference,
    ) -> PublishResult:
        return PublishResult(
            outcome=PublishOutcome.PUBLISHED,
            state=state,
            repo=synthesis.request.repo,
            branch=synthesis.request.branch,
            commit_sha=commit_sha,
            ref=ref,
        )

    def _publish_empty_tree(self, synthesis: _Synthesis) -> PublishResult:
        if not synthesis.request.allow_empty_tree:
            raise AllDeletedWithoutFlagError()

        self.callback.on_progress("All files from the repository have been deleted.")
        self.callback.on_progress("--allow-empty-tree flag is set.")
        self.callback.on_progress("Committing an empty tree to the branch...")

        commit_sha = assemble_commit(
            self.remote, EMPTY_TREE_SHA, synthesis.base, synthesis.request.message
        )
        ref = self._publish_commit(synthesis, commit_sha)
        return self._published(synthesis, SynthesisState.ALL_DELETED, commit_sha, ref)

    def _report_no_changes(self, synthesis: _Synthesis) -> PublishResult:
        self.callback.on_status(NO_NEW_FILES_MESSAGE, "warning")
        return PublishResult(
            outcome=PublishOutcome.NO_OP,
            state=SynthesisState.NO_CHANGES,
            repo=synthesis.request.repo,
            branch=synthesis.request.branch,
            message=NO_NEW_FILES_MESSAGE,
        )

    def _publish_empty_commit(self, synthesis: _Synthesis) -> PublishResult:
        """
        Publish a commit with no content change but its own identity.

        A marker blob is committed on the base head, then the marker
        commit's tree minus the marker (the base tree again) is committed on
        the base head and published.
        """
        request = synthesis.request
        working_copy = synthesis.working_copy
        builder = TreeBuilder(self.remote, working_copy)

        self.callback.on_progress("No changes to publish; creating an empty commit...")

        working_copy.write_bytes(EMPTY_COMMIT_MARKER, b"")
        try:
            marker = builder.upload(EMPTY_COMMIT_MARKER)
            marker_tree = builder.create(
                TreeDescriptor(parent_tree_sha=synthesis.base.tree_sha, entries=(marker,))
            )
            marker_commit = assemble_commit(
                self.remote, marker_tree, synthesis.base, request.message
            )
            logger.debug("Created marker commit %s", marker_commit[:8])

            cleaned_tree = builder.create(
                TreeDescriptor(parent_tree_sha=marker_tree, removals=(EMPTY_COMMIT_MARKER,))
            )
            commit_sha = assemble_commit(
                self.remote, cleaned_tree, synthesis.base, request.message
            )
            ref = self._publish_commit(synthesis, commit_sha)
        except Exception:
            self._discard_marker(working_copy)
            raise

        working_copy.remove(EMPTY_COMMIT_MARKER)
        return self._published(synthesis, SynthesisState.FORCE_EMPTY, commit_sha, ref)

    def _discard_marker(self, working_copy: WorkingCopy) -> None:
        try:
            working_copy.remove(EMPTY_COMMIT_MARKER)
        except LocalIOError as e:
            logger.warning("Could not remove empty-commit marker: %s", e)

    def _publish_changes(self, synthesis: _Synthesis) -> PublishResult:
        change_set = synthesis.change_set
        if change_set is None:
            raise ValueError("a change set is required to publish changes")

        request = synthesis.request
        builder = TreeBuilder(self.remote, synthesis.working_copy, request.delete_path)

        self.callback.on_progress(f"Deleted files: {', '.join(change_set.deleted) or '(none)'}")
        self.callback.on_progress(f"Updated files: {', '.join(change_set.uploads) or '(none)'}")

        descriptor = builder.build(change_set, synthesis.base.tree_sha)
        tree_sha = builder.create(descriptor)
        commit_sha = assemble_commit(self.remote, tree_sha, synthesis.base, request.message)
        ref = self._publish_commit(synthesis, commit_sha)
        return self._published(synthesis, SynthesisState.NORMAL_PUBLISH, commit_sha, ref)
