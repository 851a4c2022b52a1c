"""
Commit synthesis for gh-commit.

This module turns a local working copy into a commit on a remote branch
using only the remote's object-creation API: blobs for changed files, a
tree layered onto the base branch's tree, a single-parent commit and a
ref update.

Example:
    >>> from ghcommit.core.publish import PublishService, PublishRequest
    >>> service = PublishService(client)
    >>> result = service.publish(request)
    >>> if result.outcome == PublishOutcome.NO_OP:
    ...     print("nothing to publish")
"""

from ghcommit.core.publish.classifier import classify
from ghcommit.core.publish.models import (
    EMPTY_TREE_SHA,
    ChangeSet,
    CommitDescriptor,
    ExitCode,
    FileAction,
    FileChange,
    PublishOutcome,
    PublishRequest,
    PublishResult,
    RemoteCommitRef,
    SynthesisState,
)
from ghcommit.core.publish.policy import EMPTY_COMMIT_MARKER, decide_state
from ghcommit.core.publish.refs import RefPublisher
from ghcommit.core.publish.remote_state import read_remote_state
from ghcommit.core.publish.service import (
    LoggingPublishCallback,
    PublishEventCallback,
    PublishService,
)
from ghcommit.core.publish.tree_builder import TreeBuilder

__all__ = [
    "EMPTY_COMMIT_MARKER",
    "EMPTY_TREE_SHA",
    "ChangeSet",
    "CommitDescriptor",
    "ExitCode",
    "FileAction",
    "FileChange",
    "LoggingPublishCallback",
    "PublishEventCallback",
    "PublishOutcome",
    "PublishRequest",
    "PublishResult",
    "PublishService",
    "RefPublisher",
    "RemoteCommitRef",
    "SynthesisState",
    "TreeBuilder",
    "classify",
    "decide_state",
    "read_remote_state",
]
