"""
Empty-state policy.

Chooses which path a publish request takes. States are evaluated in a
fixed order:

1. ALL_DELETED    - the working copy holds nothing but its git metadata
2. NO_CHANGES     - nothing changed and no empty commit was asked for
3. FORCE_EMPTY    - nothing changed but an empty commit was asked for
4. NORMAL_PUBLISH - there is content to publish
"""

from __future__ import annotations

import hashlib

from ghcommit.core.publish.models import ChangeSet, SynthesisState

NO_NEW_FILES_MESSAGE = "no new files to commit"

# Name of the throwaway file used to give an empty commit its own identity
EMPTY_COMMIT_MARKER = hashlib.sha256(b"firestartr-empty-commit-dummy.txt").hexdigest()


def decide_state(
    *,
    all_deleted: bool,
    change_set: ChangeSet | None,
    create_empty_commit: bool = False,
    allow_empty_commit: bool = False,
) -> SynthesisState:
    """
    Pick the synthesis path for a request.

    Args:
        all_deleted: Whether only the git metadata directory remains
        change_set: Classified changes (ignored, and may be None, when
            ``all_deleted`` is set)
        create_empty_commit: An empty commit was explicitly requested
        allow_empty_commit: Empty commits are acceptable

    Returns:
        The SynthesisState to run
    """
    if all_deleted:
        return SynthesisState.ALL_DELETED

    if change_set is None:
        raise ValueError("change_set is required unless all files were deleted")

    if not change_set.is_empty:
        return SynthesisState.NORMAL_PUBLISH

    if create_empty_commit or allow_empty_commit:
        return SynthesisState.FORCE_EMPTY

    return SynthesisState.NO_CHANGES
