"""
Local change classification.

Buckets working-copy status codes into added, updated and deleted paths.
"""

from __future__ import annotations

from collections.abc import Mapping

from ghcommit.core.errors import UnsupportedStatusError
from ghcommit.core.publish.models import ChangeSet

DELETED_CODES = frozenset({"D"})
UPDATED_CODES = frozenset({"M", "R", "C", "U"})
ADDED_CODES = frozenset({"?", "A"})


def classify(statuses: Mapping[str, str]) -> ChangeSet:
    """
    Classify per-path status codes into a ChangeSet.

    Rules, first match wins: ``D`` is a deletion; ``M``, ``R``, ``C`` and
    ``U`` are updates; ``?`` and ``A`` are additions.

    Args:
        statuses: Mapping of working-copy-relative path to status code

    Returns:
        ChangeSet with each bucket sorted by path

    Raises:
        UnsupportedStatusError: For any other code; no path is ever dropped
    """
    added: list[str] = []
    updated: list[str] = []
    deleted: list[str] = []

    for path in sorted(statuses):
        code = statuses[path]
        if code in DELETED_CODES:
            deleted.append(path)
        elif code in UPDATED_CODES:
            updated.append(path)
        elif code in ADDED_CODES:
            added.append(path)
        else:
            raise UnsupportedStatusError(path, code)

    return ChangeSet(added=tuple(added), updated=tuple(updated), deleted=tuple(deleted))
