"""
Local working copy inspection.

Example:
    >>> from ghcommit.core.workcopy import WorkingCopy
    >>> wc = WorkingCopy(Path("."))
    >>> wc.status()
"""

from .repo import METADATA_DIR, WorkingCopy, WorkingCopyError, parse_porcelain

__all__ = [
    "METADATA_DIR",
    "WorkingCopy",
    "WorkingCopyError",
    "parse_porcelain",
]
