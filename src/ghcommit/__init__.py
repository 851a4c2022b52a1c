"""
gh-commit - publish a local working copy as a remote commit.

Synthesizes commits directly through the GitHub git-data API (blobs, trees,
commits and refs) instead of pushing local history.
"""

__version__ = "0.4.0"

# Re-export the main entry points for convenience
from ghcommit.core.publish.models import PublishOutcome, PublishRequest, PublishResult
from ghcommit.core.publish.service import PublishService

__all__ = [
    "PublishOutcome",
    "PublishRequest",
    "PublishResult",
    "PublishService",
    "__version__",
]
