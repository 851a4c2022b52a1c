"""
Standardized error handling and exit codes for the gh-commit CLI.

This module provides consistent error messaging with actionable guidance
and the exit codes scripts rely on.
"""

from rich.console import Console
from rich.markup import escape

from ghcommit.core.errors import (
    AllDeletedWithoutFlagError,
    ConcurrentModificationError,
    LocalIOError,
    RefNotFoundError,
    UnsupportedStatusError,
)
from ghcommit.core.github.exceptions import GitHubClientError, RemoteAPIError, TreeTooLargeError
from ghcommit.core.publish.models import ExitCode  # noqa: F401  (re-exported for the CLI)
from ghcommit.core.workcopy import WorkingCopyError

console = Console(stderr=True)


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Branch 'dev' not found on the remote repository",
        ...     solution="git push origin dev",
        ... )
    """
    console.print(f"[red]Error uploading files:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_publish_error(error: Exception) -> None:
    """Print a publish failure with a hint matching its type."""
    if isinstance(error, RefNotFoundError):
        print_error(
            str(error),
            reason="The base branch must exist remotely before files can be committed onto it",
            solution=f"git push origin {error.branch}  # or pass --base <existing-branch>",
        )
    elif isinstance(error, AllDeletedWithoutFlagError):
        print_error(str(error), solution="gh-commit --allow-empty-tree")
    elif isinstance(error, UnsupportedStatusError):
        print_error(
            str(error),
            reason="Conflicted or unknown entries cannot be published",
            solution=f"git status -- {error.path}",
        )
    elif isinstance(error, ConcurrentModificationError):
        print_error(
            str(error),
            solution="Re-run gh-commit, or set api.force_update to true",
        )
    elif isinstance(error, WorkingCopyError):
        print_error(
            str(error),
            solution="Run from inside a git working copy, or pass --dir and --base",
        )
    elif isinstance(error, LocalIOError):
        print_error(str(error), reason=f"Path: {error.path}" if error.path else None)
    elif isinstance(error, TreeTooLargeError):
        print_error(
            str(error),
            reason=(
                "Deletions and empty commits rebuild the whole tree, which needs a "
                "complete recursive listing; GitHub truncates it for very large repositories"
            ),
            solution="Narrow removals with --delete-path, or push this change with git",
        )
    elif isinstance(error, RemoteAPIError):
        reason = f"HTTP {error.status}" if error.status else None
        if error.is_rate_limited:
            solution = "Wait for the rate limit to reset, or raise api.rate_limit_retries"
        elif error.status in (401, 403):
            solution = "gh auth status"
        else:
            solution = None
        print_error(str(error), reason=reason, solution=solution)
    elif isinstance(error, GitHubClientError):
        print_error(str(error), solution="gh-commit -R OWNER/REPO")
    else:
        print_error(str(error))
