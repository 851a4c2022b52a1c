"""
gh-commit CLI - Main application entry point.

Publishes the state of a local working copy as a single commit on a remote
GitHub branch, using the git-data API instead of `git push`.
"""

import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ghcommit import __version__
from ghcommit.cli.errors import ExitCode, print_error, print_publish_error
from ghcommit.core.config import GhCommitConfig, load_config, load_layered_env
from ghcommit.core.errors import PublishError
from ghcommit.core.github import GitHubClient, GitHubClientError, RepoInfo
from ghcommit.core.github.models import DEFAULT_HOST
from ghcommit.core.publish import PublishOutcome, PublishRequest, PublishService
from ghcommit.core.workcopy import WorkingCopy, WorkingCopyError

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="gh-commit",
    help="Commit local files to a GitHub branch through the API",
    no_args_is_help=False,
    invoke_without_command=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


class RichPublishCallback:
    """Rich Console-based implementation of PublishEventCallback."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def on_progress(self, message: str) -> None:
        """Display a progress line."""
        self.console.print(f"[cyan]→[/cyan] {escape(message)}")

    def on_status(self, message: str, level: str = "info") -> None:
        """Display status message with appropriate styling."""
        if level == "success":
            self.console.print(f"[green]{escape(message)}[/green]")
        elif level == "warning":
            self.console.print(f"[yellow]{escape(message)}[/yellow]")
        elif level == "error":
            self.console.print(f"[red]{escape(message)}[/red]")
        else:
            self.console.print(escape(message))


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for the CLI.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def resolve_repo(repo: str | None, working_dir: Path, config: GhCommitConfig) -> RepoInfo:
    """
    Work out which repository to publish to.

    An explicit OWNER/REPO uses the configured api.hostname when one is set;
    otherwise the repository comes from the working copy's origin remote.

    Raises:
        ValueError: If ``repo`` cannot be parsed
        GitHubClientError: If there is no usable origin remote
    """
    if repo is None:
        return GitHubClient.repo_from_project_dir(working_dir)

    info = RepoInfo.parse(repo)
    hostname = config.api.hostname
    if hostname and info.host == DEFAULT_HOST and repo.count("/") == 1 and "://" not in repo:
        info = info.model_copy(update={"host": hostname})
    return info


def resolve_base_branch(base: str | None, working_dir: Path, branch: str) -> str:
    """
    Work out which remote branch the new commit is parented on.

    Defaults to the branch checked out in the working copy. A detached
    working copy falls back to the target branch.
    """
    if base:
        return base
    try:
        return WorkingCopy(working_dir).current_branch()
    except WorkingCopyError as e:
        logger.debug("Cannot read checked-out branch (%s); using %s as base", e, branch)
        return branch


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    repo: str | None = typer.Option(
        None,
        "--repo",
        "-R",
        help="Repository as OWNER/REPO, HOST/OWNER/REPO or URL (default: origin remote)",
    ),
    branch: str | None = typer.Option(
        None,
        "--branch",
        "-b",
        help="Branch to commit to (default: main)",
    ),
    directory: Path | None = typer.Option(
        None,
        "--dir",
        "-d",
        help="Working copy to publish (default: current directory)",
        file_okay=False,
    ),
    message: str | None = typer.Option(
        None,
        "--message",
        "-m",
        help="Commit message",
    ),
    delete_path: str | None = typer.Option(
        None,
        "--delete-path",
        help="Only publish deletions of files under this path",
    ),
    base: str | None = typer.Option(
        None,
        "--base",
        help="Branch to parent the commit on (default: checked-out branch)",
    ),
    empty: bool = typer.Option(
        False,
        "--empty",
        "-e",
        help="Create an empty commit when there is nothing to publish",
    ),
    allow_empty: bool = typer.Option(
        False,
        "--allow-empty",
        "-a",
        help="Allow empty commits",
    ),
    allow_empty_tree: bool = typer.Option(
        False,
        "--allow-empty-tree",
        help="Allow committing an empty tree when every file was deleted",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    Commit the working copy's changes to a GitHub branch.

    Changed and untracked files are uploaded as blobs, layered onto the base
    branch's tree and committed with the base head as the only parent. The
    target branch is created or moved to the new commit.

    Exit codes:
        0   files (or an empty commit/tree) were published
        1   an error occurred
        10  there were no new files to commit

    Examples:
        gh-commit -R octo/hello -b gh-pages -m "Publish site" -d public
        gh-commit --empty -m "Trigger deploy"
    """
    if ctx.invoked_subcommand is not None:
        return

    setup_logging(debug)

    working_dir = (directory or Path.cwd()).resolve()
    load_layered_env(project_dir=working_dir)

    try:
        config = load_config(working_dir, use_cache=False)
    except ValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    target_branch = branch or config.branch

    try:
        repo_info = resolve_repo(repo, working_dir, config)
    except ValueError as e:
        print_error(str(e), solution="gh-commit -R OWNER/REPO")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except GitHubClientError as e:
        print_publish_error(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    request = PublishRequest(
        working_dir=working_dir,
        repo=repo_info,
        base_branch=resolve_base_branch(base, working_dir, target_branch),
        branch=target_branch,
        message=message if message is not None else config.message,
        delete_path=delete_path if delete_path is not None else config.delete_path,
        create_empty_commit=empty,
        allow_empty_commit=allow_empty,
        allow_empty_tree=allow_empty_tree,
    )
    logger.debug("Publish request: %s", request)

    client = GitHubClient.from_gh_cli(
        repo_info,
        rate_limit_retries=config.api.rate_limit_retries,
        rate_limit_wait=config.api.rate_limit_wait,
        timeout=config.api.timeout,
    )
    service = PublishService(
        client,
        force_update=config.api.force_update,
        callback=RichPublishCallback(console),
    )

    try:
        result = service.publish(request)
    except (PublishError, GitHubClientError) as e:
        if debug:
            logger.exception("Publish failed")
        print_publish_error(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if result.outcome == PublishOutcome.NO_OP:
        raise typer.Exit(result.exit_code)

    ref = result.ref.ref if result.ref else result.commit_sha
    console.print(
        f"[green]Files uploaded to {result.repo} on branch {result.branch} with ref {ref}[/green]"
    )
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def version() -> None:
    """Show gh-commit version and exit."""
    console.print(f"gh-commit version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
