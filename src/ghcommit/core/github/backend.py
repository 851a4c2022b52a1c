"""
Remote repository protocol.

This module defines the RemoteRepository protocol consumed by the
commit-synthesis engine. GitHubClient is the production implementation;
tests provide an in-memory one.
"""

from typing import Protocol, runtime_checkable

from .models import GitCommit, GitReference, GitTree, TreeDescriptor


@runtime_checkable
class RemoteRepository(Protocol):
    """
    Protocol for the remote object-creation API.

    Implementations are responsible for:
    - Resolving refs, commits and trees
    - Creating blobs, trees and commits
    - Creating and moving branch refs
    """

    def get_ref(self, ref: str) -> GitReference | None:
        """
        Get a reference.

        Args:
            ref: Reference name without the refs/ prefix, e.g. heads/main

        Returns:
            GitReference if it exists, None otherwise
        """
        ...

    def get_commit(self, sha: str) -> GitCommit:
        """Get a commit object by SHA."""
        ...

    def get_tree(self, sha: str, recursive: bool = False) -> GitTree:
        """Get a tree listing by SHA."""
        ...

    def create_blob(self, content: str, encoding: str) -> str:
        """
        Create a blob.

        Args:
            content: Blob content, encoded as described by ``encoding``
            encoding: Either "utf-8" or "base64"

        Returns:
            SHA of the new blob
        """
        ...

    def create_tree(self, descriptor: TreeDescriptor) -> str:
        """Create a tree from a descriptor and return its SHA."""
        ...

    def create_commit(self, message: str, tree_sha: str, parent_sha: str) -> str:
        """Create a single-parent commit and return its SHA."""
        ...

    def create_ref(self, ref: str, sha: str) -> GitReference:
        """
        Create a reference.

        Args:
            ref: Fully qualified reference name, e.g. refs/heads/main
            sha: Commit SHA to point at
        """
        ...

    def update_ref(self, ref: str, sha: str, force: bool = True) -> GitReference:
        """
        Move an existing reference.

        Args:
            ref: Reference name without the refs/ prefix, e.g. heads/main
            sha: Commit SHA to point at
            force: Allow non-fast-forward updates
        """
        ...
