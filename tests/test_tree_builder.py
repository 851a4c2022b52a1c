"""
Tests for content upload, tree building, commit assembly and branch reads.
"""

import pytest
from pydantic import ValidationError

from ghcommit.core.errors import LocalIOError, RefNotFoundError
from ghcommit.core.github.models import TreeDescriptor, TreeEntry
from ghcommit.core.publish import (
    ChangeSet,
    FileAction,
    RemoteCommitRef,
    TreeBuilder,
    read_remote_state,
)
from ghcommit.core.publish.commits import assemble_commit
from ghcommit.core.publish.tree_builder import encode_content
from ghcommit.core.workcopy import WorkingCopy


@pytest.fixture
def working_copy(git_repo):
    return WorkingCopy(git_repo)


class TestEncodeContent:
    """Test encode_content()."""

    def test_utf8_text(self):
        assert encode_content("héllo\n".encode()) == ("héllo\n", "utf-8")

    def test_binary(self):
        assert encode_content(b"\xff\xfe") == ("//4=", "base64")

    def test_empty(self):
        assert encode_content(b"") == ("", "utf-8")


class TestTreeBuilderPlan:
    """Test how each path of a change set is planned."""

    def test_deletions_in_scope_are_removed(self, remote, working_copy):
        """Deletions under the scope are removals, others are kept."""
        builder = TreeBuilder(remote, working_copy, delete_scope="docs/")
        plan = builder.plan(
            ChangeSet(deleted=("docs/old.md", "src/old.py"), updated=("README.md",))
        )

        actions = {change.path: change.action for change in plan}
        assert actions == {
            "docs/old.md": FileAction.REMOVE,
            "src/old.py": FileAction.KEEP,
            "README.md": FileAction.UPLOAD,
        }

    def test_empty_scope_covers_everything(self, remote, working_copy):
        """The default scope applies every deletion."""
        builder = TreeBuilder(remote, working_copy)
        assert builder.in_delete_scope("any/path.txt")

    def test_scope_is_a_plain_prefix(self, remote, working_copy):
        """Prefixes match without regard to directory boundaries."""
        builder = TreeBuilder(remote, working_copy, delete_scope="doc")
        assert builder.in_delete_scope("docs/index.md")
        assert builder.in_delete_scope("doc.txt")
        assert not builder.in_delete_scope("src/doc.txt")


class TestTreeBuilderBuild:
    """Test uploading and describing trees."""

    def test_build_uploads_every_changed_file(self, git_repo, remote, working_copy):
        """Entries are the uploaded blobs, removals the scoped deletions."""
        (git_repo / "a.txt").write_text("a\n")
        (git_repo / "README.md").write_text("changed\n")
        builder = TreeBuilder(remote, working_copy)

        descriptor = builder.build(
            ChangeSet(added=("a.txt",), updated=("README.md",), deleted=("docs/index.md",)),
            "parent-tree",
        )

        assert descriptor.parent_tree_sha == "parent-tree"
        assert descriptor.paths == ["README.md", "a.txt"]
        assert descriptor.removals == ("docs/index.md",)
        assert remote.call_names() == ["create_blob", "create_blob"]
        for entry in descriptor.entries:
            assert entry.mode == "100644"
            assert entry.type == "blob"
            assert entry.sha in remote.blobs

    def test_unreadable_file_aborts(self, remote, working_copy):
        """A missing file stops the build before anything else is uploaded."""
        builder = TreeBuilder(remote, working_copy)

        with pytest.raises(LocalIOError):
            builder.build(ChangeSet(added=("missing.txt", "z.txt")), "parent-tree")

        assert remote.calls == []

    def test_create_without_changes_reuses_parent(self, remote, working_copy):
        """An empty descriptor makes no remote call."""
        builder = TreeBuilder(remote, working_copy)

        assert builder.create(TreeDescriptor(parent_tree_sha="abc123")) == "abc123"
        assert remote.calls == []

    def test_create_with_removals(self, remote, working_copy):
        """Removals are applied by the remote."""
        base = remote.head("main")
        builder = TreeBuilder(remote, working_copy)

        tree_sha = builder.create(
            TreeDescriptor(parent_tree_sha=base.tree_sha, removals=("docs/index.md",))
        )

        assert remote.tree_files(tree_sha) == {"README.md": "# Test Repo\n"}


class TestTreeModels:
    """Deletions cannot be expressed as tree entries."""

    def test_entry_requires_sha(self):
        with pytest.raises(ValidationError):
            TreeEntry(path="a.txt", sha="")

    def test_entry_requires_path(self):
        with pytest.raises(ValidationError):
            TreeEntry(path="", sha="abc")

    def test_descriptor_rejects_upload_and_removal_of_same_path(self):
        with pytest.raises(ValidationError, match="both uploaded and removed"):
            TreeDescriptor(
                parent_tree_sha="abc",
                entries=(TreeEntry(path="a.txt", sha="def"),),
                removals=("a.txt",),
            )


class TestReadRemoteState:
    """Test read_remote_state()."""

    def test_reads_head_and_tree(self, remote):
        head = remote.head("main")

        state = read_remote_state(remote, "main")

        assert state == RemoteCommitRef(
            branch="main", commit_sha=head.sha, tree_sha=head.tree_sha
        )
        assert remote.call_names() == ["get_ref", "get_commit"]

    def test_missing_branch(self, remote):
        with pytest.raises(RefNotFoundError, match="Branch 'develop' not found"):
            read_remote_state(remote, "develop")


class TestAssembleCommit:
    """Test assemble_commit()."""

    def test_single_parent(self, remote):
        """The commit has the base head as its only parent."""
        base = read_remote_state(remote, "main")

        sha = assemble_commit(remote, base.tree_sha, base, "Update")

        commit = remote.commits[sha]
        assert commit.parent_shas == (base.commit_sha,)
        assert commit.tree_sha == base.tree_sha
        assert commit.message == "Update"
