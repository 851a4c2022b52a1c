"""
Tests for local change classification and the empty-state policy.
"""

import pytest
from pydantic import ValidationError

from ghcommit.core.errors import UnsupportedStatusError
from ghcommit.core.publish import ChangeSet, SynthesisState, classify, decide_state
from ghcommit.core.workcopy import WorkingCopy


class TestClassify:
    """Test classify()."""

    def test_buckets_by_code(self):
        """Each supported code lands in its bucket."""
        change_set = classify(
            {
                "gone.txt": "D",
                "mod.txt": "M",
                "renamed.txt": "R",
                "copied.txt": "C",
                "conflict.txt": "U",
                "new.txt": "?",
                "staged.txt": "A",
            }
        )

        assert change_set.deleted == ("gone.txt",)
        assert change_set.updated == ("conflict.txt", "copied.txt", "mod.txt", "renamed.txt")
        assert change_set.added == ("new.txt", "staged.txt")

    def test_empty_status_is_empty_change_set(self):
        """No status entries means nothing to publish."""
        assert classify({}).is_empty

    def test_unsupported_code_names_path_and_code(self):
        """Unknown codes are fatal and never dropped."""
        with pytest.raises(UnsupportedStatusError) as exc_info:
            classify({"ok.txt": "M", "weird.bin": "X"})

        assert exc_info.value.path == "weird.bin"
        assert exc_info.value.code == "X"
        assert "weird.bin" in str(exc_info.value)
        assert "X" in str(exc_info.value)

    def test_uploads_are_updated_then_added(self):
        """uploads lists updated paths before added ones."""
        change_set = classify({"b.txt": "?", "a.txt": "M"})
        assert change_set.uploads == ("a.txt", "b.txt")


class TestChangeSet:
    """Test the ChangeSet model."""

    def test_paths_are_disjoint(self):
        """A path may not appear in two buckets."""
        with pytest.raises(ValidationError, match="more than one change bucket"):
            ChangeSet(added=("a.txt",), deleted=("a.txt",))

    def test_is_frozen(self):
        """ChangeSets cannot be modified after classification."""
        change_set = ChangeSet(added=("a.txt",))
        with pytest.raises(ValidationError):
            change_set.added = ()


class TestDecideState:
    """Test the empty-state policy order."""

    def test_all_deleted_wins(self):
        """ALL_DELETED is checked first, even with flags set."""
        state = decide_state(
            all_deleted=True,
            change_set=None,
            create_empty_commit=True,
            allow_empty_commit=True,
        )
        assert state == SynthesisState.ALL_DELETED

    def test_no_changes(self):
        """Empty change set without flags is NO_CHANGES."""
        state = decide_state(all_deleted=False, change_set=ChangeSet())
        assert state == SynthesisState.NO_CHANGES

    @pytest.mark.parametrize(
        "create_empty_commit,allow_empty_commit",
        [(True, False), (False, True), (True, True)],
    )
    def test_force_empty(self, create_empty_commit, allow_empty_commit):
        """Either empty-commit flag turns an empty change set into FORCE_EMPTY."""
        state = decide_state(
            all_deleted=False,
            change_set=ChangeSet(),
            create_empty_commit=create_empty_commit,
            allow_empty_commit=allow_empty_commit,
        )
        assert state == SynthesisState.FORCE_EMPTY

    def test_content_is_normal_publish(self):
        """Any content publishes normally regardless of flags."""
        state = decide_state(
            all_deleted=False,
            change_set=ChangeSet(updated=("a.txt",)),
            create_empty_commit=True,
        )
        assert state == SynthesisState.NORMAL_PUBLISH

    def test_change_set_required(self):
        """Without ALL_DELETED a change set must be given."""
        with pytest.raises(ValueError, match="change_set is required"):
            decide_state(all_deleted=False, change_set=None)


def _paths_git_reports(output):
    """Every path named in porcelain -z output, origin records included."""
    paths = set()
    records = iter(output.split("\0"))
    for record in records:
        if not record:
            continue
        paths.add(record[3:])
        if {"R", "C"} & set(record[:2]):
            paths.add(next(records))
    return paths


class TestClassifyWorkingCopy:
    """classify() over real git status output."""

    def test_every_reported_path_is_classified(self, git_repo, run_git):
        """Staged renames, copies and added-then-deleted files all land in a bucket."""
        guide = "".join(f"line {n} of the guide\n" for n in range(20))
        (git_repo / "docs" / "guide.md").write_text(guide)
        run_git(git_repo, "add", "-A")
        run_git(git_repo, "commit", "-q", "-m", "Add guide")
        run_git(git_repo, "config", "status.renames", "copies")

        run_git(git_repo, "mv", "README.md", "README.rst")
        (git_repo / "docs" / "guide-copy.md").write_text(guide)
        (git_repo / "docs" / "guide.md").write_text(guide + "one more line\n")
        (git_repo / "scratch.txt").write_text("scratch\n")
        run_git(git_repo, "add", "-A")
        (git_repo / "scratch.txt").unlink()
        (git_repo / "notes.txt").write_text("notes\n")

        change_set = classify(WorkingCopy(git_repo).status())
        classified = {*change_set.added, *change_set.updated, *change_set.deleted}
        reported = _paths_git_reports(
            run_git(git_repo, "status", "--porcelain", "-z", "--untracked-files=all")
        )

        assert classified == reported
        assert classified == {
            "README.md",
            "README.rst",
            "docs/guide.md",
            "docs/guide-copy.md",
            "scratch.txt",
            "notes.txt",
        }
        assert "README.md" in change_set.deleted
        assert "scratch.txt" in change_set.deleted
        assert "docs/guide.md" in change_set.updated
        assert "notes.txt" in change_set.added
