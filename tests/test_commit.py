"""Tests for commit materialization, snapshot diffing and commit application."""

import pytest

from patchwise.patch.commit import apply_commit, assemble_changes, patch_to_commit
from patchwise.patch.models import (
    ActionType,
    Chunk,
    Commit,
    DiffError,
    FileChange,
    Patch,
    PatchAction,
)
from patchwise.patch.parser import text_to_patch


class TestAssembleChanges:
    def test_added(self):
        commit = assemble_changes({}, {"new.txt": "new content"})
        change = commit.changes["new.txt"]
        assert change.type == ActionType.ADD
        assert change.new_content == "new content"

    def test_deleted(self):
        commit = assemble_changes({"old.txt": "old content"}, {})
        change = commit.changes["old.txt"]
        assert change.type == ActionType.DELETE
        assert change.old_content == "old content"

    def test_updated(self):
        commit = assemble_changes({"f.txt": "old content"}, {"f.txt": "new content"})
        change = commit.changes["f.txt"]
        assert change.type == ActionType.UPDATE
        assert change.old_content == "old content"
        assert change.new_content == "new content"

    def test_unchanged_paths_skipped(self):
        commit = assemble_changes({"same.txt": "x"}, {"same.txt": "x"})
        assert commit.changes == {}

    def test_keys_sorted(self):
        orig = {"c.txt": "c", "a.txt": "a", "b.txt": "b"}
        dest = {"d.txt": "d", "b.txt": "B"}
        commit = assemble_changes(orig, dest)
        assert list(commit.changes) == ["a.txt", "b.txt", "c.txt", "d.txt"]
        assert [c.type for c in commit.changes.values()] == [
            ActionType.DELETE,
            ActionType.UPDATE,
            ActionType.DELETE,
            ActionType.ADD,
        ]

    def test_none_counts_as_absent(self):
        commit = assemble_changes({"f.txt": None}, {"f.txt": "now here"})
        assert commit.changes["f.txt"].type == ActionType.ADD

    def test_empty_file_added(self):
        commit = assemble_changes({}, {"empty.txt": ""})
        assert commit.changes["empty.txt"].type == ActionType.ADD
        assert commit.changes["empty.txt"].new_content == ""

    def test_round_trip_reproduces_destination(self, store_factory):
        orig = {"keep.txt": "same", "edit.txt": "a\nb\nc", "gone.txt": "bye"}
        dest = {"keep.txt": "same", "edit.txt": "a\nB\nc\nd\n", "fresh.txt": "hi\n"}
        store = store_factory(orig)
        apply_commit(assemble_changes(orig, dest), store.write, store.remove)
        assert store.files == dest


class TestPatchToCommit:
    def test_add(self):
        patch = Patch(actions={"new.txt": PatchAction(type=ActionType.ADD, new_file="new content")})
        change = patch_to_commit(patch, {}).changes["new.txt"]
        assert change.type == ActionType.ADD
        assert change.new_content == "new content"

    def test_delete(self):
        patch = Patch(actions={"old.txt": PatchAction(type=ActionType.DELETE)})
        change = patch_to_commit(patch, {"old.txt": "old content"}).changes["old.txt"]
        assert change.type == ActionType.DELETE
        assert change.old_content == "old content"

    def test_update(self, simple_update_patch, three_line_file):
        patch, _ = text_to_patch(simple_update_patch, three_line_file)
        change = patch_to_commit(patch, three_line_file).changes["file.txt"]
        assert change.type == ActionType.UPDATE
        assert change.old_content == "line 1\nline 2\nline 3"
        assert change.new_content == "line 1\nline 2 modified\nline 3"

    def test_move_keeps_content(self):
        orig = {"old.txt": "unchanged\n"}
        patch, _ = text_to_patch(
            "*** Begin Patch\n*** Update File: old.txt\n*** Move to: new.txt\n*** End Patch",
            orig,
        )
        change = patch_to_commit(patch, orig).changes["old.txt"]
        assert change.type == ActionType.UPDATE
        assert change.move_path == "new.txt"
        assert change.new_content == "unchanged\n"

    def test_insert_and_delete_only_chunks(self):
        orig = {"f.txt": "a\nb\nc\nd"}
        action = PatchAction(
            chunks=[
                Chunk(orig_index=1, del_lines=[], ins_lines=["a.5"]),
                Chunk(orig_index=2, del_lines=["c"], ins_lines=[]),
            ]
        )
        commit = patch_to_commit(Patch(actions={"f.txt": action}), orig)
        assert commit.changes["f.txt"].new_content == "a\na.5\nb\nd"

    def test_backward_chunk_fails(self):
        orig = {"f.txt": "a\nb\nc\nd\ne"}
        action = PatchAction(
            chunks=[
                Chunk(orig_index=3, del_lines=["d"], ins_lines=["D"]),
                Chunk(orig_index=1, del_lines=["b"], ins_lines=["B"]),
            ]
        )
        with pytest.raises(DiffError, match="orig_index 4 > chunk.orig_index 1"):
            patch_to_commit(Patch(actions={"f.txt": action}), orig)

    def test_chunk_past_end_fails(self):
        orig = {"f.txt": "a\nb\nc"}
        action = PatchAction(chunks=[Chunk(orig_index=10, del_lines=[], ins_lines=["x"])])
        with pytest.raises(DiffError, match="chunk.orig_index 10 > len\\(lines\\) 3"):
            patch_to_commit(Patch(actions={"f.txt": action}), orig)


class TestApplyCommit:
    def test_add(self, store_factory):
        store = store_factory({})
        commit = Commit(changes={"new.txt": FileChange(type=ActionType.ADD, new_content="new file content")})
        apply_commit(commit, store.write, store.remove)
        assert store.written == {"new.txt": "new file content"}
        assert store.removed == []

    def test_delete(self, store_factory):
        store = store_factory({"old.txt": "x"})
        commit = Commit(changes={"old.txt": FileChange(type=ActionType.DELETE, old_content="x")})
        apply_commit(commit, store.write, store.remove)
        assert store.written == {}
        assert store.removed == ["old.txt"]

    def test_update(self, store_factory):
        store = store_factory({"file.txt": "old"})
        commit = Commit(changes={
            "file.txt": FileChange(type=ActionType.UPDATE, old_content="old", new_content="new"),
        })
        apply_commit(commit, store.write, store.remove)
        assert store.written == {"file.txt": "new"}
        assert store.removed == []

    def test_update_with_move_writes_then_removes(self, store_factory):
        store = store_factory({"old.txt": "content"})
        commit = Commit(changes={
            "old.txt": FileChange(
                type=ActionType.UPDATE,
                old_content="content",
                new_content="modified content",
                move_path="new.txt",
            ),
        })
        apply_commit(commit, store.write, store.remove)
        assert store.calls == [("write", "new.txt"), ("remove", "old.txt")]
        assert store.files == {"new.txt": "modified content"}
