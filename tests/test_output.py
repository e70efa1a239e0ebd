"""Tests for the JSON and terminal reporters."""

import json

from patchwise.engine import PatchResult
from patchwise.output import json_report, terminal
from patchwise.patch.models import ActionType, Commit, FileChange


def _result(**kwargs) -> PatchResult:
    commit = Commit(changes={
        "new.txt": FileChange(type=ActionType.ADD, new_content="a\nb"),
        "old.txt": FileChange(type=ActionType.DELETE, old_content="x"),
        "src.txt": FileChange(
            type=ActionType.UPDATE,
            old_content="1\n2\n3",
            new_content="1\n3",
            move_path="dst.txt",
        ),
    })
    return PatchResult(commit=commit, files_read=["old.txt", "src.txt"], applied=True, **kwargs)


class TestJsonReport:
    def test_structure(self):
        data = json_report.to_dict(_result(fuzz=1))
        assert data["fuzz"] == 1
        assert data["fuzz_exceeded"] is True
        assert data["files_read"] == ["old.txt", "src.txt"]
        assert data["applied"] is True
        assert len(data["changes"]) == 3

    def test_change_entries(self):
        changes = {c["path"]: c for c in json_report.to_dict(_result())["changes"]}
        assert changes["new.txt"] == {"path": "new.txt", "action": "add", "old_lines": None, "new_lines": 2}
        assert changes["old.txt"]["action"] == "delete"
        assert changes["src.txt"]["move_to"] == "dst.txt"
        assert "move_to" not in changes["new.txt"]

    def test_render_is_valid_json(self):
        assert json.loads(json_report.render(_result()))["version"] == "1.0"

    def test_render_commit(self):
        data = json.loads(json_report.render_commit(_result().commit))
        assert [c["path"] for c in data["changes"]] == ["new.txt", "old.txt", "src.txt"]


class TestTerminalReport:
    def test_applied(self, capsys):
        terminal.render(_result())
        err = capsys.readouterr().err
        assert "Patch Applied" in err
        assert "Patch applied successfully" in err

    def test_dry_run(self, capsys):
        terminal.render(_result(dry_run=True))
        err = capsys.readouterr().err
        assert "Dry run" in err

    def test_fuzz_warning(self, capsys):
        terminal.render(_result(fuzz=100, fuzz_threshold=1))
        assert "fuzz 100" in capsys.readouterr().err

    def test_identical_snapshots(self, capsys):
        terminal.render_commit(Commit())
        assert "identical" in capsys.readouterr().err


class TestBracketedPaths:
    def test_paths_shown_verbatim(self, capsys):
        commit = Commit(changes={
            "app/[id]/page.tsx": FileChange(type=ActionType.ADD, new_content="x"),
            "x[/y]": FileChange(type=ActionType.UPDATE, old_content="a", new_content="b", move_path="z[b]"),
        })
        terminal.render_commit(commit)
        err = capsys.readouterr().err
        assert "app/[id]/page.tsx" in err
        assert "x[/y]" in err
        assert "z[b]" in err
