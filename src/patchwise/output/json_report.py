"""JSON reporter for scripting and CI."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from patchwise.engine import PatchResult
from patchwise.patch.models import Commit


def _line_count(content: str | None) -> int | None:
    if content is None:
        return None
    return len(content.split("\n"))


def changes_to_list(commit: Commit) -> List[Dict[str, Any]]:
    """Convert a Commit to JSON-serialisable change entries."""
    changes: List[Dict[str, Any]] = []
    for path, change in commit.changes.items():
        changes.append({
            "path": path,
            "action": change.type.value,
            "old_lines": _line_count(change.old_content),
            "new_lines": _line_count(change.new_content),
            **({"move_to": change.move_path} if change.move_path else {}),
        })
    return changes


def to_dict(result: PatchResult) -> Dict[str, Any]:
    """Convert PatchResult to a JSON-serialisable dict."""
    return {
        "version": "1.0",
        "dry_run": result.dry_run,
        "applied": result.applied,
        "fuzz": result.fuzz,
        "fuzz_exceeded": result.fuzz_exceeded,
        "files_read": result.files_read,
        "changes": changes_to_list(result.commit),
        "duration_ms": result.duration_ms,
    }


def render(result: PatchResult) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result), indent=2)


def render_commit(commit: Commit) -> str:
    """Return formatted JSON for a bare commit (snapshot diff)."""
    return json.dumps({"version": "1.0", "changes": changes_to_list(commit)}, indent=2)
