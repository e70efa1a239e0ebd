"""patchwise — apply human-authored text patches with fuzzy context matching."""

__version__ = "0.1.0"

from typing import Dict

from patchwise.engine import PatchResult, process_patch
from patchwise.patch import (
    ActionType,
    Chunk,
    Commit,
    DiffError,
    FileChange,
    Patch,
    PatchAction,
    apply_commit,
    assemble_changes,
    identify_files_needed,
    patch_to_commit,
    text_to_patch,
)


def parse(text: str, orig: Dict[str, str]) -> Patch:
    """Parse patch *text* against *orig*; ``text_to_patch`` also returns the fuzz."""
    patch, _fuzz = text_to_patch(text, orig)
    return patch


# Entry-point names for the engine operations.
materialize = patch_to_commit
diff_snapshots = assemble_changes
apply = apply_commit
files_referenced = identify_files_needed

__all__ = [
    "ActionType",
    "Chunk",
    "Commit",
    "DiffError",
    "FileChange",
    "Patch",
    "PatchAction",
    "PatchResult",
    "__version__",
    "apply",
    "apply_commit",
    "assemble_changes",
    "diff_snapshots",
    "files_referenced",
    "identify_files_needed",
    "materialize",
    "parse",
    "patch_to_commit",
    "process_patch",
    "text_to_patch",
]
