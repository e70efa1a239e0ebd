"""Patch engine: models, section scanner, context matcher, parser, commits."""

from patchwise.patch.commit import apply_commit, assemble_changes, patch_to_commit
from patchwise.patch.matcher import EOF_FALLBACK_PENALTY, Match, find_anchor, find_context
from patchwise.patch.models import (
    ActionType,
    Chunk,
    Commit,
    DiffError,
    FileChange,
    Patch,
    PatchAction,
)
from patchwise.patch.parser import extract_patch_text, identify_files_needed, text_to_patch
from patchwise.patch.scanner import Section, scan_section

__all__ = [
    "ActionType",
    "Chunk",
    "Commit",
    "DiffError",
    "EOF_FALLBACK_PENALTY",
    "FileChange",
    "Match",
    "Patch",
    "PatchAction",
    "Section",
    "apply_commit",
    "assemble_changes",
    "extract_patch_text",
    "find_anchor",
    "find_context",
    "identify_files_needed",
    "patch_to_commit",
    "scan_section",
    "text_to_patch",
]
