"""Filesystem collaborators for applying patches."""

from patchwise.fs.adapter import (
    FileSystemOps,
    PathError,
    default_root,
    is_relative_path,
    snapshot_directory,
)

__all__ = [
    "FileSystemOps",
    "PathError",
    "default_root",
    "is_relative_path",
    "snapshot_directory",
]
