"""Filesystem adapter — read / write / delete under a root directory."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, Optional

_WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]")


class PathError(Exception):
    """Raised when a patch path is absolute or escapes the root."""


def is_relative_path(rel: str) -> bool:
    """Reject empty, absolute POSIX, home-relative and Windows drive paths."""
    if not rel:
        return False
    if rel.startswith(("/", "\\", "~")):
        return False
    if _WINDOWS_DRIVE_RE.match(rel):
        return False
    return not os.path.isabs(os.path.normpath(rel))


class FileSystemOps:
    """File-backed read/write/delete primitives for applying a commit.

    Every path is resolved under *root*. ``changes`` records what happened to
    each relative path: ``created`` | ``updated`` | ``deleted``.
    """

    def __init__(
        self,
        root: Path,
        *,
        encoding: str = "utf-8",
        allow_absolute: bool = False,
    ) -> None:
        self._root = root
        self._encoding = encoding
        self._allow_absolute = allow_absolute
        self._changes: Dict[str, str] = {}

    @property
    def changes(self) -> Dict[str, str]:
        return self._changes

    def resolve(self, rel: str) -> Path:
        """Return the absolute path for *rel*, enforcing path safety."""
        if self._allow_absolute and os.path.isabs(rel):
            return Path(rel)
        if not is_relative_path(rel):
            raise PathError(f"Absolute paths are not allowed: {rel}")
        root = self._root.resolve()
        abs_path = (root / rel).resolve()
        if abs_path != root and root not in abs_path.parents:
            raise PathError(f"Path escapes root: {rel}")
        return abs_path

    def _record(self, rel: str, change: str) -> None:
        prev = self._changes.get(rel)
        if prev is None or change == "deleted":
            self._changes[rel] = change
        elif change == "updated" and prev != "deleted":
            self._changes[rel] = change

    def read(self, rel: str) -> str:
        path = self.resolve(rel)
        # newline="" keeps CRLF files byte-for-byte through a round trip
        with path.open("r", encoding=self._encoding, newline="") as fh:
            return fh.read()

    def write(self, rel: str, content: str) -> None:
        path = self.resolve(rel)
        existed = path.exists()
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding=self._encoding, newline="") as fh:
            fh.write(content)
        self._record(rel, "updated" if existed else "created")

    def delete(self, rel: str) -> None:
        path = self.resolve(rel)
        path.unlink()
        self._record(rel, "deleted")


def snapshot_directory(root: Path, *, encoding: str = "utf-8") -> Dict[str, str]:
    """Return ``{relative posix path: text}`` for every readable text file."""
    snapshot: Dict[str, str] = {}
    if not root.is_dir():
        raise PathError(f"Not a directory: {root}")
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        rel_path = path.relative_to(root)
        if ".git" in rel_path.parts[:-1]:
            continue
        rel = rel_path.as_posix()
        try:
            with path.open("r", encoding=encoding, newline="") as fh:
                snapshot[rel] = fh.read()
        except UnicodeDecodeError:
            # Binary content is out of scope.
            continue
    return snapshot


def default_root(root: Optional[str] = None) -> Path:
    """Return *root* as a Path, or the current directory."""
    return Path(root) if root else Path.cwd()
