"""Shared test fixtures — sample files, patches, and in-memory storage."""

from __future__ import annotations

import textwrap
from typing import Dict, List

import pytest


class MemoryStore:
    """Dict-backed open/write/remove functions that record every call."""

    def __init__(self, files: Dict[str, str]) -> None:
        self.files = dict(files)
        self.opened: List[str] = []
        self.written: Dict[str, str] = {}
        self.removed: List[str] = []
        self.calls: List[tuple] = []

    def open(self, path: str) -> str:
        self.opened.append(path)
        return self.files[path]  # KeyError when missing

    def write(self, path: str, content: str) -> None:
        self.calls.append(("write", path))
        self.written[path] = content
        self.files[path] = content

    def remove(self, path: str) -> None:
        self.calls.append(("remove", path))
        self.removed.append(path)
        self.files.pop(path, None)


@pytest.fixture
def store_factory():
    return MemoryStore


@pytest.fixture
def three_line_file() -> Dict[str, str]:
    return {"file.txt": "line 1\nline 2\nline 3"}


@pytest.fixture
def simple_update_patch() -> str:
    """Replace the middle line of file.txt."""
    return textwrap.dedent("""\
        *** Begin Patch
        *** Update File: file.txt
         line 1
        -line 2
        +line 2 modified
         line 3
        *** End Patch
    """)


@pytest.fixture
def multi_op_files() -> Dict[str, str]:
    return {
        "to_update.txt": "line 1\nline 2\nline 3",
        "to_delete.txt": "delete me",
        "existing.txt": "original content",
    }


@pytest.fixture
def multi_op_patch() -> str:
    """Add, update, delete and move in one patch."""
    return textwrap.dedent("""\
        *** Begin Patch
        *** Add File: new.txt
        +brand new file
        *** Update File: to_update.txt
         line 1
        -line 2
        +line 2 updated
         line 3
        *** Delete File: to_delete.txt
        *** Update File: existing.txt
        *** Move to: moved.txt
        *** End Patch
    """)


@pytest.fixture
def heredoc_patch(simple_update_patch: str) -> str:
    """The simple update wrapped in a shell heredoc."""
    return f'apply_patch <<"EOF"\n{simple_update_patch}EOF\n'
