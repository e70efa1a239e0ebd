"""Data models for patch parsing and application."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional

ErrorKind = Literal[
    "envelope",
    "directive",
    "reference",
    "grammar",
    "resolution",
    "materialization",
]


class ActionType(str, Enum):
    ADD = "add"
    DELETE = "delete"
    UPDATE = "update"


class DiffError(ValueError):
    """Any problem detected while parsing or applying a patch.

    The message is meant to be shown verbatim. ``kind`` groups the failure,
    ``path`` and ``line_no`` (1-based, into the patch text) locate it when
    known.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = "grammar",
        path: Optional[str] = None,
        line_no: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.path = path
        self.line_no = line_no


@dataclass
class Chunk:
    """One contiguous edit region inside an updated file."""

    orig_index: int = -1  # first affected line of the original file
    del_lines: List[str] = field(default_factory=list)
    ins_lines: List[str] = field(default_factory=list)


@dataclass
class PatchAction:
    type: ActionType = ActionType.UPDATE
    new_file: Optional[str] = None  # ADD only
    chunks: List[Chunk] = field(default_factory=list)  # UPDATE only
    move_path: Optional[str] = None  # UPDATE only


@dataclass
class Patch:
    """Parsed, not yet materialized patch: path -> action."""

    actions: Dict[str, PatchAction] = field(default_factory=dict)


@dataclass
class FileChange:
    """Fully resolved change for one path."""

    type: ActionType
    old_content: Optional[str] = None
    new_content: Optional[str] = None
    move_path: Optional[str] = None


@dataclass
class Commit:
    changes: Dict[str, FileChange] = field(default_factory=dict)
