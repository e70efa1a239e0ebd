"""Patch engine — orchestrates read, parse, materialize and apply.

Nothing is written until the whole patch has been parsed and materialized;
a failure at any earlier step leaves storage untouched.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from patchwise.patch.commit import apply_commit, patch_to_commit
from patchwise.patch.models import ActionType, Commit, DiffError
from patchwise.patch.parser import (
    extract_patch_text,
    identify_files_needed,
    text_to_patch,
)
from patchwise.patch.scanner import BEGIN_PATCH

logger = logging.getLogger(__name__)

OpenFn = Callable[[str], str]
WriteFn = Callable[[str, str], None]
RemoveFn = Callable[[str], None]


@dataclass
class PatchResult:
    """Complete result of one patch run."""

    commit: Commit = field(default_factory=Commit)
    fuzz: int = 0
    fuzz_threshold: int = 0
    files_read: List[str] = field(default_factory=list)
    dry_run: bool = False
    applied: bool = False
    duration_ms: float = 0.0

    @property
    def fuzz_exceeded(self) -> bool:
        return self.fuzz > self.fuzz_threshold

    def _paths(self, kind: ActionType) -> List[str]:
        return [p for p, c in self.commit.changes.items() if c.type is kind]

    @property
    def added(self) -> List[str]:
        return self._paths(ActionType.ADD)

    @property
    def updated(self) -> List[str]:
        return self._paths(ActionType.UPDATE)

    @property
    def deleted(self) -> List[str]:
        return self._paths(ActionType.DELETE)

    @property
    def moved(self) -> Dict[str, str]:
        return {
            p: c.move_path
            for p, c in self.commit.changes.items()
            if c.type is ActionType.UPDATE and c.move_path
        }


class FuzzExceededError(Exception):
    """Raised instead of applying when fuzz is above a strict threshold."""

    def __init__(self, result: PatchResult) -> None:
        super().__init__(
            f"Patch needed fuzz {result.fuzz}, above the threshold of "
            f"{result.fuzz_threshold}; nothing was written."
        )
        self.result = result


def _target(path: str, check_path: Optional[Callable[[str], object]]) -> object:
    """Validate *path* and return what it identifies on storage."""
    resolved = check_path(path) if check_path is not None else None
    return resolved if resolved is not None else os.path.normpath(path)


def load_files(paths: Iterable[str], open_fn: OpenFn) -> Dict[str, str]:
    """Read each path once, in sorted order."""
    orig: Dict[str, str] = {}
    for path in sorted(set(paths)):
        try:
            orig[path] = open_fn(path)
        except (KeyError, OSError, UnicodeDecodeError) as exc:
            raise DiffError(
                f"Failed to read {path}: {exc}",
                kind="reference",
                path=path,
            ) from exc
    return orig


def process_patch(
    text: str,
    open_fn: OpenFn,
    write_fn: WriteFn,
    remove_fn: RemoveFn,
    *,
    fuzz_threshold: int = 0,
    fail_on_fuzz: bool = False,
    dry_run: bool = False,
    check_path: Optional[Callable[[str], object]] = None,
) -> PatchResult:
    """Parse *text*, resolve it against current contents and apply it.

    *check_path*, when given, is called on every path the commit will write
    or remove before anything is applied; it should raise to reject a path.
    Its return value, when not None, identifies the file, so a ``Move to``
    that lands on the source file is applied as a plain update.
    """
    start = time.perf_counter()

    patch_text = extract_patch_text(text)
    if not patch_text.startswith(BEGIN_PATCH):
        raise DiffError(
            f'Invalid patch format. Patch must start with "{BEGIN_PATCH}"',
            kind="envelope",
        )

    paths = identify_files_needed(patch_text)
    orig = load_files(paths, open_fn)
    logger.info("Loaded %d file(s) referenced by the patch", len(orig))

    patch, fuzz = text_to_patch(patch_text, orig)
    commit = patch_to_commit(patch, orig)

    result = PatchResult(
        commit=commit,
        fuzz=fuzz,
        fuzz_threshold=fuzz_threshold,
        files_read=sorted(orig),
        dry_run=dry_run,
    )

    if result.fuzz_exceeded:
        logger.warning(
            "Patch context needed fuzz %d (threshold %d)", fuzz, fuzz_threshold
        )
        if fail_on_fuzz:
            raise FuzzExceededError(result)

    for path, change in commit.changes.items():
        target = _target(path, check_path)
        if change.move_path and _target(change.move_path, check_path) == target:
            # renaming onto itself would write then remove the same file
            logger.info("%s: move target is the file itself, applying as an update", path)
            change.move_path = None

    if not dry_run:
        apply_commit(commit, write_fn, remove_fn)
        result.applied = True
        logger.info("Applied %d change(s)", len(commit.changes))

    result.duration_ms = round((time.perf_counter() - start) * 1000, 2)
    return result
