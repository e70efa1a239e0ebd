"""Patch -> Commit materialization, snapshot diffing and commit application."""

from __future__ import annotations

from typing import Callable, Mapping, Optional

from patchwise.patch.models import ActionType, Commit, DiffError, FileChange, Patch, PatchAction


def assemble_changes(
    orig: Mapping[str, Optional[str]],
    dest: Mapping[str, Optional[str]],
) -> Commit:
    """Build a commit that turns snapshot *orig* into snapshot *dest*.

    A path mapped to ``None`` counts as absent. Paths are visited in sorted
    order and only paths whose content differs are included.
    """
    commit = Commit()
    for path in sorted(set(orig) | set(dest)):
        old_content = orig.get(path)
        new_content = dest.get(path)
        if old_content == new_content:
            continue
        if old_content is not None and new_content is not None:
            commit.changes[path] = FileChange(
                type=ActionType.UPDATE,
                old_content=old_content,
                new_content=new_content,
            )
        elif new_content is not None:
            commit.changes[path] = FileChange(type=ActionType.ADD, new_content=new_content)
        elif old_content is not None:
            commit.changes[path] = FileChange(type=ActionType.DELETE, old_content=old_content)
        else:
            raise DiffError(
                f"assemble_changes: unreachable state for path {path}",
                kind="materialization",
                path=path,
            )
    return commit


def _get_updated_file(text: str, action: PatchAction, path: str) -> str:
    """Replay the chunks of *action* over *text*."""
    if action.type is not ActionType.UPDATE:
        raise DiffError(
            "_get_updated_file called with non-UPDATE action",
            kind="materialization",
            path=path,
        )
    orig_lines = text.split("\n")
    dest_lines: list[str] = []
    orig_index = 0
    dest_index = 0

    for chunk in action.chunks:
        if chunk.orig_index > len(orig_lines):
            raise DiffError(
                f"_get_updated_file: {path}: chunk.orig_index {chunk.orig_index} "
                f"> len(lines) {len(orig_lines)}",
                kind="resolution",
                path=path,
            )
        if orig_index > chunk.orig_index:
            raise DiffError(
                f"_get_updated_file: {path}: orig_index {orig_index} "
                f"> chunk.orig_index {chunk.orig_index}",
                kind="resolution",
                path=path,
            )

        dest_lines.extend(orig_lines[orig_index:chunk.orig_index])
        delta = chunk.orig_index - orig_index
        orig_index += delta
        dest_index += delta

        dest_lines.extend(chunk.ins_lines)
        dest_index += len(chunk.ins_lines)
        orig_index += len(chunk.del_lines)

    dest_lines.extend(orig_lines[orig_index:])
    delta = len(orig_lines) - orig_index
    orig_index += delta
    dest_index += delta

    if orig_index != len(orig_lines) or dest_index != len(dest_lines):
        raise DiffError(
            f"_get_updated_file: {path}: index mismatch",
            kind="materialization",
            path=path,
        )
    return "\n".join(dest_lines)


def patch_to_commit(patch: Patch, orig: Mapping[str, str]) -> Commit:
    """Resolve every action of *patch* to full file contents."""
    commit = Commit()
    for path, action in patch.actions.items():
        if action.type is ActionType.DELETE:
            commit.changes[path] = FileChange(type=ActionType.DELETE, old_content=orig[path])
        elif action.type is ActionType.ADD:
            commit.changes[path] = FileChange(type=ActionType.ADD, new_content=action.new_file)
        elif action.type is ActionType.UPDATE:
            commit.changes[path] = FileChange(
                type=ActionType.UPDATE,
                old_content=orig[path],
                new_content=_get_updated_file(orig[path], action, path),
                move_path=action.move_path,
            )
    return commit


def apply_commit(
    commit: Commit,
    write_fn: Callable[[str, str], None],
    remove_fn: Callable[[str], None],
) -> None:
    """Apply *commit* through the caller's write / remove primitives."""
    for path, change in commit.changes.items():
        if change.type is ActionType.DELETE:
            remove_fn(path)
        elif change.type is ActionType.ADD:
            write_fn(path, change.new_content or "")
        elif change.type is ActionType.UPDATE:
            if change.move_path and change.move_path != path:
                write_fn(change.move_path, change.new_content or "")
                remove_fn(path)
            else:
                write_fn(path, change.new_content or "")
