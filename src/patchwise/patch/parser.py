"""Patch text parser: envelope check and directive driver.

Usage::

    patch, fuzz = text_to_patch(text, {"src/app.py": current_text})

The parser reads each original file once (through the *orig* mapping),
locates every section of an Update directive in it and rebases the section's
chunks to absolute line offsets.
"""

from __future__ import annotations

import logging
from typing import Dict, List, NamedTuple, Set, Tuple

from patchwise.patch.matcher import find_anchor, find_context
from patchwise.patch.models import ActionType, DiffError, Patch, PatchAction
from patchwise.patch.scanner import (
    ADD_FILE,
    ANCHOR,
    BEGIN_PATCH,
    DELETE_FILE,
    DIRECTIVE_PREFIXES,
    END_OF_FILE,
    END_PATCH,
    MOVE_TO,
    UPDATE_FILE,
    scan_section,
)

logger = logging.getLogger(__name__)


class Cursor(NamedTuple):
    """Position in the patch text and fuzz accumulated so far."""

    index: int
    fuzz: int = 0

    def advance(self, steps: int = 1) -> "Cursor":
        return Cursor(self.index + steps, self.fuzz)

    def add_fuzz(self, fuzz: int) -> "Cursor":
        return Cursor(self.index, self.fuzz + fuzz)


class PatchParser:
    """Walk the directives of a patch and build a :class:`Patch`."""

    def __init__(self, lines: List[str], orig: Dict[str, str]) -> None:
        self._lines = lines
        self._orig = orig
        self.patch = Patch()

    # ---- cursor helpers ----

    def _is_done(self, cursor: Cursor, prefixes: Tuple[str, ...] = ()) -> bool:
        if cursor.index >= len(self._lines):
            return True
        return bool(prefixes) and self._lines[cursor.index].startswith(prefixes)

    def _read_str(self, cursor: Cursor, prefix: str = "") -> Tuple[str, Cursor]:
        """Return the text after *prefix* on the current line and the new cursor.

        Returns ``("", cursor)`` unchanged when the line lacks *prefix*.
        """
        if cursor.index >= len(self._lines):
            raise DiffError(
                f"Index: {cursor.index} >= {len(self._lines)}",
                kind="envelope",
                line_no=cursor.index + 1,
            )
        line = self._lines[cursor.index]
        if line.startswith(prefix):
            return line[len(prefix):], cursor.advance()
        return "", cursor

    def _check_new_path(self, path: str, directive: str, line_no: int) -> None:
        if path in self.patch.actions:
            raise DiffError(
                f"{directive} File Error: Duplicate Path: {path}",
                kind="directive",
                path=path,
                line_no=line_no,
            )

    def _check_exists(self, path: str, directive: str, line_no: int) -> None:
        if path not in self._orig:
            raise DiffError(
                f"{directive} File Error: Missing File: {path}",
                kind="reference",
                path=path,
                line_no=line_no,
            )

    # ---- directives ----

    def parse(self, cursor: Cursor) -> Cursor:
        """Parse directives until ``*** End Patch``; return the final cursor."""
        while not self._is_done(cursor, (END_PATCH,)):
            header_line = cursor.index + 1

            path, cursor = self._read_str(cursor, UPDATE_FILE)
            if path:
                self._check_new_path(path, "Update", header_line)
                move_to = ""
                if not self._is_done(cursor):
                    move_to, cursor = self._read_str(cursor, MOVE_TO)
                self._check_exists(path, "Update", header_line)
                action, cursor = self._parse_update_file(path, self._orig[path], cursor)
                action.move_path = move_to or None
                self.patch.actions[path] = action
                continue

            path, cursor = self._read_str(cursor, DELETE_FILE)
            if path:
                self._check_new_path(path, "Delete", header_line)
                self._check_exists(path, "Delete", header_line)
                self.patch.actions[path] = PatchAction(type=ActionType.DELETE)
                continue

            path, cursor = self._read_str(cursor, ADD_FILE)
            if path:
                self._check_new_path(path, "Add", header_line)
                action, cursor = self._parse_add_file(cursor)
                self.patch.actions[path] = action
                continue

            raise DiffError(
                f"Unknown Line: {self._lines[cursor.index]}",
                kind="directive",
                line_no=cursor.index + 1,
            )

        if self._is_done(cursor) or not self._lines[cursor.index].startswith(END_PATCH):
            raise DiffError("Missing End Patch", kind="envelope")
        return cursor.advance()

    def _parse_update_file(
        self, path: str, text: str, cursor: Cursor
    ) -> Tuple[PatchAction, Cursor]:
        action = PatchAction(type=ActionType.UPDATE)
        lines = text.split("\n")
        index = 0  # absolute position in the original file

        while not self._is_done(cursor, (*DIRECTIVE_PREFIXES, END_OF_FILE)):
            anchor, cursor = self._read_str(cursor, ANCHOR + " ")
            bare = False
            if not anchor and self._lines[cursor.index] == ANCHOR:
                bare = True
                cursor = cursor.advance()
            if not anchor and not bare and index != 0:
                raise DiffError(
                    f"Invalid Line:\n{self._lines[cursor.index]}",
                    kind="grammar",
                    path=path,
                    line_no=cursor.index + 1,
                )

            if anchor.strip():
                found = find_anchor(lines, anchor, index)
                if found.found:
                    index = found.index
                    cursor = cursor.add_fuzz(found.fuzz)
                    logger.debug("%s: anchor %r at line %d", path, anchor, index)
                else:
                    logger.debug("%s: anchor %r not found", path, anchor)

            section = scan_section(self._lines, cursor.index)
            match = find_context(lines, section.context, index, section.eof)
            if not match.found:
                context_text = "\n".join(section.context)
                label = "Invalid EOF Context" if section.eof else "Invalid Context"
                raise DiffError(
                    f"{label} {index}:\n{context_text}",
                    kind="resolution",
                    path=path,
                    line_no=cursor.index + 1,
                )
            logger.debug(
                "%s: section at patch line %d matched line %d (fuzz %d)",
                path, cursor.index + 1, match.index, match.fuzz,
            )

            for chunk in section.chunks:
                chunk.orig_index += match.index
                action.chunks.append(chunk)
            index = match.index + len(section.context)
            cursor = Cursor(section.end_index, cursor.fuzz + match.fuzz)

        return action, cursor

    def _parse_add_file(self, cursor: Cursor) -> Tuple[PatchAction, Cursor]:
        lines: List[str] = []
        while not self._is_done(cursor, DIRECTIVE_PREFIXES):
            line, cursor = self._read_str(cursor)
            if not line.startswith("+"):
                raise DiffError(
                    f"Invalid Add File Line: {line}",
                    kind="grammar",
                    line_no=cursor.index,
                )
            lines.append(line[1:])
        return PatchAction(type=ActionType.ADD, new_file="\n".join(lines)), cursor


def text_to_patch(text: str, orig: Dict[str, str]) -> Tuple[Patch, int]:
    """Parse *text* against the original contents in *orig*.

    Returns the parsed patch and the total fuzz needed to place its sections.
    """
    lines = text.strip().split("\n")
    if len(lines) < 2 or not lines[0].startswith(BEGIN_PATCH) or lines[-1] != END_PATCH:
        raise DiffError("Invalid patch text", kind="envelope")

    parser = PatchParser(lines, orig)
    cursor = parser.parse(Cursor(index=1))
    return parser.patch, cursor.fuzz


def identify_files_needed(text: str) -> Set[str]:
    """Return the paths an Update or Delete directive requires to exist."""
    result: Set[str] = set()
    for line in text.strip().split("\n"):
        if line.startswith(UPDATE_FILE):
            result.add(line[len(UPDATE_FILE):])
        elif line.startswith(DELETE_FILE):
            result.add(line[len(DELETE_FILE):])
    return result


def extract_patch_text(raw: str) -> str:
    """Cut the patch envelope out of surrounding text.

    Handles patches passed as a shell heredoc (``apply_patch <<"EOF" ...``)
    or with noise around them. Text lacking either marker is only stripped.
    """
    text = raw.strip()
    start = text.find(BEGIN_PATCH)
    end = text.rfind(END_PATCH)
    if start == -1 or end == -1 or end < start:
        return text
    return text[start:end + len(END_PATCH)]
