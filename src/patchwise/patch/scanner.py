"""Section scanner: splits the body of an Update directive into chunks.

A section is a run of ``' '`` / ``'-'`` / ``'+'`` lines ending at the next
``@@`` anchor, directive header, ``*** End of File`` marker or the end of the
patch. The scanner never touches the original file; it returns the section's
context exactly as written in the patch so the caller can locate it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

from patchwise.patch.models import Chunk, DiffError

# --- Patch grammar literals ---

BEGIN_PATCH = "*** Begin Patch"
END_PATCH = "*** End Patch"
UPDATE_FILE = "*** Update File: "
DELETE_FILE = "*** Delete File: "
ADD_FILE = "*** Add File: "
MOVE_TO = "*** Move to: "
END_OF_FILE = "*** End of File"
ANCHOR = "@@"

# Prefixes that end a file body (the trailing space of the headers is not
# required here).
DIRECTIVE_PREFIXES = (
    END_PATCH,
    UPDATE_FILE.rstrip(),
    DELETE_FILE.rstrip(),
    ADD_FILE.rstrip(),
)
SECTION_STOPS = (ANCHOR, *DIRECTIVE_PREFIXES, END_OF_FILE)

Mode = Literal["keep", "add", "delete"]

_MODES = {" ": "keep", "-": "delete", "+": "add"}


@dataclass(frozen=True)
class Section:
    """Result of scanning one section, plus the cursor to resume from."""

    context: List[str] = field(default_factory=list)  # context + deleted lines
    chunks: List[Chunk] = field(default_factory=list)  # orig_index relative to context
    end_index: int = 0
    eof: bool = False


def classify(line: str, line_no: int) -> tuple[Mode, str]:
    """Return the edit mode of a body line and its text without the prefix."""
    if line == "":
        line = " "
    mode = _MODES.get(line[0])
    if mode is None:
        raise DiffError(f"Invalid Line: {line}", kind="grammar", line_no=line_no)
    return mode, line[1:]  # type: ignore[return-value]


def scan_section(lines: List[str], index: int) -> Section:
    """Scan ``lines`` from ``index`` and return the next section."""
    start = index
    old: List[str] = []
    del_lines: List[str] = []
    ins_lines: List[str] = []
    chunks: List[Chunk] = []
    mode: Mode = "keep"

    while index < len(lines):
        raw = lines[index]
        if raw.startswith(SECTION_STOPS) or raw == "***":
            break
        if raw.startswith("***"):
            raise DiffError(f"Invalid Line: {raw}", kind="grammar", line_no=index + 1)

        last_mode = mode
        mode, text = classify(raw, index + 1)
        index += 1

        # Returning to context closes the pending edit run.
        if mode == "keep" and last_mode != mode:
            if ins_lines or del_lines:
                chunks.append(
                    Chunk(
                        orig_index=len(old) - len(del_lines),
                        del_lines=del_lines,
                        ins_lines=ins_lines,
                    )
                )
            del_lines = []
            ins_lines = []

        if mode == "delete":
            del_lines.append(text)
            old.append(text)
        elif mode == "add":
            ins_lines.append(text)
        else:
            old.append(text)

    if ins_lines or del_lines:
        chunks.append(
            Chunk(
                orig_index=len(old) - len(del_lines),
                del_lines=del_lines,
                ins_lines=ins_lines,
            )
        )

    if index < len(lines) and lines[index] == END_OF_FILE:
        return Section(context=old, chunks=chunks, end_index=index + 1, eof=True)

    if index == start:
        current = lines[index] if index < len(lines) else ""
        raise DiffError(
            f"Nothing in this section - index={index} {current}",
            kind="grammar",
            line_no=index + 1,
        )
    return Section(context=old, chunks=chunks, end_index=index, eof=False)
