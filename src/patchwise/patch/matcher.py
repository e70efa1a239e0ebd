"""Context matcher: locates a section's context inside the original file.

Three precision levels are tried in order, each over the whole search range:
exact lines (fuzz 0), trailing whitespace ignored (fuzz 1), surrounding
whitespace ignored (fuzz 100).
"""

from __future__ import annotations

from typing import Callable, List, NamedTuple, Sequence

# Added to the fuzz of an EOF-anchored section that only matched away from
# the end of the file, so a tail match always ranks better.
EOF_FALLBACK_PENALTY = 10_000

_LEVELS: Sequence[tuple[Callable[[str], str], int]] = (
    (lambda s: s, 0),
    (str.rstrip, 1),
    (str.strip, 100),
)


class Match(NamedTuple):
    index: int  # -1 when not found
    fuzz: int

    @property
    def found(self) -> bool:
        return self.index != -1


NOT_FOUND = Match(-1, 0)


def find_context_core(lines: List[str], context: List[str], start: int) -> Match:
    """Return the first position at or after *start* where *context* appears."""
    if not context:
        return Match(start, 0)

    size = len(context)
    for norm, fuzz in _LEVELS:
        wanted = [norm(s) for s in context]
        for i in range(start, len(lines) - size + 1):
            if [norm(s) for s in lines[i:i + size]] == wanted:
                return Match(i, fuzz)
    return NOT_FOUND


def find_context(
    lines: List[str],
    context: List[str],
    start: int,
    eof: bool,
) -> Match:
    """Locate *context*, searching from the end of the file first when *eof*."""
    if not eof:
        return find_context_core(lines, context, start)

    tail = len(lines) - len(context)
    if tail >= 0:
        match = find_context_core(lines, context, tail)
        if match.found:
            return match

    match = find_context_core(lines, context, start)
    if not match.found:
        return match
    return Match(match.index, match.fuzz + EOF_FALLBACK_PENALTY)


def find_anchor(lines: List[str], anchor: str, start: int) -> Match:
    """Find an ``@@ <line>`` anchor at or after *start*.

    Returns the index just past the anchor line. An anchor that already
    occurs before *start* is not searched again at that precision.
    """
    if anchor not in lines[:start]:
        for i in range(start, len(lines)):
            if lines[i] == anchor:
                return Match(i + 1, 0)

    stripped = anchor.strip()
    if not any(s.strip() == stripped for s in lines[:start]):
        for i in range(start, len(lines)):
            if lines[i].strip() == stripped:
                return Match(i + 1, 1)

    return NOT_FOUND
