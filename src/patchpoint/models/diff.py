"""Data models for parsed unified diffs.

- DiffLineKind: whether a patch line was added, removed or kept
- DiffLine: one positioned line of a patch
- Hunk: one ``@@`` section with its line ranges
- ParsedDiff: a whole file patch plus its new-line to position index

Positions follow GitHub's review-comment convention: 1-based, counted over
the patch body, continuous across hunks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DiffLineKind(str, Enum):
    """Kind of a line inside a hunk."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single line of a hunk body.

    Attributes:
        kind: Added, removed or context.
        content: Line text without the leading ``+``, ``-`` or space marker.
        old_line_number: Line in the old file; None for added lines.
        new_line_number: Line in the new file; None for removed lines.
        position: Diff position of this line in the file's patch.
    """

    kind: DiffLineKind
    content: str
    old_line_number: int | None
    new_line_number: int | None
    position: int

    @property
    def is_commentable(self) -> bool:
        """Whether a review comment may be anchored on the new side of this line."""
        return self.new_line_number is not None


@dataclass(frozen=True, slots=True)
class Hunk:
    """A contiguous block of changes introduced by an ``@@`` header."""

    old_start: int
    old_length: int
    new_start: int
    new_length: int
    header: str
    lines: tuple[DiffLine, ...] = ()

    @property
    def new_end(self) -> int:
        """Last new-file line covered by this hunk (inclusive)."""
        return self.new_start + max(self.new_length, 1) - 1


@dataclass(frozen=True, slots=True)
class ParsedDiff:
    """Structured form of one file's patch.

    ``positions`` maps every context or added new-file line to its diff
    position. Removed lines never appear in it.
    """

    filename: str
    hunks: tuple[Hunk, ...] = ()
    positions: dict[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[int, int] = {}
        for line in self.lines:
            if line.new_line_number is not None:
                index[line.new_line_number] = line.position
        object.__setattr__(self, "positions", index)

    @property
    def lines(self) -> list[DiffLine]:
        """All hunk lines in patch order."""
        return [line for hunk in self.hunks for line in hunk.lines]

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.kind is DiffLineKind.ADDED)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.kind is DiffLineKind.REMOVED)

    @property
    def is_empty(self) -> bool:
        return not self.hunks
