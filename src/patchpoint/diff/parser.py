"""Unified diff parsing.

Turns one file's patch text (as returned by the GitHub pull request files
API) into hunks and positioned lines, and splits a multi-file ``git diff``
into per-file patches so local diffs feed the same pipeline.
"""

from __future__ import annotations

import re

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from patchpoint.exceptions import DiffParseError
from patchpoint.logging import get_logger
from patchpoint.models.diff import DiffLine, DiffLineKind, Hunk, ParsedDiff

__all__ = [
    "HUNK_HEADER_RE",
    "parse_patch",
    "extract_line",
    "split_unified_diff",
]

logger = get_logger(__name__)

#: Matches ``@@ -oldStart[,oldLen] +newStart[,newLen] @@``
HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_NO_NEWLINE_MARKER = "\\"


class _HunkBuilder:
    """Accumulates the body of one hunk while the parser walks the patch."""

    def __init__(self, header: str, match: re.Match[str]) -> None:
        self.header = header
        self.old_start = int(match.group(1))
        self.old_length = int(match.group(2) or 1)
        self.new_start = int(match.group(3))
        self.new_length = int(match.group(4) or 1)
        self.old_line = self.old_start
        self.new_line = self.new_start
        self.old_remaining = self.old_length
        self.new_remaining = self.new_length
        self.lines: list[DiffLine] = []

    @property
    def exhausted(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0

    def add(self, raw: str, position: int) -> None:
        marker = raw[:1]
        if marker == "+":
            line = DiffLine(DiffLineKind.ADDED, raw[1:], None, self.new_line, position)
            self.new_line += 1
            self.new_remaining -= 1
        elif marker == "-":
            line = DiffLine(
                DiffLineKind.REMOVED, raw[1:], self.old_line, None, position
            )
            self.old_line += 1
            self.old_remaining -= 1
        else:
            # A leading space is the normal context marker; some producers
            # strip it from blank lines.
            content = raw[1:] if marker == " " else raw
            line = DiffLine(
                DiffLineKind.CONTEXT, content, self.old_line, self.new_line, position
            )
            self.old_line += 1
            self.new_line += 1
            self.old_remaining -= 1
            self.new_remaining -= 1
        self.lines.append(line)

    def build(self) -> Hunk:
        return Hunk(
            old_start=self.old_start,
            old_length=self.old_length,
            new_start=self.new_start,
            new_length=self.new_length,
            header=self.header,
            lines=tuple(self.lines),
        )


def parse_patch(filename: str, patch: str) -> ParsedDiff:
    """Parse a single file's patch into positioned hunks.

    Positions are 1-based and run across the whole patch. The first body
    line after the first hunk header is position 1; every later hunk header
    takes up one position of its own, matching how GitHub counts review
    comment positions. ``\\ No newline at end of file`` markers take none.

    Args:
        filename: Path of the file the patch belongs to.
        patch: Patch text starting at (or containing) the first ``@@`` header.

    Returns:
        The parsed diff.

    Raises:
        DiffParseError: If the patch contains no recognizable hunk header.

    Example:
        >>> parsed = parse_patch("a.py", "@@ -1,2 +1,2 @@\\n-x\\n+y\\n z")
        >>> parsed.positions
        {1: 2, 2: 3}
    """
    hunks: list[Hunk] = []
    current: _HunkBuilder | None = None
    position = 0

    body = patch.split("\n")
    if body and body[-1] == "":
        body.pop()

    for raw in body:
        raw = raw.removesuffix("\r")
        if raw.startswith("@@"):
            match = HUNK_HEADER_RE.match(raw)
            if match is None:
                logger.debug("unrecognized_hunk_header", file=filename, line=raw)
                continue
            if current is not None:
                hunks.append(current.build())
                position += 1
            current = _HunkBuilder(raw, match)
            continue

        if current is None:
            continue
        if raw.startswith(_NO_NEWLINE_MARKER):
            continue
        if not raw and current.exhausted:
            continue

        position += 1
        current.add(raw, position)

    if current is not None:
        hunks.append(current.build())

    if not hunks:
        raise DiffParseError(
            f"No hunk header found in patch for {filename}", filename=filename
        )

    parsed = ParsedDiff(filename=filename, hunks=tuple(hunks))
    logger.debug(
        "patch_parsed",
        file=filename,
        hunks=len(parsed.hunks),
        additions=parsed.additions,
        deletions=parsed.deletions,
    )
    return parsed


def extract_line(parsed: ParsedDiff, new_line: int) -> str | None:
    """Return the new-file text at ``new_line``, or None if the diff doesn't show it."""
    for line in parsed.lines:
        if line.new_line_number == new_line:
            return line.content
    return None


def split_unified_diff(diff_text: str) -> dict[str, str]:
    """Split a multi-file ``git diff`` into per-file patches.

    Each value holds only the hunks (``@@`` header onwards), the same shape
    the GitHub files API returns. Binary files and files without hunks
    (pure renames, mode changes) are left out.

    Args:
        diff_text: Output of ``git diff``.

    Returns:
        Mapping of target path to patch text, in diff order.

    Raises:
        DiffParseError: If unidiff cannot make sense of the input.
    """
    try:
        patch_set = PatchSet.from_string(diff_text)
    except UnidiffParseError as e:
        raise DiffParseError(f"Could not split diff: {e}") from e

    patches: dict[str, str] = {}
    for patched_file in patch_set:
        if patched_file.is_binary_file:
            logger.debug("binary_file_in_diff", file=patched_file.path)
            continue
        if not len(patched_file):
            logger.debug("no_hunks_in_diff", file=patched_file.path)
            continue
        patches[patched_file.path] = "".join(str(hunk) for hunk in patched_file)
    return patches
