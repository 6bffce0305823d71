"""Mapping between new-file line numbers and diff positions.

None is the "not found" answer throughout; nothing here raises for a
successfully parsed diff.
"""

from __future__ import annotations

from patchpoint.models.diff import DiffLine, DiffLineKind, ParsedDiff

__all__ = [
    "resolve_position",
    "line_for_position",
    "added_lines",
    "changed_line_numbers",
    "context_around",
]


def resolve_position(parsed: ParsedDiff | None, new_line: int) -> int | None:
    """Return the diff position of new-file line ``new_line``.

    Returns None for removed-only lines, lines outside every hunk, and an
    absent or empty diff.

    Examples:
        >>> from patchpoint.diff.parser import parse_patch
        >>> parsed = parse_patch("a.py", "@@ -1,2 +1,2 @@\\n-x\\n+y\\n z")
        >>> resolve_position(parsed, 1)
        2
        >>> resolve_position(parsed, 999) is None
        True
    """
    if parsed is None:
        return None
    return parsed.positions.get(new_line)


def line_for_position(parsed: ParsedDiff, position: int) -> int | None:
    """Inverse lookup: new-file line at ``position``, None for removed lines."""
    for line in parsed.lines:
        if line.position == position:
            return line.new_line_number
    return None


def added_lines(parsed: ParsedDiff) -> list[DiffLine]:
    return [line for line in parsed.lines if line.kind is DiffLineKind.ADDED]


def changed_line_numbers(parsed: ParsedDiff) -> list[int]:
    """Sorted new-file line numbers introduced by the patch."""
    return sorted(
        line.new_line_number
        for line in added_lines(parsed)
        if line.new_line_number is not None
    )


def context_around(parsed: ParsedDiff, new_line: int, radius: int = 3) -> list[str]:
    """Return up to ``radius`` hunk lines on each side of ``new_line``.

    The window never crosses a hunk boundary. Removed lines inside the
    window are included since they are part of what a reviewer sees.
    """
    for hunk in parsed.hunks:
        for index, line in enumerate(hunk.lines):
            if line.new_line_number == new_line:
                start = max(0, index - radius)
                end = min(len(hunk.lines), index + radius + 1)
                return [entry.content for entry in hunk.lines[start:end]]
    return []
