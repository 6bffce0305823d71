"""Diff parsing and position resolution."""

from __future__ import annotations

from patchpoint.diff.parser import extract_line, parse_patch, split_unified_diff
from patchpoint.diff.position import (
    added_lines,
    changed_line_numbers,
    context_around,
    line_for_position,
    resolve_position,
)

__all__ = [
    "parse_patch",
    "extract_line",
    "split_unified_diff",
    "resolve_position",
    "line_for_position",
    "added_lines",
    "changed_line_numbers",
    "context_around",
]
