"""Unit tests for diff position lookups."""

from __future__ import annotations

import pytest

from patchpoint.diff.parser import parse_patch
from patchpoint.diff.position import (
    added_lines,
    changed_line_numbers,
    context_around,
    line_for_position,
    resolve_position,
)
from patchpoint.models.diff import ParsedDiff
from tests.fixtures.diffs import MULTI_HUNK_PATCH, SIMPLE_PATCH


@pytest.fixture
def simple() -> ParsedDiff:
    return parse_patch("src/app.py", SIMPLE_PATCH)


@pytest.fixture
def multi() -> ParsedDiff:
    return parse_patch("src/main.py", MULTI_HUNK_PATCH)


class TestResolvePosition:
    """Tests for resolve_position()."""

    @pytest.mark.parametrize(
        ("new_line", "expected"),
        [(1, 1), (2, 3), (3, 4), (4, 5)],
    )
    def test_visible_lines(
        self, simple: ParsedDiff, new_line: int, expected: int
    ) -> None:
        assert resolve_position(simple, new_line) == expected

    def test_line_outside_hunks(self, simple: ParsedDiff) -> None:
        assert resolve_position(simple, 999) is None

    def test_line_between_hunks(self, multi: ParsedDiff) -> None:
        """Lines in the gap between two hunks are not commentable."""
        assert resolve_position(multi, 10) is None

    def test_absent_diff(self) -> None:
        assert resolve_position(None, 1) is None

    def test_agrees_with_extracted_lines(self, multi: ParsedDiff) -> None:
        """Every resolved position points back at the same new-file line."""
        for line in multi.lines:
            if line.new_line_number is None:
                continue
            position = resolve_position(multi, line.new_line_number)
            assert line_for_position(multi, position) == line.new_line_number


class TestLineForPosition:
    """Tests for line_for_position()."""

    def test_removed_line_has_no_new_line(self, simple: ParsedDiff) -> None:
        assert line_for_position(simple, 2) is None

    def test_header_position_has_no_line(self, multi: ParsedDiff) -> None:
        """Position 5 is the second hunk header."""
        assert line_for_position(multi, 5) is None


class TestChangedLines:
    """Tests for added_lines() and changed_line_numbers()."""

    def test_added_lines(self, simple: ParsedDiff) -> None:
        assert [line.content for line in added_lines(simple)] == [
            "added line 1",
            "added line 2",
        ]

    def test_changed_line_numbers_sorted(self, multi: ParsedDiff) -> None:
        assert changed_line_numbers(multi) == [2, 21]


class TestContextAround:
    """Tests for context_around()."""

    def test_window_includes_removed_lines(self, simple: ParsedDiff) -> None:
        assert context_around(simple, 2, radius=1) == [
            "removed line",
            "added line 1",
            "added line 2",
        ]

    def test_window_stops_at_hunk_boundary(self, multi: ParsedDiff) -> None:
        """A window at the start of a hunk stops at the hunk header."""
        assert context_around(multi, 20, radius=2) == [
            "    load()",
            "    validate()",
            "    run()",
        ]

    def test_line_not_in_diff(self, simple: ParsedDiff) -> None:
        assert context_around(simple, 999) == []
