"""Unit tests for data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from patchpoint.exceptions import ReviewRunError
from patchpoint.models.files import FileCategory, FileGroup, FileRecord, OversizedFile
from patchpoint.models.review import (
    Finding,
    GroupFailure,
    GroupResult,
    ReviewOutcome,
    ReviewPayload,
    Severity,
)


def record(path: str, priority: int, category: FileCategory) -> FileRecord:
    return FileRecord(
        path=path, patch="@@", tokens=5, category=category, priority=priority
    )


class TestFinding:
    """Tests for the Finding model."""

    def test_defaults(self) -> None:
        finding = Finding(path="a.py", line=1, comment="x")

        assert finding.severity is Severity.LOW
        assert finding.suggestion is None

    @pytest.mark.parametrize(
        "data",
        [
            {"path": "", "line": 1, "comment": "x"},
            {"path": "a.py", "line": 0, "comment": "x"},
            {"path": "a.py", "line": 1, "comment": ""},
            {"path": "a.py", "line": 1, "comment": "x", "severity": "urgent"},
        ],
    )
    def test_rejects_invalid(self, data: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            Finding.model_validate(data)

    def test_frozen(self) -> None:
        finding = Finding(path="a.py", line=1, comment="x")

        with pytest.raises(ValidationError):
            finding.line = 2  # type: ignore[misc]


class TestFileGroup:
    """Tests for FileGroup and OversizedFile."""

    def test_from_files_uses_top_member(self) -> None:
        group = FileGroup.from_files(
            "g-1",
            [
                record("docs/a.md", 20, FileCategory.DOCS),
                record("src/auth.py", 100, FileCategory.SECURITY),
            ],
        )

        assert group.category is FileCategory.SECURITY
        assert group.priority == 100
        assert group.total_tokens == 10
        assert group.paths == ["docs/a.md", "src/auth.py"]

    def test_from_files_requires_files(self) -> None:
        with pytest.raises(ValueError):
            FileGroup.from_files("g-1", [])

    def test_oversized_flag(self) -> None:
        files = [record("src/big.py", 70, FileCategory.BUSINESS_LOGIC)]

        assert OversizedFile.from_files("g-1", files).is_oversized
        assert not FileGroup.from_files("g-1", files).is_oversized


class TestReviewOutcome:
    """Tests for ReviewOutcome and ReviewRunError bookkeeping."""

    def test_tokens_and_partial(self) -> None:
        failure = GroupFailure("security", "security-1", ("a.py",), "boom")
        outcome = ReviewOutcome(
            payload=ReviewPayload.general("x"),
            results=[
                GroupResult("review", "review-1", tokens_used=10),
                GroupResult("review", "review-2", tokens_used=5),
            ],
            failures=[failure],
        )

        assert outcome.tokens_used == 15
        assert outcome.is_partial
        assert failure.describe() == "security/security-1 (a.py): boom"

    def test_failed_phases_in_first_seen_order(self) -> None:
        failures = [
            GroupFailure("quality", "q-1", ("a.py",), "x"),
            GroupFailure("security", "s-1", ("b.py",), "x"),
            GroupFailure("quality", "q-2", ("c.py",), "x"),
        ]

        error = ReviewRunError("failed", failures)

        assert error.failed_phases == ["quality", "security"]
