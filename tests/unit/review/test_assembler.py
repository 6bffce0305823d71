"""Unit tests for review assembly."""

from __future__ import annotations

from patchpoint.models.review import Severity, ValidatedComment
from patchpoint.review.assembler import (
    REVIEW_TITLE,
    assemble_review,
    deduplicate_comments,
    summarize_counts,
)


def comment(
    position: int, severity: Severity = Severity.LOW, body: str = "b"
) -> ValidatedComment:
    return ValidatedComment(
        path="src/app.py",
        position=position,
        body=body,
        line=position,
        severity=severity,
    )


class TestAssembleReview:
    """Tests for assemble_review()."""

    def test_inline_review_with_counts(self) -> None:
        comments = [comment(1, Severity.HIGH), comment(3), comment(4, Severity.HIGH)]

        payload = assemble_review(comments, event="COMMENT")

        assert payload.is_inline
        assert payload.event == "COMMENT"
        assert list(payload.comments) == comments
        assert payload.body.startswith(REVIEW_TITLE)
        assert "Found 3 issues during code review." in payload.body
        assert "- 🔴 High: 2" in payload.body
        assert "- 🟢 Low: 1" in payload.body

    def test_singular_issue(self) -> None:
        payload = assemble_review([comment(1)])

        assert "Found 1 issue during code review." in payload.body

    def test_summary_and_notes_follow_counts(self) -> None:
        payload = assemble_review(
            [comment(1)], summary="  Overall fine.  ", notes=["Raw output", "  "]
        )

        sections = payload.body.split("\n\n")
        assert sections[-2:] == ["Overall fine.", "Raw output"]

    def test_no_comments_falls_back_to_general_comment(self) -> None:
        payload = assemble_review([], summary="Looks good")

        assert not payload.is_inline
        assert payload.event is None
        assert payload.comments == ()
        assert "No issues found during code review." in payload.body
        assert "Looks good" in payload.body

    def test_fallback_counts_unanchored_findings(self) -> None:
        """Dropped findings are reported without guessing why they were dropped."""
        payload = assemble_review([], findings_total=2)

        assert "2 findings could not be anchored on this diff." in payload.body
        assert "No issues found" not in payload.body

    def test_fallback_with_single_unanchored_finding(self) -> None:
        payload = assemble_review([], findings_total=1)

        assert "1 finding could not be anchored on this diff." in payload.body

    def test_fallback_with_notes_only(self) -> None:
        """Unparsed AI output means the review was not clean."""
        payload = assemble_review([], notes=["raw model output"])

        assert "No inline comments could be anchored on this diff." in payload.body
        assert "No issues found" not in payload.body
        assert payload.body.endswith("raw model output")

    def test_request_changes_event(self) -> None:
        payload = assemble_review([comment(1)], event="REQUEST_CHANGES")

        assert payload.event == "REQUEST_CHANGES"


class TestSummarizeCounts:
    """Tests for summarize_counts()."""

    def test_lists_every_severity(self) -> None:
        text = summarize_counts([comment(1, Severity.MEDIUM)])

        assert text.splitlines() == [
            "**Total Issues:** 1",
            "- 🔴 High: 0",
            "- 🟡 Medium: 1",
            "- 🟢 Low: 0",
        ]


class TestDeduplicateComments:
    """Tests for deduplicate_comments()."""

    def test_keeps_first_of_each_key(self) -> None:
        first = comment(1, body="same")
        comments = [
            first,
            comment(2),
            comment(1, body="same"),
            comment(1, body="other"),
        ]

        unique = deduplicate_comments(comments)

        assert unique == [first, comment(2), comment(1, body="other")]
