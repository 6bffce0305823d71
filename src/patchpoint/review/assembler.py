"""Assembly of validated comments into what gets posted on the pull request."""

from __future__ import annotations

from collections import Counter

from patchpoint.constants import DEFAULT_REVIEW_EVENT, SEVERITY_BADGES
from patchpoint.logging import get_logger
from patchpoint.models.review import ReviewPayload, Severity, ValidatedComment

__all__ = [
    "assemble_review",
    "deduplicate_comments",
    "summarize_counts",
]

logger = get_logger(__name__)

REVIEW_TITLE = "## Automated Code Review"


def deduplicate_comments(comments: list[ValidatedComment]) -> list[ValidatedComment]:
    """Drop comments repeating an earlier (path, position, body), keeping order."""
    seen: set[tuple[str, int, str]] = set()
    unique: list[ValidatedComment] = []
    for comment in comments:
        key = (comment.path, comment.position, comment.body)
        if key in seen:
            continue
        seen.add(key)
        unique.append(comment)
    if len(unique) != len(comments):
        logger.info("duplicate_comments_dropped", dropped=len(comments) - len(unique))
    return unique


def summarize_counts(comments: list[ValidatedComment]) -> str:
    """One line per severity, highest first, e.g. ``- 🔴 High: 2``."""
    counts = Counter(c.severity for c in comments)
    lines = [f"**Total Issues:** {len(comments)}"]
    for severity in (Severity.HIGH, Severity.MEDIUM, Severity.LOW):
        badge = SEVERITY_BADGES[severity.value]
        lines.append(f"- {badge} {severity.value.capitalize()}: {counts[severity]}")
    return "\n".join(lines)


def _issue_count_line(count: int) -> str:
    return f"Found {count} issue{'' if count == 1 else 's'} during code review."


def assemble_review(
    comments: list[ValidatedComment],
    *,
    summary: str | None = None,
    notes: list[str] | None = None,
    event: str = DEFAULT_REVIEW_EVENT,
    findings_total: int | None = None,
) -> ReviewPayload:
    """Build the review to submit.

    With at least one comment this is an inline review carrying every
    comment in input order. With none it falls back to a single PR-level
    comment, so an empty review is never submitted.

    Args:
        comments: Validated comments.
        summary: Overall summary written by the AI, if any.
        notes: Extra PR-level text, such as raw AI output that could not be
            parsed into findings.
        event: Review event for inline reviews.
        findings_total: Findings received before validation; mentioned in
            the fallback comment when some were dropped.

    Returns:
        The payload to publish.
    """
    sections: list[str] = [REVIEW_TITLE]

    if comments:
        sections.append(_issue_count_line(len(comments)))
        sections.append(summarize_counts(comments))
    elif findings_total:
        sections.append(
            f"{findings_total} finding{'' if findings_total == 1 else 's'}"
            " could not be anchored on this diff."
        )
    elif any(note.strip() for note in notes or []):
        sections.append("No inline comments could be anchored on this diff.")
    else:
        sections.append("No issues found during code review.")

    if summary and summary.strip():
        sections.append(summary.strip())
    for note in notes or []:
        if note.strip():
            sections.append(note.strip())

    body = "\n\n".join(sections)
    if comments:
        return ReviewPayload.inline(body=body, event=event, comments=comments)

    logger.info("review_fallback_to_pr_comment", notes=len(notes or []))
    return ReviewPayload.general(body=body)
