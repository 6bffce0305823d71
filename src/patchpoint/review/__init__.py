"""Turning AI output into a pull request review."""

from __future__ import annotations

from patchpoint.review.assembler import assemble_review, deduplicate_comments
from patchpoint.review.engine import ReviewEngine
from patchpoint.review.parsing import extract_json, parse_review_response
from patchpoint.review.phases import ReviewPhase, phases_for
from patchpoint.review.validator import render_comment_body, validate_findings

__all__ = [
    "ReviewEngine",
    "ReviewPhase",
    "phases_for",
    "assemble_review",
    "deduplicate_comments",
    "extract_json",
    "parse_review_response",
    "render_comment_body",
    "validate_findings",
]
