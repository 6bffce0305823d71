"""Patchpoint data models."""

from __future__ import annotations

from patchpoint.models.diff import DiffLine, DiffLineKind, Hunk, ParsedDiff
from patchpoint.models.files import (
    FileCategory,
    FileClassification,
    FileGroup,
    FileRecord,
    OversizedFile,
)
from patchpoint.models.review import (
    AIReviewResponse,
    Finding,
    GroupFailure,
    GroupResult,
    ReviewOutcome,
    ReviewPayload,
    Severity,
    ValidatedComment,
)

__all__ = [
    "DiffLine",
    "DiffLineKind",
    "Hunk",
    "ParsedDiff",
    "FileCategory",
    "FileClassification",
    "FileGroup",
    "FileRecord",
    "OversizedFile",
    "AIReviewResponse",
    "Finding",
    "GroupFailure",
    "GroupResult",
    "ReviewOutcome",
    "ReviewPayload",
    "Severity",
    "ValidatedComment",
]
