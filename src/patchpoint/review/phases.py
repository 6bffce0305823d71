"""Ordered review phases.

A phase is one pass over (a subset of) the changed files with its own
focus. Phases run in list order, so a full scan looks at security-relevant
files before general quality and architecture.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from patchpoint.batching.aggregator import (
    group_by_category,
    group_by_module,
    group_files,
)
from patchpoint.models.files import FileCategory, FileGroup, FileRecord

__all__ = [
    "ReviewPhase",
    "REVIEW_PHASE",
    "SECURITY_PHASE",
    "QUALITY_PHASE",
    "ARCHITECTURE_PHASE",
    "SCAN_TYPES",
    "phases_for",
    "plan_groups",
]

Grouping = Literal["budget", "module"]


@dataclass(frozen=True, slots=True)
class ReviewPhase:
    """One review pass.

    Attributes:
        name: Short identifier used in logs and failure reports.
        title: Human-readable heading.
        focus: Instructions appended to the system prompt.
        categories: Categories this phase looks at; None means every file.
        grouping: ``budget`` packs files in input order, ``module`` keeps
            each directory together.
    """

    name: str
    title: str
    focus: str
    categories: tuple[FileCategory, ...] | None = None
    grouping: Grouping = "budget"


REVIEW_PHASE = ReviewPhase(
    name="review",
    title="Code Review",
    focus=(
        "Review the changed lines for bugs, security problems, error handling "
        "gaps and readability issues."
    ),
)

SECURITY_PHASE = ReviewPhase(
    name="security",
    title="Security Analysis",
    focus=(
        "Focus on security: injection, authentication and authorization flaws, "
        "secrets in code, unsafe deserialization and insecure configuration."
    ),
    categories=(
        FileCategory.SECURITY,
        FileCategory.INFRASTRUCTURE,
        FileCategory.CONFIG,
    ),
)

QUALITY_PHASE = ReviewPhase(
    name="quality",
    title="Code Quality",
    focus=(
        "Focus on correctness and maintainability: logic errors, unhandled "
        "edge cases, duplicated code and missing tests."
    ),
    categories=(FileCategory.BUSINESS_LOGIC, FileCategory.TESTS),
)

ARCHITECTURE_PHASE = ReviewPhase(
    name="architecture",
    title="Architecture",
    focus=(
        "Focus on structure: coupling between modules, layering violations and "
        "abstractions that do not fit the surrounding code."
    ),
    grouping="module",
)

#: Phase lists by scan type, in execution order
SCAN_TYPES: dict[str, tuple[ReviewPhase, ...]] = {
    "review": (REVIEW_PHASE,),
    "security": (SECURITY_PHASE,),
    "quality": (QUALITY_PHASE,),
    "architecture": (ARCHITECTURE_PHASE,),
    "full": (SECURITY_PHASE, QUALITY_PHASE, ARCHITECTURE_PHASE),
}


def phases_for(scan_type: str) -> tuple[ReviewPhase, ...]:
    """Return the phases of ``scan_type``.

    Raises:
        ValueError: For an unknown scan type.
    """
    try:
        return SCAN_TYPES[scan_type]
    except KeyError:
        known = ", ".join(SCAN_TYPES)
        raise ValueError(
            f"Unknown scan type {scan_type!r} (expected one of: {known})"
        ) from None


def plan_groups(
    phase: ReviewPhase, files: list[FileRecord], max_tokens_per_group: int
) -> list[FileGroup]:
    """Group the files a phase covers. Files without a patch are left out."""
    reviewable = [f for f in files if f.has_patch]
    if phase.grouping == "module":
        if phase.categories is not None:
            reviewable = [f for f in reviewable if f.category in phase.categories]
        return group_by_module(reviewable, max_tokens_per_group)
    if phase.categories is None:
        return group_files(reviewable, max_tokens_per_group, prefix=phase.name)

    groups: list[FileGroup] = []
    for category in phase.categories:
        groups.extend(group_by_category(reviewable, category, max_tokens_per_group))
    return sorted(groups, key=lambda g: -g.priority)
