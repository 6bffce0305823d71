"""Data models for AI findings and the review that gets published.

- Severity: finding severity levels
- Finding: one AI-proposed issue, untrusted until validated
- AIReviewResponse: the findings JSON returned by the provider
- ValidatedComment: a finding anchored on a diff position
- ReviewPayload: what is finally sent to GitHub
- GroupFailure / ReviewOutcome: bookkeeping for a whole review run

Findings are pydantic models because they are parsed from untrusted JSON;
everything downstream of validation is a plain frozen dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class Severity(str, Enum):
    """Severity of a review finding.

    Attributes:
        HIGH: Bugs, security problems, data loss. Should block the merge.
        MEDIUM: Incorrect or fragile behaviour worth fixing before merge.
        LOW: Style, naming and small improvements.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# AI Response Models
# =============================================================================


class Finding(BaseModel):
    """A single issue proposed by the AI.

    Examples:
        >>> Finding(path="src/app.py", line=12, comment="Unchecked None")
        Finding(path='src/app.py', line=12, comment='Unchecked None', ...)
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1, description="File path relative to repo root")
    line: int = Field(ge=1, description="Line number in the new version of the file")
    comment: str = Field(min_length=1, description="Explanation of the issue")
    severity: Severity = Field(
        default=Severity.LOW, description="How serious the issue is"
    )
    suggestion: str | None = Field(
        default=None, description="Replacement code for the commented line"
    )


class AIReviewResponse(BaseModel):
    """Top-level findings document expected from the provider."""

    model_config = ConfigDict(frozen=True)

    reviews: list[Finding] = Field(default_factory=list)
    summary: str | None = None


# =============================================================================
# Validated Output
# =============================================================================


@dataclass(frozen=True, slots=True)
class ValidatedComment:
    """A finding that resolved to a real diff position.

    Attributes:
        path: File the comment belongs to.
        position: Diff position GitHub anchors the comment on.
        body: Rendered Markdown body.
        line: New-file line the finding pointed at.
        severity: Severity of the originating finding.
    """

    path: str
    position: int
    body: str
    line: int
    severity: Severity = Severity.LOW

    def to_github(self) -> dict[str, str | int]:
        """Return the ``{path, position, body}`` shape the reviews API expects."""
        return {"path": self.path, "position": self.position, "body": self.body}


@dataclass(frozen=True, slots=True)
class ReviewPayload:
    """Either an inline review with comments or a single PR-level comment.

    Attributes:
        body: Review summary, or the whole comment text for a general comment.
        event: Review event (e.g. ``COMMENT``); None for a general comment.
        comments: Inline comments, in finding order.
    """

    body: str
    event: str | None = None
    comments: tuple[ValidatedComment, ...] = ()

    @property
    def is_inline(self) -> bool:
        return self.event is not None

    @classmethod
    def inline(
        cls, body: str, event: str, comments: list[ValidatedComment]
    ) -> ReviewPayload:
        return cls(body=body, event=event, comments=tuple(comments))

    @classmethod
    def general(cls, body: str) -> ReviewPayload:
        return cls(body=body)


# =============================================================================
# Run Bookkeeping
# =============================================================================


@dataclass(frozen=True, slots=True)
class GroupFailure:
    """A group whose AI call failed after retries."""

    phase: str
    group_id: str
    paths: tuple[str, ...]
    error: str

    def describe(self) -> str:
        return f"{self.phase}/{self.group_id} ({', '.join(self.paths)}): {self.error}"


@dataclass(frozen=True, slots=True)
class GroupResult:
    """Findings and leftover notes produced for one group."""

    phase: str
    group_id: str
    findings: tuple[Finding, ...] = ()
    summary: str | None = None
    note: str | None = None
    tokens_used: int = 0


@dataclass(slots=True)
class ReviewOutcome:
    """Everything a review run produced.

    Attributes:
        payload: The review or general comment ready to publish.
        comments: Validated inline comments (also inside ``payload``).
        findings_total: Findings received before validation.
        dropped: Findings that could not be anchored.
        results: Per-group results, in phase and group order.
        failures: Groups that failed after retries.
    """

    payload: ReviewPayload
    comments: list[ValidatedComment] = field(default_factory=list)
    findings_total: int = 0
    dropped: int = 0
    results: list[GroupResult] = field(default_factory=list)
    failures: list[GroupFailure] = field(default_factory=list)

    @property
    def tokens_used(self) -> int:
        return sum(r.tokens_used for r in self.results)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)
