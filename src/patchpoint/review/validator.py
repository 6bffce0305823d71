"""Anchoring AI findings on real diff positions.

A finding survives only if its file is part of the pull request, the file
has a patch, and the target line is visible on the new side of that patch.
Everything else is dropped with a warning; nothing here raises for a bad
finding.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from patchpoint.constants import SEVERITY_BADGES, UNKNOWN_SEVERITY_BADGE
from patchpoint.diff.parser import parse_patch
from patchpoint.diff.position import resolve_position
from patchpoint.exceptions import DiffParseError
from patchpoint.logging import get_logger
from patchpoint.models.diff import ParsedDiff
from patchpoint.models.review import Finding, ValidatedComment

__all__ = [
    "render_comment_body",
    "validate_findings",
]

logger = get_logger(__name__)


class HasPatch(Protocol):
    @property
    def patch(self) -> str | None: ...


def render_comment_body(finding: Finding) -> str:
    """Render the Markdown body of an inline comment.

    Example:
        >>> f = Finding(path="a.py", line=1, comment="Off by one", severity="high")
        >>> print(render_comment_body(f))
        🔴 **HIGH**
        <BLANKLINE>
        Off by one
    """
    severity = finding.severity.value
    badge = SEVERITY_BADGES.get(severity, UNKNOWN_SEVERITY_BADGE)
    parts = [f"{badge} **{severity.upper()}**", "", finding.comment.strip()]
    suggestion = (finding.suggestion or "").strip("\n")
    if suggestion.strip():
        parts.extend(["", "**Suggested change:**", "```suggestion", suggestion, "```"])
    return "\n".join(parts)


def validate_findings(
    findings: list[Finding],
    file_index: Mapping[str, HasPatch],
) -> list[ValidatedComment]:
    """Keep the findings that can be anchored and render their bodies.

    Input order is preserved and duplicates are kept. Each patch is parsed
    at most once per call.

    Args:
        findings: Findings in the order they should be posted.
        file_index: Pull request files keyed by path; values expose ``patch``.

    Returns:
        One ValidatedComment per surviving finding.
    """
    parsed_cache: dict[str, ParsedDiff | None] = {}
    comments: list[ValidatedComment] = []

    for finding in findings:
        log = logger.bind(file=finding.path, line=finding.line)
        record = file_index.get(finding.path)
        if record is None:
            log.warning("finding_dropped", reason="file_not_in_diff")
            continue
        if not record.patch:
            log.warning("finding_dropped", reason="file_has_no_patch")
            continue

        if finding.path not in parsed_cache:
            try:
                parsed_cache[finding.path] = parse_patch(finding.path, record.patch)
            except DiffParseError as e:
                log.warning("patch_unparseable", error=e.message)
                parsed_cache[finding.path] = None
        parsed = parsed_cache[finding.path]
        if parsed is None:
            log.warning("finding_dropped", reason="patch_unparseable")
            continue

        position = resolve_position(parsed, finding.line)
        if position is None:
            log.warning("finding_dropped", reason="line_not_in_diff")
            continue

        comments.append(
            ValidatedComment(
                path=finding.path,
                position=position,
                body=render_comment_body(finding),
                line=finding.line,
                severity=finding.severity,
            )
        )

    logger.info(
        "findings_validated",
        received=len(findings),
        kept=len(comments),
        dropped=len(findings) - len(comments),
    )
    return comments
