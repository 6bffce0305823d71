"""Parsing of the AI's findings JSON.

This module turns raw provider text into an :class:`AIReviewResponse`:
- JSON extraction from plain or Markdown-fenced responses
- Per-entry validation with graceful skipping of bad entries
- Severity normalization
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from patchpoint.exceptions import MalformedResponseError
from patchpoint.logging import get_logger
from patchpoint.models.review import AIReviewResponse, Finding, Severity

__all__ = [
    "extract_json",
    "parse_review_response",
    "normalize_severity",
]

logger = get_logger(__name__)

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*\n(.*?)\n\s*```", re.DOTALL)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

#: Severity words some models use instead of low/medium/high
_SEVERITY_ALIASES: dict[str, Severity] = {
    "critical": Severity.HIGH,
    "error": Severity.HIGH,
    "major": Severity.HIGH,
    "warning": Severity.MEDIUM,
    "minor": Severity.LOW,
    "info": Severity.LOW,
    "suggestion": Severity.LOW,
}


def extract_json(text: str) -> Any | None:
    """Extract the first JSON document from ``text``.

    Tries, in order: the whole text, the first fenced code block, and the
    outermost ``{...}`` span.

    Returns:
        The decoded JSON value, or None when nothing decodes.

    Examples:
        >>> extract_json('```json\\n{"reviews": []}\\n```')
        {'reviews': []}
        >>> extract_json("no json here") is None
        True
    """
    candidates = [text.strip()]
    block = _CODE_BLOCK_RE.search(text)
    if block:
        candidates.append(block.group(1).strip())
    obj = _OBJECT_RE.search(text)
    if obj:
        candidates.append(obj.group(0))

    for candidate in candidates:
        if not candidate:
            continue
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


def normalize_severity(value: Any) -> Severity:
    """Map a raw severity to low/medium/high; anything unknown becomes low."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        try:
            return Severity(lowered)
        except ValueError:
            if lowered in _SEVERITY_ALIASES:
                return _SEVERITY_ALIASES[lowered]
    logger.warning("unknown_severity", severity=value, using=Severity.LOW.value)
    return Severity.LOW


def parse_review_response(text: str) -> AIReviewResponse:
    """Parse provider text into findings.

    Entries that fail validation (missing path, non-positive line, empty
    comment) are skipped with a warning so one bad entry does not cost the
    whole response.

    Args:
        text: Raw provider output.

    Returns:
        The parsed response; ``reviews`` may be empty.

    Raises:
        MalformedResponseError: If no JSON object with a ``reviews`` array
            can be found. The raw text is kept on the error.
    """
    data = extract_json(text or "")
    if not isinstance(data, dict):
        raise MalformedResponseError("No JSON object found in AI response", text)

    raw_reviews = data.get("reviews")
    if not isinstance(raw_reviews, list):
        raise MalformedResponseError(
            "AI response is missing a 'reviews' array", raw_response=text
        )

    findings: list[Finding] = []
    for index, entry in enumerate(raw_reviews):
        if not isinstance(entry, dict):
            logger.warning("review_entry_not_object", index=index)
            continue
        if "severity" in entry:
            entry = {**entry, "severity": normalize_severity(entry["severity"])}
        try:
            findings.append(Finding.model_validate(entry))
        except ValidationError as e:
            logger.warning(
                "review_entry_invalid",
                index=index,
                errors=[err["msg"] for err in e.errors()],
            )

    summary = data.get("summary")
    response = AIReviewResponse(
        reviews=findings,
        summary=summary if isinstance(summary, str) and summary.strip() else None,
    )
    logger.debug(
        "review_response_parsed",
        findings=len(findings),
        skipped=len(raw_reviews) - len(findings),
    )
    return response
