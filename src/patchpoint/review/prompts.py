"""Prompt text sent to the AI provider."""

from __future__ import annotations

from patchpoint.batching.aggregator import describe_group
from patchpoint.models.files import FileGroup
from patchpoint.providers.base import AIMessage
from patchpoint.review.phases import ReviewPhase

__all__ = [
    "SYSTEM_PROMPT",
    "RESPONSE_FORMAT",
    "build_messages",
    "build_group_prompt",
]

RESPONSE_FORMAT = """\
Respond with a single JSON object and nothing else:
{
  "reviews": [
    {
      "path": "<file path exactly as given>",
      "line": <line number in the NEW version of the file>,
      "comment": "<what is wrong and why>",
      "severity": "low" | "medium" | "high",
      "suggestion": "<optional replacement code for that line>"
    }
  ],
  "summary": "<optional one-paragraph overview>"
}
Only comment on lines that appear in the diffs below (added or context
lines). Return an empty "reviews" array when nothing needs attention."""

SYSTEM_PROMPT = """\
You are an experienced software engineer reviewing a pull request.
Be specific and concise. Do not praise the code and do not restate it."""


def build_group_prompt(group: FileGroup, phase: ReviewPhase) -> str:
    """Render the user message for one group: instructions, then each file's patch."""
    sections = [
        f"# {phase.title}",
        phase.focus,
        RESPONSE_FORMAT,
        describe_group(group),
    ]
    for record in group.files:
        sections.append(
            f"## File: {record.path} ({record.category.value}, {record.status})\n"
            f"```diff\n{record.patch or ''}\n```"
        )
    return "\n\n".join(sections)


def build_messages(group: FileGroup, phase: ReviewPhase) -> list[AIMessage]:
    return [
        AIMessage(role="system", content=SYSTEM_PROMPT),
        AIMessage(role="user", content=build_group_prompt(group, phase)),
    ]
