"""Review orchestration.

Drives a review end to end: classify and cost the changed files, group
them per phase, ask the AI about each group (bounded parallelism, bounded
retries), then validate and assemble whatever came back. Publishing to
GitHub is a separate step so a run can be inspected before anything is
posted.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from patchpoint.batching.aggregator import build_file_records
from patchpoint.config import PatchpointConfig
from patchpoint.exceptions import MalformedResponseError, ReviewRunError
from patchpoint.logging import get_logger
from patchpoint.models.files import FileGroup, FileRecord
from patchpoint.models.review import (
    Finding,
    GroupFailure,
    GroupResult,
    ReviewOutcome,
)
from patchpoint.providers.base import AIProvider
from patchpoint.review.assembler import assemble_review, deduplicate_comments
from patchpoint.review.parsing import parse_review_response
from patchpoint.review.phases import REVIEW_PHASE, ReviewPhase, plan_groups
from patchpoint.review.prompts import build_messages
from patchpoint.review.validator import validate_findings
from patchpoint.utils.async_utils import run_in_batches
from patchpoint.utils.github_client import GitHubClient
from patchpoint.utils.retry import RetryPolicy, run_with_retry
from patchpoint.utils.text import truncate_text

__all__ = ["ReviewEngine"]

logger = get_logger(__name__)

#: Characters of unparseable AI output carried into the PR-level comment
MAX_RAW_NOTE_CHARS = 4000

Sleep = Callable[[float], Awaitable[None]]


class ReviewEngine:
    """Run AI review phases over a set of changed files.

    Attributes:
        provider: AI provider used for every group.
        config: Loaded configuration.
        policy: Retry policy derived from ``config.retry``.
    """

    def __init__(
        self,
        provider: AIProvider,
        config: PatchpointConfig | None = None,
        *,
        sleep: Sleep | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            provider: AI provider.
            config: Configuration; defaults are used when omitted.
            sleep: Async sleep for retry backoff and batch pauses. Tests pass
                a recorder here to avoid real waiting.
        """
        self.provider = provider
        self.config = config or PatchpointConfig()
        self.policy = RetryPolicy(
            max_retries=self.config.retry.max_retries,
            base_delay=self.config.retry.base_delay,
            max_delay=self.config.retry.max_delay,
        )
        self._sleep = sleep

    # =========================================================================
    # Planning
    # =========================================================================

    def plan(
        self, records: list[FileRecord], phases: Iterable[ReviewPhase]
    ) -> list[tuple[ReviewPhase, list[FileGroup]]]:
        """Return the groups each phase would send, without calling the AI."""
        budget = self.config.batching.max_tokens_per_group
        return [(phase, plan_groups(phase, records, budget)) for phase in phases]

    # =========================================================================
    # Execution
    # =========================================================================

    async def review_files(
        self,
        entries: Iterable[Mapping[str, Any]],
        phases: Iterable[ReviewPhase] = (REVIEW_PHASE,),
    ) -> ReviewOutcome:
        """Review pull request file entries (``filename``, ``patch``, ``status``)."""
        return await self.review_records(build_file_records(entries), phases)

    async def review_records(
        self,
        records: list[FileRecord],
        phases: Iterable[ReviewPhase] = (REVIEW_PHASE,),
    ) -> ReviewOutcome:
        """Run every phase in order and assemble the outcome.

        A group that still fails after retries is recorded and its siblings
        carry on. If every group of a phase fails, the outcome assembled from
        the other phases is attached to the raised error.

        Raises:
            ReviewRunError: If all AI calls of at least one phase failed.
        """
        results: list[GroupResult] = []
        failures: list[GroupFailure] = []
        failed_phases: list[str] = []

        for phase, groups in self.plan(records, phases):
            log = logger.bind(phase=phase.name)
            if not groups:
                log.info("phase_skipped", reason="no_matching_files")
                continue

            log.info("phase_started", groups=len(groups))
            tasks = [
                lambda p=phase, g=group: self._review_group(p, g) for group in groups
            ]
            outcomes = await run_in_batches(
                tasks,
                batch_size=self.config.batching.batch_size,
                inter_batch_delay=self.config.batching.inter_batch_delay,
                return_exceptions=True,
                sleep=self._sleep,
            )

            phase_failures = 0
            for group, result in zip(groups, outcomes, strict=True):
                if isinstance(result, GroupResult):
                    results.append(result)
                    continue
                phase_failures += 1
                failures.append(
                    GroupFailure(
                        phase=phase.name,
                        group_id=group.group_id,
                        paths=tuple(group.paths),
                        error=f"{type(result).__name__}: {result}",
                    )
                )
                log.error("group_failed", group=group.group_id, error=str(result))

            if phase_failures == len(groups):
                failed_phases.append(phase.name)
            log.info(
                "phase_finished",
                failed=phase_failures,
                succeeded=len(groups) - phase_failures,
            )

        outcome = self._assemble(records, results, failures)
        if failed_phases:
            raise ReviewRunError(
                f"Every AI call failed in phase(s): {', '.join(failed_phases)}",
                failures=failures,
                partial=outcome,
            )
        return outcome

    async def _review_group(self, phase: ReviewPhase, group: FileGroup) -> GroupResult:
        messages = build_messages(group, phase)
        response = await run_with_retry(
            lambda: self.provider.send_message(messages, response_format="json"),
            self.policy,
            context=f"{phase.name}/{group.group_id}",
            sleep=self._sleep,
        )
        tokens = response.usage.total_tokens
        try:
            parsed = parse_review_response(response.content)
        except MalformedResponseError as e:
            logger.warning(
                "ai_response_malformed",
                phase=phase.name,
                group=group.group_id,
                error=e.message,
            )
            return GroupResult(
                phase=phase.name,
                group_id=group.group_id,
                note=_raw_note(phase, group, e.raw_response),
                tokens_used=tokens,
            )
        return GroupResult(
            phase=phase.name,
            group_id=group.group_id,
            findings=tuple(parsed.reviews),
            summary=parsed.summary,
            tokens_used=tokens,
        )

    def _assemble(
        self,
        records: list[FileRecord],
        results: list[GroupResult],
        failures: list[GroupFailure],
    ) -> ReviewOutcome:
        findings: list[Finding] = [f for r in results for f in r.findings]
        comments = validate_findings(findings, {r.path: r for r in records})
        if self.config.review.deduplicate:
            comments = deduplicate_comments(comments)

        summary = None
        if self.config.review.include_summary:
            summary = "\n\n".join(r.summary for r in results if r.summary) or None
        notes = [r.note for r in results if r.note]
        if failures:
            notes.append(
                "**Review incomplete.** These groups failed after retries:\n"
                + "\n".join(f"- {f.describe()}" for f in failures)
            )

        payload = assemble_review(
            comments,
            summary=summary,
            notes=notes,
            event=self.config.review.event,
            findings_total=len(findings),
        )
        return ReviewOutcome(
            payload=payload,
            comments=comments,
            findings_total=len(findings),
            dropped=len(findings) - len(comments),
            results=results,
            failures=failures,
        )

    # =========================================================================
    # Publishing
    # =========================================================================

    async def publish(
        self,
        outcome: ReviewOutcome,
        github: GitHubClient,
        repo_name: str,
        pr_number: int,
        commit_id: str | None = None,
    ) -> int:
        """Post the outcome: an inline review, or a PR comment as fallback.

        Returns:
            The id of the created review or comment.
        """
        payload = outcome.payload
        context = f"publish/{repo_name}#{pr_number}"
        if not payload.is_inline:
            return await run_with_retry(
                lambda: github.add_issue_comment(repo_name, pr_number, payload.body),
                self.policy,
                context=context,
                sleep=self._sleep,
            )

        if commit_id is None:
            commit_id = await run_with_retry(
                lambda: github.get_head_sha(repo_name, pr_number),
                self.policy,
                context=context,
                sleep=self._sleep,
            )
        sha = commit_id
        return await run_with_retry(
            lambda: github.create_review(
                repo_name,
                pr_number,
                sha,
                payload.body,
                payload.event or self.config.review.event,
                list(payload.comments),
            ),
            self.policy,
            context=context,
            sleep=self._sleep,
        )


def _raw_note(phase: ReviewPhase, group: FileGroup, raw: str) -> str:
    header = f"**{phase.title}** ({', '.join(group.paths)}), unstructured AI output:"
    return f"{header}\n\n{truncate_text(raw.strip(), MAX_RAW_NOTE_CHARS)}"
