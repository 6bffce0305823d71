from __future__ import annotations

from typing import TYPE_CHECKING

from patchpoint.exceptions.base import PatchpointError

if TYPE_CHECKING:
    from patchpoint.models.review import GroupFailure, ReviewOutcome


class ReviewRunError(PatchpointError):
    """Every AI call of at least one review phase failed.

    The run still produced whatever the other phases found; it is attached
    as ``partial`` so callers can decide whether to publish it.

    Attributes:
        message: Human-readable error message.
        failures: Failed groups, in phase order.
        partial: Outcome assembled from the groups that did succeed.
    """

    def __init__(
        self,
        message: str,
        failures: list[GroupFailure],
        partial: ReviewOutcome | None = None,
    ) -> None:
        self.failures = failures
        self.partial = partial
        super().__init__(message)

    @property
    def failed_phases(self) -> list[str]:
        """Names of phases with at least one failure, first-seen order."""
        seen: dict[str, None] = {}
        for failure in self.failures:
            seen.setdefault(failure.phase, None)
        return list(seen)
