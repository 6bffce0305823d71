from __future__ import annotations

from patchpoint.exceptions.base import PatchpointError


class GitHubError(PatchpointError):
    """GitHub API call failed.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status from GitHub, read by the retry classifier.
        retry_after: Seconds GitHub asked us to wait, if it said so.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retry_after: int | None = None,
    ) -> None:
        self.status_code = status_code
        self.retry_after = retry_after
        super().__init__(message)


class GitHubCLINotFoundError(GitHubError):
    """No token in the environment and the gh CLI is not installed."""

    def __init__(self) -> None:
        super().__init__(
            "GitHub CLI (gh) not installed and GITHUB_TOKEN is not set. "
            "Install from: https://cli.github.com/"
        )


class GitHubAuthError(GitHubError):
    """No usable GitHub credentials were found."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "GitHub CLI not authenticated. Run: gh auth login")
