"""GitHub client for pull request reviews, built on PyGithub.

PyGithub is synchronous, so every call runs in a worker thread. Rate
limiting is optional and uses aiolimiter. Errors are re-raised as
GitHubError with the HTTP status attached so the retry classifier can
tell rate limiting and gateway errors from permanent failures.
"""

from __future__ import annotations

import asyncio
import os
import subprocess
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from aiolimiter import AsyncLimiter
from github import Auth, Github, GithubException

from patchpoint.exceptions import GitHubAuthError, GitHubCLINotFoundError, GitHubError
from patchpoint.logging import get_logger

if TYPE_CHECKING:
    from github.PullRequest import PullRequest
    from github.Repository import Repository

    from patchpoint.models.review import ValidatedComment

#: Default rate limit for GitHub API (requests per hour)
DEFAULT_GITHUB_RATE_LIMIT: int = 5000

#: Time period for rate limiting in seconds (1 hour)
DEFAULT_GITHUB_RATE_PERIOD: float = 3600.0

#: Environment variable checked before falling back to the gh CLI
GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"

__all__ = [
    "get_github_token",
    "get_github_client",
    "GitHubClient",
    "DEFAULT_GITHUB_RATE_LIMIT",
    "DEFAULT_GITHUB_RATE_PERIOD",
]

logger = get_logger(__name__)

T = TypeVar("T")


def get_github_token() -> str:
    """Return a GitHub token from ``GITHUB_TOKEN`` or ``gh auth token``.

    Raises:
        GitHubCLINotFoundError: If no env token is set and gh is not installed.
        GitHubAuthError: If gh is installed but not authenticated.
    """
    token = os.environ.get(GITHUB_TOKEN_ENV_VAR, "").strip()
    if token:
        return token
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
    except FileNotFoundError as e:
        raise GitHubCLINotFoundError() from e
    except subprocess.CalledProcessError as e:
        raise GitHubAuthError() from e
    except subprocess.TimeoutExpired as e:
        raise GitHubAuthError("gh auth token command timed out after 10 seconds") from e
    token = result.stdout.strip()
    if not token:
        raise GitHubAuthError()
    return token


def get_github_client() -> Github:
    """Create an authenticated PyGithub client."""
    return Github(auth=Auth.Token(get_github_token()))


def _wrap(exc: GithubException, action: str) -> GitHubError:
    headers = {k.lower(): v for k, v in (exc.headers or {}).items()}
    retry_after = str(headers.get("retry-after", ""))
    return GitHubError(
        f"Failed to {action}: {exc.status} {exc.data}",
        status_code=exc.status,
        retry_after=int(retry_after) if retry_after.isdigit() else None,
    )


class GitHubClient:
    """Async-friendly wrapper around the PyGithub calls a review needs.

    Attributes:
        github: The underlying PyGithub client, created on first use.
        rate_limiter: Optional AsyncLimiter guarding every API call.
    """

    def __init__(
        self,
        github: Github | None = None,
        rate_limit: int | None = None,
        rate_period: float | None = None,
    ) -> None:
        """Initialize the GitHubClient.

        Args:
            github: Optional PyGithub client. Created from the environment
                or the gh CLI when omitted.
            rate_limit: Maximum requests per ``rate_period``; None disables
                rate limiting.
            rate_period: Rate limit window in seconds, one hour by default.
        """
        self._github = github
        self._rate_limiter: AsyncLimiter | None = None
        if rate_limit is not None:
            self._rate_limiter = AsyncLimiter(
                rate_limit,
                rate_period if rate_period is not None else DEFAULT_GITHUB_RATE_PERIOD,
            )

    @property
    def rate_limiter(self) -> AsyncLimiter | None:
        return self._rate_limiter

    @property
    def github(self) -> Github:
        if self._github is None:
            self._github = get_github_client()
        return self._github

    def _get_pr(self, repo_name: str, pr_number: int) -> PullRequest:
        repo: Repository = self.github.get_repo(repo_name)
        return repo.get_pull(pr_number)

    async def _call(self, fn: Callable[[], T]) -> T:
        if self._rate_limiter is not None:
            async with self._rate_limiter:
                return await asyncio.to_thread(fn)
        return await asyncio.to_thread(fn)

    # =========================================================================
    # Pull Request Reads
    # =========================================================================

    async def get_pr_files(
        self, repo_name: str, pr_number: int
    ) -> list[dict[str, Any]]:
        """List changed files of a pull request.

        Returns:
            Dicts with ``filename``, ``patch`` (None for binary or very large
            files) and ``status``, in the order GitHub returns them.

        Raises:
            GitHubError: On API errors.
        """

        def _files() -> list[dict[str, Any]]:
            try:
                return [
                    {"filename": f.filename, "patch": f.patch, "status": f.status}
                    for f in self._get_pr(repo_name, pr_number).get_files()
                ]
            except GithubException as e:
                raise _wrap(e, f"list files of PR #{pr_number}") from e

        files = await self._call(_files)
        logger.debug("pr_files_fetched", repo=repo_name, pr=pr_number, files=len(files))
        return files

    async def get_head_sha(self, repo_name: str, pr_number: int) -> str:
        """Return the head commit SHA of a pull request."""

        def _sha() -> str:
            try:
                return str(self._get_pr(repo_name, pr_number).head.sha)
            except GithubException as e:
                raise _wrap(e, f"get head of PR #{pr_number}") from e

        return await self._call(_sha)

    # =========================================================================
    # Review Writes
    # =========================================================================

    async def create_review(
        self,
        repo_name: str,
        pr_number: int,
        commit_id: str,
        body: str,
        event: str,
        comments: list[ValidatedComment],
    ) -> int:
        """Submit a review with inline comments anchored by diff position.

        Returns:
            The id of the created review.

        Raises:
            GitHubError: On API errors.
        """

        def _create() -> int:
            try:
                repo = self.github.get_repo(repo_name)
                pr = repo.get_pull(pr_number)
                review = pr.create_review(
                    commit=repo.get_commit(commit_id),
                    body=body,
                    event=event,
                    comments=[c.to_github() for c in comments],
                )
                return int(review.id)
            except GithubException as e:
                raise _wrap(e, f"create review on PR #{pr_number}") from e

        review_id = await self._call(_create)
        logger.info(
            "review_created",
            repo=repo_name,
            pr=pr_number,
            review_id=review_id,
            comments=len(comments),
        )
        return review_id

    async def add_issue_comment(self, repo_name: str, pr_number: int, body: str) -> int:
        """Post a PR-level comment. Returns the comment id."""

        def _comment() -> int:
            try:
                pr = self._get_pr(repo_name, pr_number)
                return int(pr.create_issue_comment(body).id)
            except GithubException as e:
                raise _wrap(e, f"comment on PR #{pr_number}") from e

        comment_id = await self._call(_comment)
        logger.info("pr_comment_created", repo=repo_name, pr=pr_number, id=comment_id)
        return comment_id
