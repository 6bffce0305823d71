"""Patchpoint exception hierarchy.

All exceptions can be imported from this package:
    from patchpoint.exceptions import DiffParseError, GitHubError
"""

from __future__ import annotations

from patchpoint.exceptions.base import PatchpointError
from patchpoint.exceptions.config import ConfigError
from patchpoint.exceptions.diff import DiffParseError
from patchpoint.exceptions.github import (
    GitHubAuthError,
    GitHubCLINotFoundError,
    GitHubError,
)
from patchpoint.exceptions.provider import (
    FatalProviderError,
    MalformedResponseError,
    ProviderError,
    ProviderHTTPError,
    RetryableTransportError,
)
from patchpoint.exceptions.review import ReviewRunError

__all__ = [
    "PatchpointError",
    "ConfigError",
    "DiffParseError",
    "GitHubError",
    "GitHubAuthError",
    "GitHubCLINotFoundError",
    "ProviderError",
    "RetryableTransportError",
    "FatalProviderError",
    "ProviderHTTPError",
    "MalformedResponseError",
    "ReviewRunError",
]
