"""Shared constants for diff batching, retries and review rendering."""

from __future__ import annotations

from typing import Final

# =============================================================================
# Token Budget
# =============================================================================

#: Default token ceiling for one group of files sent in a single AI request
MAX_TOKENS_PER_GROUP: Final[int] = 120_000

#: Token estimate used for files that carry no patch (binary or too large)
DEFAULT_FILE_TOKEN_ESTIMATE: Final[int] = 100

#: tiktoken encoding used for token estimates
TOKEN_ENCODING: Final[str] = "cl100k_base"

# =============================================================================
# Retry
# =============================================================================

#: Retries after the first attempt (total attempts = DEFAULT_MAX_RETRIES + 1)
DEFAULT_MAX_RETRIES: Final[int] = 3

#: Base backoff delay in seconds, doubled on every retry
DEFAULT_BASE_DELAY: Final[float] = 1.0

#: Upper bound on a single backoff delay in seconds
DEFAULT_MAX_DELAY: Final[float] = 10.0

#: HTTP status codes that are worth another attempt
RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 502, 503})

#: Network error codes that are worth another attempt
RETRYABLE_NETWORK_CODES: Final[frozenset[str]] = frozenset({"ECONNRESET", "ETIMEDOUT"})

# =============================================================================
# Batching
# =============================================================================

#: Maximum AI calls in flight at once
DEFAULT_BATCH_SIZE: Final[int] = 3

#: Pause between batches in seconds
DEFAULT_INTER_BATCH_DELAY: Final[float] = 0.3

# =============================================================================
# Review Rendering
# =============================================================================

#: Badge rendered in front of each inline comment, keyed by severity value
SEVERITY_BADGES: Final[dict[str, str]] = {
    "high": "\U0001f534",
    "medium": "\U0001f7e1",
    "low": "\U0001f7e2",
}

#: Badge used when a severity has no dedicated entry
UNKNOWN_SEVERITY_BADGE: Final[str] = "ℹ️"

#: Review event used when submitting inline comments
DEFAULT_REVIEW_EVENT: Final[str] = "COMMENT"

# =============================================================================
# AI Provider
# =============================================================================

#: Default chat-completions endpoint
DEFAULT_PROVIDER_ENDPOINT: Final[str] = "https://api.openai.com/v1"

#: Default model identifier
DEFAULT_MODEL: Final[str] = "gpt-4o-mini"

#: Default maximum output tokens per AI response
MAX_OUTPUT_TOKENS: Final[int] = 4096

#: HTTP timeout for a single AI request in seconds
DEFAULT_PROVIDER_TIMEOUT: Final[float] = 120.0
