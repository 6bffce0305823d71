from __future__ import annotations

from patchpoint.exceptions.base import PatchpointError


class ProviderError(PatchpointError):
    """Base class for failures talking to the AI provider.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status returned by the provider, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RetryableTransportError(ProviderError):
    """Transient transport failure that is worth another attempt.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status (429, 502 or 503) if the failure was HTTP level.
        network_code: Network error code such as ``ECONNRESET``.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        network_code: str | None = None,
    ) -> None:
        self.network_code = network_code
        super().__init__(message, status_code=status_code)


class FatalProviderError(ProviderError):
    """Provider failure that retrying cannot fix (auth, bad request, quota)."""


class ProviderHTTPError(ProviderError):
    """Non-success HTTP response from the provider.

    Retryability is decided from ``status_code`` by the retry classifier.

    Attributes:
        message: Human-readable error message.
        status_code: The HTTP status returned.
        body: Response body text, truncated.
    """

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        self.body = body
        super().__init__(message, status_code=status_code)


class MalformedResponseError(ProviderError):
    """The AI answered, but not with the expected findings JSON.

    Attributes:
        message: Human-readable error message.
        raw_response: The unparseable text, kept so it can be surfaced to humans.
    """

    def __init__(self, message: str, raw_response: str = "") -> None:
        self.raw_response = raw_response
        super().__init__(message)
