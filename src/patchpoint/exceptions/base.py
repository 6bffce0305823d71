from __future__ import annotations


class PatchpointError(Exception):
    """Base exception class for all Patchpoint errors.

    Catch this at the CLI boundary to report any library failure while
    letting programming errors propagate.

    Attributes:
        message: Human-readable error message describing what went wrong.
    """

    def __init__(self, message: str) -> None:
        """Initialize the PatchpointError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
