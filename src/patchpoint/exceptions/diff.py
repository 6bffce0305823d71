from __future__ import annotations

from patchpoint.exceptions.base import PatchpointError


class DiffParseError(PatchpointError):
    """A patch contained no recognizable hunk header.

    Only the affected file is skipped; a review run continues with the rest.

    Attributes:
        message: Human-readable error message.
        filename: Path of the file whose patch could not be parsed.
    """

    def __init__(self, message: str, filename: str | None = None) -> None:
        self.filename = filename
        super().__init__(message)
