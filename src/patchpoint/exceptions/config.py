from __future__ import annotations

from typing import Any

from patchpoint.exceptions.base import PatchpointError


class ConfigError(PatchpointError):
    """Configuration could not be loaded, parsed or validated.

    Attributes:
        message: Human-readable error message.
        field: Dotted name of the offending field, when known.
        value: The rejected value, when known.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)
