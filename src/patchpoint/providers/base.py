"""Provider-agnostic AI message types and the provider protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True, slots=True)
class AIMessage:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True, slots=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True, slots=True)
class AIResponse:
    """Text answer from a provider plus its token accounting."""

    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: str | None = None


@runtime_checkable
class AIProvider(Protocol):
    """Anything that can answer a chat-style request.

    Implementations raise :class:`~patchpoint.exceptions.ProviderError`
    subclasses (or errors carrying an HTTP ``status``) so the retry layer
    can classify failures.
    """

    async def send_message(
        self,
        messages: list[AIMessage],
        *,
        response_format: Literal["text", "json"] = "text",
    ) -> AIResponse: ...
