"""AI provider interface and implementations."""

from __future__ import annotations

from patchpoint.providers.base import AIMessage, AIProvider, AIResponse, TokenUsage
from patchpoint.providers.openai_compat import OpenAICompatibleProvider

__all__ = [
    "AIMessage",
    "AIProvider",
    "AIResponse",
    "TokenUsage",
    "OpenAICompatibleProvider",
]
