"""Text helpers: token estimation and truncation."""

from __future__ import annotations

from functools import lru_cache

import tiktoken

from patchpoint.constants import TOKEN_ENCODING

__all__ = [
    "estimate_tokens",
    "truncate_text",
]


@lru_cache(maxsize=1)
def _encoder() -> tiktoken.Encoding:
    # Loaded on first use; the encoding file may need to be downloaded.
    return tiktoken.get_encoding(TOKEN_ENCODING)


def estimate_tokens(text: str) -> int:
    """Estimate token count for text using tiktoken.

    cl100k_base is an approximation for non-OpenAI models, good enough for
    budget decisions.

    Example:
        >>> estimate_tokens("")
        0
    """
    if not text:
        return 0
    return len(_encoder().encode(text))


def truncate_text(text: str, max_chars: int, marker: str = "\n... (truncated)") -> str:
    """Cut ``text`` to ``max_chars`` characters, appending ``marker`` when cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + marker
