"""Chat-completions provider for OpenAI-compatible HTTP endpoints.

Works with OpenAI itself and with self-hosted gateways (Open WebUI, vLLM,
LiteLLM) that expose ``POST {endpoint}/chat/completions``.
"""

from __future__ import annotations

import errno
from typing import Any, Literal

import aiohttp
from aiolimiter import AsyncLimiter

from patchpoint.config import ProviderConfig
from patchpoint.constants import RETRYABLE_NETWORK_CODES
from patchpoint.exceptions import (
    FatalProviderError,
    MalformedResponseError,
    ProviderError,
    ProviderHTTPError,
    RetryableTransportError,
)
from patchpoint.logging import get_logger
from patchpoint.providers.base import AIMessage, AIResponse, TokenUsage

__all__ = ["OpenAICompatibleProvider"]

logger = get_logger(__name__)

#: Characters of an error body kept on ProviderHTTPError
_MAX_ERROR_BODY = 500


class OpenAICompatibleProvider:
    """Send chat requests over aiohttp.

    A fresh session is opened per request; review runs make few, large
    calls so connection reuse buys little.

    Attributes:
        config: Provider settings (endpoint, model, key, limits).
    """

    def __init__(
        self,
        config: ProviderConfig,
        rate_limiter: AsyncLimiter | None = None,
    ) -> None:
        self.config = config
        self._rate_limiter = rate_limiter
        if config.requests_per_minute is not None and rate_limiter is None:
            self._rate_limiter = AsyncLimiter(config.requests_per_minute, 60.0)

    @property
    def url(self) -> str:
        return f"{self.config.endpoint.rstrip('/')}/chat/completions"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            token = self.config.api_key.get_secret_value()
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _payload(
        self, messages: list[AIMessage], response_format: Literal["text", "json"]
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "max_tokens": self.config.max_output_tokens,
            "temperature": self.config.temperature,
        }
        if response_format == "json":
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def send_message(
        self,
        messages: list[AIMessage],
        *,
        response_format: Literal["text", "json"] = "text",
    ) -> AIResponse:
        """Send one chat request.

        Raises:
            ProviderHTTPError: For any non-2xx response.
            FatalProviderError: For 401/403, which no retry can fix.
            RetryableTransportError: When the connection drops or times out.
            MalformedResponseError: When the body is not a chat completion.
        """
        if self._rate_limiter is not None:
            async with self._rate_limiter:
                return await self._post(messages, response_format)
        return await self._post(messages, response_format)

    async def _post(
        self, messages: list[AIMessage], response_format: Literal["text", "json"]
    ) -> AIResponse:
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        try:
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.post(
                    self.url,
                    json=self._payload(messages, response_format),
                    headers=self._headers(),
                ) as resp,
            ):
                if resp.status in (401, 403):
                    raise FatalProviderError(
                        f"Provider rejected credentials ({resp.status})",
                        status_code=resp.status,
                    )
                if resp.status >= 400:
                    body = (await resp.text())[:_MAX_ERROR_BODY]
                    raise ProviderHTTPError(
                        f"Provider returned HTTP {resp.status}",
                        status_code=resp.status,
                        body=body,
                    )
                data = await resp.json(content_type=None)
        except TimeoutError as e:
            raise RetryableTransportError(
                f"Request to {self.url} timed out", network_code="ETIMEDOUT"
            ) from e
        except aiohttp.ServerDisconnectedError as e:
            raise RetryableTransportError(
                f"Connection to {self.url} was reset", network_code="ECONNRESET"
            ) from e
        except aiohttp.ClientOSError as e:
            code = errno.errorcode.get(e.errno or 0)
            if code in RETRYABLE_NETWORK_CODES:
                raise RetryableTransportError(
                    f"Connection to {self.url} failed: {e}", network_code=code
                ) from e
            raise ProviderError(f"Connection to {self.url} failed: {e}") from e
        except (ValueError, aiohttp.ContentTypeError) as e:
            raise MalformedResponseError(f"Provider response was not JSON: {e}") from e

        return self._to_response(data)

    def _to_response(self, data: Any) -> AIResponse:
        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                "Provider response has no choices[0].message.content",
                raw_response=str(data)[:_MAX_ERROR_BODY],
            ) from e
        usage = data.get("usage") or {}
        token_usage = TokenUsage(
            prompt_tokens=int(usage.get("prompt_tokens", 0)),
            completion_tokens=int(usage.get("completion_tokens", 0)),
            total_tokens=int(usage.get("total_tokens", 0)),
        )
        logger.debug(
            "provider_response",
            model=data.get("model"),
            total_tokens=token_usage.total_tokens,
        )
        return AIResponse(content=content, usage=token_usage, model=data.get("model"))
