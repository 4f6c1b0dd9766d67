"""Anthropic Claude provider."""

from __future__ import annotations

import time

from oracle_health.core.llm.provider import (
    OVERLOAD_STATUS_CODES,
    ProviderError,
    ProviderOverloadedError,
    ProviderResponse,
)


class AnthropicProvider:
    """Claude provider using the Anthropic SDK.

    SDK rate-limit and overload responses surface as
    ``ProviderOverloadedError``; every other API failure as ``ProviderError``.
    """

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-20250514") -> None:
        import anthropic

        self._sdk = anthropic
        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.5,
    ) -> ProviderResponse:
        start = time.monotonic()
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_message,
                messages=[{"role": "user", "content": user_message}],
            )
        except self._sdk.RateLimitError as exc:
            raise ProviderOverloadedError(f"Anthropic rate limit: {exc}") from exc
        except self._sdk.APIStatusError as exc:
            if exc.status_code in OVERLOAD_STATUS_CODES:
                raise ProviderOverloadedError(f"Anthropic overloaded: {exc}") from exc
            raise ProviderError(f"Anthropic request failed: {exc}") from exc
        except self._sdk.APIError as exc:
            raise ProviderError(f"Anthropic request failed: {exc}") from exc
        elapsed_ms = (time.monotonic() - start) * 1000

        content = response.content[0].text if response.content else ""
        return ProviderResponse(
            content=content,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=self.model,
            latency_ms=elapsed_ms,
        )
