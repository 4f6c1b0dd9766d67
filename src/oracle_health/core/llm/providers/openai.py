"""OpenAI GPT provider."""

from __future__ import annotations

import time

from oracle_health.core.llm.provider import (
    OVERLOAD_STATUS_CODES,
    ProviderError,
    ProviderOverloadedError,
    ProviderResponse,
)


class OpenAIProvider:
    """OpenAI provider using the OpenAI SDK."""

    def __init__(self, api_key: str, model: str = "gpt-4o") -> None:
        import openai

        self._sdk = openai
        self.client = openai.AsyncOpenAI(api_key=api_key)
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
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[
                    {"role": "system", "content": system_message},
                    {"role": "user", "content": user_message},
                ],
            )
        except self._sdk.RateLimitError as exc:
            # Also raised for exhausted quota (insufficient_quota)
            raise ProviderOverloadedError(f"OpenAI rate limit: {exc}") from exc
        except self._sdk.APIStatusError as exc:
            if exc.status_code in OVERLOAD_STATUS_CODES:
                raise ProviderOverloadedError(f"OpenAI overloaded: {exc}") from exc
            raise ProviderError(f"OpenAI request failed: {exc}") from exc
        except self._sdk.APIError as exc:
            raise ProviderError(f"OpenAI request failed: {exc}") from exc
        elapsed_ms = (time.monotonic() - start) * 1000

        choice = response.choices[0] if response.choices else None
        content = choice.message.content or "" if choice else ""
        usage = response.usage
        return ProviderResponse(
            content=content,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self.model,
            latency_ms=elapsed_ms,
        )
