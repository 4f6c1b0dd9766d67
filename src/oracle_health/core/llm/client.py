"""Health LLM client — the bridge between analysis requests and providers."""

from __future__ import annotations

import logging
from typing import Any

from oracle_health.core.llm.provider import LLMProvider, ProviderError, ProviderResponse
from oracle_health.core.llm.response import (
    ResponseParseError,
    extract_json_list,
    extract_json_object,
)
from oracle_health.core.llm.system_prompt import build_full_system_prompt

logger = logging.getLogger(__name__)


class LLMResponseError(ProviderError):
    """The provider answered, but not in the expected shape."""


class HealthLLMClient:
    """Invokes the AI provider with the companion system prompt.

    Provider errors propagate unchanged so the resilience layer can tell
    overload apart from other failures.
    """

    def __init__(self, provider: LLMProvider, provider_name: str = "") -> None:
        self.provider = provider
        self.provider_name = provider_name or type(provider).__name__

    async def complete(
        self,
        task_instructions: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.5,
    ) -> str:
        """Generate free text for one request."""
        response: ProviderResponse = await self.provider.generate(
            system_message=build_full_system_prompt(task_instructions),
            user_message=user_message,
            max_tokens=max_tokens,
            temperature=temperature,
        )

        logger.info(
            "AI call: model=%s, tokens=%d+%d, latency=%.0fms",
            response.model,
            response.input_tokens,
            response.output_tokens,
            response.latency_ms,
        )

        content = response.content.strip()
        if not content:
            raise LLMResponseError(f"Empty response from model {response.model}")
        return content

    async def complete_json_list(
        self,
        task_instructions: str,
        user_message: str,
        required_keys: tuple[str, ...] = (),
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ) -> list[dict[str, Any]]:
        """Generate and parse a JSON array of objects.

        Raises:
            LLMResponseError: If the output is not a valid array of objects
                with ``required_keys``.
        """
        content = await self.complete(
            task_instructions,
            user_message,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        try:
            return extract_json_list(content, required_keys)
        except ResponseParseError as exc:
            raise LLMResponseError(str(exc)) from exc

    async def complete_json_object(
        self,
        task_instructions: str,
        user_message: str,
        required_keys: tuple[str, ...] = (),
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ) -> dict[str, Any]:
        """Generate and parse one JSON object.

        Raises:
            LLMResponseError: If the output is not an object with ``required_keys``.
        """
        content = await self.complete(
            task_instructions,
            user_message,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        try:
            return extract_json_object(content, required_keys)
        except ResponseParseError as exc:
            raise LLMResponseError(str(exc)) from exc
