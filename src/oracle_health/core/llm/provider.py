"""LLM provider protocol — abstract interface for AI text generation calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# HTTP statuses that signal backpressure from the remote service
# (429 rate limited, 503 unavailable, 529 overloaded).
OVERLOAD_STATUS_CODES = frozenset({429, 503, 529})

_OVERLOAD_MARKERS = ("resource_exhausted", "rate limit", "rate_limit", "overloaded", "quota")


@dataclass
class ProviderResponse:
    """Response from an LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    latency_ms: float


class ProviderError(Exception):
    """Base exception for failed provider calls."""


class ProviderOverloadedError(ProviderError):
    """The provider is rate limiting or out of capacity."""


def is_overload_error(exc: BaseException) -> bool:
    """Return True when ``exc`` signals rate limiting / resource exhaustion.

    Recognizes ``ProviderOverloadedError``, any exception carrying a
    ``status_code`` of 429, 503 or 529 (both SDKs expose one), and messages
    such as ``RESOURCE_EXHAUSTED`` or "rate limit".
    """
    if isinstance(exc, ProviderOverloadedError):
        return True
    status = getattr(exc, "status_code", None)
    if isinstance(status, int) and status in OVERLOAD_STATUS_CODES:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _OVERLOAD_MARKERS)


@runtime_checkable
class LLMProvider(Protocol):
    """Abstract interface for AI text generation calls."""

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.5,
    ) -> ProviderResponse: ...


def create_provider(
    provider_name: str,
    api_key: str = "",
    model: str = "",
) -> LLMProvider:
    """Factory function to create an LLM provider by name.

    Args:
        provider_name: "anthropic", "openai", or "mock"
        api_key: API key for the provider.
        model: Model identifier override.

    Returns:
        An LLMProvider instance.
    """
    if provider_name == "anthropic":
        from oracle_health.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model or "claude-sonnet-4-20250514")
    elif provider_name == "openai":
        from oracle_health.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model or "gpt-4o")
    elif provider_name == "mock":
        from oracle_health.core.llm.providers.mock import MockProvider

        return MockProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
