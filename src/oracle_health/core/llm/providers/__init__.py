"""LLM provider implementations."""

from oracle_health.core.llm.providers.anthropic import AnthropicProvider
from oracle_health.core.llm.providers.mock import MockProvider
from oracle_health.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "MockProvider", "OpenAIProvider"]
