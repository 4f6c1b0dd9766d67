"""Mock LLM provider for testing and keyless local runs."""

from __future__ import annotations

from oracle_health.core.llm.provider import ProviderResponse


class MockProvider:
    """Mock provider — returns a canned response or raises a configured error.

    ``responses`` are consumed in order; once exhausted, ``response_content``
    is returned. Setting ``error`` makes every call raise it.
    """

    def __init__(
        self,
        response_content: str = "Mock LLM response.",
        responses: list[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.response_content = response_content
        self.responses: list[str] = list(responses or [])
        self.error = error
        self.last_system_message: str = ""
        self.last_user_message: str = ""
        self.call_count: int = 0

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.5,
    ) -> ProviderResponse:
        self.last_system_message = system_message
        self.last_user_message = user_message
        self.call_count += 1
        if self.error is not None:
            raise self.error
        content = self.responses.pop(0) if self.responses else self.response_content
        return ProviderResponse(
            content=content,
            input_tokens=len(system_message.split()) + len(user_message.split()),
            output_tokens=len(content.split()),
            model="mock",
            latency_ms=0.0,
        )
