"""Oracle Health MCP Server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from oracle_health.core.config.settings import get_settings
from oracle_health.core.llm.client import HealthLLMClient
from oracle_health.core.llm.provider import LLMProvider, create_provider
from oracle_health.core.resilience.caller import ResilientCaller
from oracle_health.core.resilience.cooldown import CooldownRegistry
from oracle_health.core.resilience.policy import policies_from_settings
from oracle_health.core.resilience.store import SessionCacheStore
from oracle_health.core.storage.database import HealthDatabase
from oracle_health.core.storage.encryption import EncryptionError, PayloadCipher
from oracle_health.core.storage.history import HealthHistoryRepository
from oracle_health.domains.health.analysis.service import HealthAIService
from oracle_health.domains.health.tools.companion_tools import register_companion_tools
from oracle_health.domains.health.tools.health_report_tools import (
    register_health_report_tools,
)

logger = logging.getLogger(__name__)


def create_app(
    *,
    provider_override: LLMProvider | None = None,
    repository_override: HealthHistoryRepository | None = None,
    caller_override: ResilientCaller | None = None,
) -> FastMCP:
    """Create and configure the Oracle Health MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Creates the AI provider and client
    3. Creates the session cache + cooldown registry behind every AI call
    4. Initializes the encrypted health history (when a key is configured)
    5. Registers all tools
    """
    settings = get_settings()

    server = FastMCP(
        "Oracle Health",
        instructions=(
            "Personal health tracking server. Scores self-reported vitals into "
            "rule-based disease risk levels and adds AI-written wellness guidance. "
            "Not a diagnostic tool."
        ),
    )

    # --- AI provider ---
    if provider_override is not None:
        provider = provider_override
        provider_name = "override"
    else:
        if settings.llm_provider == "mock":
            provider_name, api_key, model = "mock", "", ""
        elif settings.llm_provider == "anthropic":
            api_key = settings.anthropic_api_key
            model = settings.anthropic_model
            provider_name = "anthropic" if api_key else "mock"
        elif settings.llm_provider == "openai":
            api_key = settings.openai_api_key
            model = settings.openai_model
            provider_name = "openai" if api_key else "mock"
        else:  # pragma: no cover
            raise ValueError(f"Unknown LLM provider: {settings.llm_provider!r}")

        if provider_name == "mock" and settings.llm_provider != "mock":
            logger.warning(
                "No API key configured for provider '%s'; falling back to mock provider",
                settings.llm_provider,
            )
        provider = create_provider(provider_name=provider_name, api_key=api_key, model=model)

    llm_client = HealthLLMClient(provider=provider, provider_name=provider_name)

    # --- Resilience: one cache + breaker registry for the whole session ---
    if caller_override is not None:
        caller = caller_override
    else:
        caller = ResilientCaller(
            SessionCacheStore(),
            CooldownRegistry(),
            policies=policies_from_settings(settings),
        )

    service = HealthAIService(llm_client, caller)

    # --- Encrypted health history ---
    repository: HealthHistoryRepository | None = None
    if repository_override is not None:
        repository = repository_override
    elif settings.encryption_key:
        try:
            cipher = PayloadCipher(settings.encryption_key)
            health_db = HealthDatabase(settings.db_path)
            health_db.initialize()
            repository = HealthHistoryRepository(health_db, cipher)
            logger.info(
                "Health history initialized: %s (schema v%d)",
                settings.db_path,
                health_db.get_schema_version(),
            )
        except EncryptionError as exc:
            logger.error("Failed to initialize storage: %s", exc)
            logger.warning("Continuing without persistence — history will not be stored")
    else:
        logger.info(
            "No ENCRYPTION_KEY configured — running without history. "
            "Set ENCRYPTION_KEY to keep health records."
        )

    @server.tool
    def health_check() -> dict:
        """Check server health and report AI breaker state."""
        status = {
            "status": "ok",
            "server": "Oracle Health",
            "version": "0.1.0",
            "llm_provider": provider_name,
            "cooling_down": sorted(caller.cooldowns.active()),
            "storage_enabled": repository is not None,
        }
        if repository is not None:
            status["records_stored"] = repository.count_records()
        return status

    register_health_report_tools(server, service, repository)
    register_companion_tools(server, service)
    logger.info("Health report and companion tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when accessed (tests import create_app directly).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
