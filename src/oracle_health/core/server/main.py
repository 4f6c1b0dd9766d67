"""Oracle Health server entry point: ``python -m oracle_health.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from oracle_health.core.config.settings import Settings, get_settings
from oracle_health.core.resilience.policy import policies_from_settings
from oracle_health.core.server.app import create_app

logger = logging.getLogger(__name__)


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def _log_startup(settings: Settings) -> None:
    """Log the AI provider, history mode and per-operation cache/cooldown table."""
    logger.info(
        "Oracle Health on %s:%d (llm_provider=%s, history=%s)",
        settings.oracle_host,
        settings.oracle_port,
        settings.llm_provider,
        "encrypted" if settings.encryption_key else "disabled",
    )
    for operation, policy in sorted(policies_from_settings(settings).items()):
        logger.info(
            "  %-26s ttl=%6.0fs cooldown=%5.0fs",
            operation,
            policy.ttl_seconds,
            policy.cooldown_seconds,
        )


def run() -> None:
    """Start the Oracle Health MCP server with Streamable HTTP transport.

    Raises:
        RuntimeError: If asked to bind a non-loopback host without
            ``ORACLE_ALLOW_INSECURE_BIND``.
    """
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.oracle_log_level.upper(), logging.INFO))

    if not settings.oracle_allow_insecure_bind and not _is_loopback_host(settings.oracle_host):
        raise RuntimeError(
            f"Refusing to expose health data on {settings.oracle_host}: the tools have no "
            "auth layer. Set ORACLE_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    _log_startup(settings)

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.oracle_host,
        port=settings.oracle_port,
    )


if __name__ == "__main__":
    run()
