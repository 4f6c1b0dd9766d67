"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Oracle Health server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default: there is no auth layer in front of the tools.
    oracle_host: str = "127.0.0.1"
    oracle_port: int = 8001
    oracle_log_level: str = "info"
    oracle_allow_insecure_bind: bool = False

    # AI text generation
    llm_provider: Literal["anthropic", "openai", "mock"] = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # Resilience (seconds)
    analysis_cache_ttl_seconds: float = 600
    chat_cache_ttl_seconds: float = 60
    feed_cache_ttl_seconds: float = 1800
    live_feed_cache_ttl_seconds: float = 30
    fact_sheet_cache_ttl_seconds: float = 3600
    remote_cooldown_seconds: float = 300

    # Health history (encrypted SQLite); empty key disables persistence
    db_path: str = "~/.oracle_health/history.db"
    encryption_key: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
