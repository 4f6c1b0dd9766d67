"""Per-operation TTL and cooldown configuration table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oracle_health.core.config.settings import Settings

DEFAULT_COOLDOWN_SECONDS = 300.0

# Operation names (one cooldown marker each)
HEALTH_ANALYSIS = "health_analysis"
PROGRESS_ANALYSIS = "progress_analysis"
COMPANION_CHAT = "companion_chat"
TRENDING_DISEASES = "trending_diseases"
GLOBAL_TRENDING_DISEASES = "global_trending_diseases"
DISEASE_FACT_SHEET = "disease_fact_sheet"
CITY_LIVE_FEED = "city_live_feed"
DISEASE_STATS = "disease_stats"


@dataclass(frozen=True)
class ResiliencePolicy:
    """How long results stay fresh and how long an overload suppresses calls."""

    ttl_seconds: float
    cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS


DEFAULT_POLICIES: dict[str, ResiliencePolicy] = {
    HEALTH_ANALYSIS: ResiliencePolicy(ttl_seconds=600),
    PROGRESS_ANALYSIS: ResiliencePolicy(ttl_seconds=600),
    COMPANION_CHAT: ResiliencePolicy(ttl_seconds=60, cooldown_seconds=120),
    TRENDING_DISEASES: ResiliencePolicy(ttl_seconds=1800),
    GLOBAL_TRENDING_DISEASES: ResiliencePolicy(ttl_seconds=1800),
    DISEASE_FACT_SHEET: ResiliencePolicy(ttl_seconds=3600),
    # Polled live data: short freshness window
    CITY_LIVE_FEED: ResiliencePolicy(ttl_seconds=30),
    DISEASE_STATS: ResiliencePolicy(ttl_seconds=3600),
}


def policies_from_settings(settings: Settings) -> dict[str, ResiliencePolicy]:
    """Build the policy table from configured TTLs and cooldown."""
    cooldown = settings.remote_cooldown_seconds
    analysis = ResiliencePolicy(settings.analysis_cache_ttl_seconds, cooldown)
    feed = ResiliencePolicy(settings.feed_cache_ttl_seconds, cooldown)
    return {
        HEALTH_ANALYSIS: analysis,
        PROGRESS_ANALYSIS: analysis,
        # Chat backs off for less time than the heavier analyses
        COMPANION_CHAT: ResiliencePolicy(settings.chat_cache_ttl_seconds, min(cooldown, 120)),
        TRENDING_DISEASES: feed,
        GLOBAL_TRENDING_DISEASES: feed,
        DISEASE_FACT_SHEET: ResiliencePolicy(settings.fact_sheet_cache_ttl_seconds, cooldown),
        CITY_LIVE_FEED: ResiliencePolicy(settings.live_feed_cache_ttl_seconds, cooldown),
        DISEASE_STATS: ResiliencePolicy(settings.fact_sheet_cache_ttl_seconds, cooldown),
    }
