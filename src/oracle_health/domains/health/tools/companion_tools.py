"""MCP tools for the AI companion chat, community disease feeds and disease search."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from oracle_health.domains.health.analysis.requests import (
    COACH_PERSONALITIES,
    ChatTurn,
    CoachSettings,
)

if TYPE_CHECKING:
    from oracle_health.domains.health.analysis.service import HealthAIService

logger = logging.getLogger(__name__)


def _parse_history(history_json: str) -> list[ChatTurn]:
    """Parse ``[{"sender": "user"|"bot", "text": "..."}]``.

    Raises:
        ValueError: If the JSON is malformed.
    """
    if not history_json.strip():
        return []
    try:
        raw = json.loads(history_json)
    except json.JSONDecodeError as exc:
        raise ValueError(f"history_json is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise ValueError("history_json must be a JSON array")

    turns: list[ChatTurn] = []
    for item in raw:
        if not isinstance(item, dict) or item.get("sender") not in ("user", "bot"):
            raise ValueError("each history item needs sender 'user' or 'bot' and text")
        turns.append(ChatTurn(sender=item["sender"], text=str(item.get("text", ""))))
    return turns


def register_companion_tools(mcp: FastMCP, service: HealthAIService) -> None:
    """Register companion chat, disease feed and disease search tools on the MCP server."""

    @mcp.tool
    async def companion_chat(
        ctx: Context,
        message: str,
        history_json: str = "",
        coach_name: str = "Oracle",
        personality: str = "Empathetic & Encouraging",
    ) -> str:
        """Chat with your AI health companion.

        Args:
            message: Your message.
            history_json: Optional JSON array of earlier turns
                ([{"sender": "user"|"bot", "text": "..."}]); the last 5 are used.
            coach_name: Name of your companion.
            personality: One of 'Empathetic & Encouraging', 'Direct & Data-Driven',
                'Calm & Reassuring', 'Energetic & Motivational'.
        """
        if not message.strip():
            return json.dumps({"status": "error", "error": "message must not be empty"})
        if personality not in COACH_PERSONALITIES:
            return json.dumps({
                "status": "error",
                "error": f"unknown personality: {personality}",
                "allowed": list(COACH_PERSONALITIES),
            })
        try:
            history = _parse_history(history_json)
        except ValueError as exc:
            logger.info("Rejected companion chat history: %s", exc)
            return json.dumps({"status": "error", "error": str(exc)})

        coach = CoachSettings(name=coach_name or "Oracle", personality=personality)
        reply = await service.companion_reply(message, history, coach)
        return json.dumps({
            "status": "ok",
            "reply": reply.value,
            "reply_fallback": reply.is_fallback,
        })

    @mcp.tool
    async def trending_diseases(ctx: Context, country: str, city: str) -> str:
        """List communicable diseases that may be trending in your city.

        Case numbers are simulated estimates, not surveillance data.

        Args:
            country: Country name.
            city: City name.
        """
        diseases = await service.trending_diseases(country, city)
        return json.dumps({
            "status": "ok",
            "location": f"{city}, {country}",
            "diseases": [asdict(d) for d in diseases],
        })

    @mcp.tool
    async def global_trending_diseases(ctx: Context, country: str) -> str:
        """List globally trending communicable diseases with country estimates.

        Args:
            country: Country to estimate monthly cases for.
        """
        stats = await service.global_trending_diseases(country)
        return json.dumps({
            "status": "ok",
            "country": country,
            "diseases": [asdict(s) for s in stats],
        })

    @mcp.tool
    async def city_live_feed(ctx: Context, city: str) -> str:
        """Latest simulated disease reports for your city (poll every minute or two).

        Args:
            city: City name.
        """
        if not city.strip():
            return json.dumps({"status": "error", "error": "city must not be empty"})
        feed = await service.city_live_feed(city)
        return json.dumps({
            "status": "ok",
            "city": city.strip(),
            "events": [asdict(event) for event in feed.value],
            "feed_fallback": feed.is_fallback,
        })

    @mcp.tool
    async def disease_stats(ctx: Context, disease: str, country: str = "") -> str:
        """Look up a disease: global case estimate, symptoms, drugs and WHO guidance.

        Args:
            disease: Disease name to search for.
            country: Optional country for context.
        """
        if not disease.strip():
            return json.dumps({"status": "error", "error": "disease must not be empty"})
        stats = await service.disease_stats(disease, country)
        return json.dumps({
            "status": "ok",
            "stats": stats.value.to_dict(),
            "stats_fallback": stats.is_fallback,
        })
