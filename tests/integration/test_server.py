"""Integration tests for the Oracle Health MCP server."""

from __future__ import annotations

import asyncio
import json

import pytest
from fastmcp import Client

from oracle_health.core.llm.provider import ProviderOverloadedError
from oracle_health.core.llm.providers.mock import MockProvider
from oracle_health.core.server.app import create_app
from oracle_health.domains.health.analysis import fallbacks


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


ALL_EXPECTED_TOOLS = [
    "health_check",
    "health_risk_report",
    "health_progress_analysis",
    "disease_fact_sheet",
    "companion_chat",
    "trending_diseases",
    "global_trending_diseases",
    "city_live_feed",
    "disease_stats",
]

HEALTHY_VITALS = {
    "systolic_bp": 115,
    "diastolic_bp": 75,
    "blood_glucose": 90,
    "cholesterol": 180,
    "height_cm": 175,
    "weight_kg": 70,
    "age": 35,
}


def _payload(result) -> dict:
    """Decode the JSON string a tool returned."""
    blocks = getattr(result, "content", result)
    return json.loads(blocks[0].text)


@pytest.fixture
def provider():
    return MockProvider(response_content="Key Observations: steady. Recommendations: keep it up.")


@pytest.fixture
def client(provider):
    return Client(create_app(provider_override=provider))


@pytest.fixture
def stored_client(provider, history_repository):
    return Client(create_app(provider_override=provider, repository_override=history_repository))


def test_server_lists_all_tools(client):
    async def _check():
        async with client:
            tool_names = [t.name for t in await client.list_tools()]
            for expected in ALL_EXPECTED_TOOLS:
                assert expected in tool_names, f"Missing tool: {expected}"
    _run(_check())


def test_health_check_reports_breaker_and_storage(client):
    async def _check():
        async with client:
            result = await client.call_tool("health_check", {})
            status = _payload(result)
            assert status["status"] == "ok"
            assert status["llm_provider"] == "override"
            assert status["cooling_down"] == []
            assert status["storage_enabled"] is False
    _run(_check())


def test_health_risk_report_returns_three_predictions(client):
    async def _check():
        async with client:
            payload = _payload(await client.call_tool("health_risk_report", HEALTHY_VITALS))
            assert payload["status"] == "ok"
            assert [p["disease"] for p in payload["predictions"]] == [
                "Type 2 Diabetes",
                "Cardiovascular Disease",
                "Hypertension",
            ]
            assert all(p["risk_level"] == "Low" for p in payload["predictions"])
            assert payload["recommendations"].startswith("Key Observations")
            assert payload["recommendations_fallback"] is False
            assert payload["stored"] is False
    _run(_check())


def test_health_risk_report_rejects_negative_age(client):
    async def _check():
        async with client:
            payload = _payload(
                await client.call_tool("health_risk_report", {**HEALTHY_VITALS, "age": -1})
            )
            assert payload["status"] == "error"
    _run(_check())


def test_overload_serves_fallback_and_shows_cooldown(provider, client):
    provider.error = ProviderOverloadedError("429 RESOURCE_EXHAUSTED")

    async def _check():
        async with client:
            payload = _payload(await client.call_tool("health_risk_report", HEALTHY_VITALS))
            assert payload["recommendations"] == fallbacks.HEALTH_ANALYSIS_FALLBACK
            assert payload["recommendations_fallback"] is True
            status = _payload(await client.call_tool("health_check", {}))
            assert status["cooling_down"] == ["health_analysis"]
    _run(_check())


def test_progress_without_storage(client):
    async def _check():
        async with client:
            payload = _payload(await client.call_tool("health_progress_analysis", {}))
            assert payload["status"] == "storage_disabled"
    _run(_check())


def test_progress_after_two_reports(stored_client):
    async def _check():
        async with stored_client:
            first = _payload(await stored_client.call_tool("health_risk_report", HEALTHY_VITALS))
            assert first["stored"] is True
            payload = _payload(await stored_client.call_tool("health_progress_analysis", {}))
            assert payload["status"] == "insufficient_data"
            assert payload["records_available"] == 1

            await stored_client.call_tool(
                "health_risk_report", {**HEALTHY_VITALS, "blood_glucose": 110}
            )
            payload = _payload(
                await stored_client.call_tool("health_progress_analysis", {"age": 35})
            )
            assert payload["status"] == "ok"
            assert payload["records_analyzed"] == 2
            assert len(payload["history"]) == 2
    _run(_check())


def test_companion_chat_validates_personality(client):
    async def _check():
        async with client:
            payload = _payload(await client.call_tool(
                "companion_chat", {"message": "hi", "personality": "Sarcastic"}
            ))
            assert payload["status"] == "error"
            assert "Calm & Reassuring" in payload["allowed"]
    _run(_check())


def test_companion_chat_replies(client):
    async def _check():
        async with client:
            payload = _payload(await client.call_tool("companion_chat", {"message": "hello"}))
            assert payload["status"] == "ok"
            assert payload["reply_fallback"] is False
    _run(_check())


def test_trending_diseases_fallback_on_prose(client):
    async def _check():
        async with client:
            payload = _payload(await client.call_tool(
                "trending_diseases", {"country": "India", "city": "Pune"}
            ))
            assert payload["location"] == "Pune, India"
            assert [d["name"] for d in payload["diseases"]][0] == "Seasonal Influenza"
    _run(_check())


def test_progress_with_rotated_key_returns_error(provider, history_repository, health_db):
    from oracle_health.core.storage.encryption import PayloadCipher
    from oracle_health.core.storage.history import HealthHistoryRepository

    rotated = HealthHistoryRepository(health_db, PayloadCipher(PayloadCipher.generate_key()))
    client = Client(create_app(provider_override=provider, repository_override=history_repository))
    rotated_client = Client(create_app(provider_override=provider, repository_override=rotated))

    async def _check():
        async with client:
            await client.call_tool("health_risk_report", HEALTHY_VITALS)
            await client.call_tool("health_risk_report", HEALTHY_VITALS)
        async with rotated_client:
            payload = _payload(await rotated_client.call_tool("health_progress_analysis", {}))
            assert payload["status"] == "error"
            assert "decrypted" in payload["error"]
    _run(_check())


def test_city_live_feed_serves_empty_fallback_on_prose(client):
    async def _check():
        async with client:
            payload = _payload(await client.call_tool("city_live_feed", {"city": "Pune"}))
            assert payload["status"] == "ok"
            assert payload["events"] == []
            assert payload["feed_fallback"] is True
            error = _payload(await client.call_tool("city_live_feed", {"city": " "}))
            assert error["status"] == "error"
    _run(_check())


def test_disease_stats_tool(provider, client):
    provider.response_content = json.dumps({
        "disease_name": "Dengue",
        "total_global_cases": 4000000,
        "symptoms": ["Fever"],
        "recognized_drugs": [],
        "prevention": ["Remove standing water"],
        "treatment": ["Fluids"],
    })

    async def _check():
        async with client:
            payload = _payload(await client.call_tool("disease_stats", {"disease": "Dengue"}))
            assert payload["status"] == "ok"
            assert payload["stats"]["total_global_cases"] == 4000000
            assert payload["stats_fallback"] is False
    _run(_check())
